"""Exceptions raised by the ensemble and sync layers."""


class AuraCastError(Exception):
    pass


class InvalidInput(AuraCastError, ValueError):
    pass


class InsufficientData(AuraCastError):
    """Series too short for a meaningful mean/std."""

    def __init__(self, required: int, available: int):
        super().__init__(
            f"Insufficient historical data: need at least {required} points, got {available}"
        )
        self.required = required
        self.available = available


class LedgerFull(AuraCastError):
    pass


class MutationError(AuraCastError):
    """Remote store rejected a mutation.

    ``server_data`` is the record the store actually holds, when it
    reports one.
    """

    def __init__(self, message: str, server_data: dict | None = None):
        super().__init__(message)
        self.server_data = server_data
