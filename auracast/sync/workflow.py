"""Apply-locally-then-mutate workflow around the ledger.

The ledger itself never waits on the network; these coroutines do, and
settle the ledger entry with whatever the store answered.
"""

import asyncio
import logging
from typing import Any

from auracast.config import MUTATION_TIMEOUT_S, MUTATION_RETRIES, MUTATION_BACKOFF_S
from auracast.errors import MutationError
from auracast.sync.ledger import OptimisticLedger, UpdateKind
from auracast.sync.resolver import ResolutionStrategy, Strategy
from auracast.sync.store import RemoteStore, StoreOperation, COLLECTIONS

logger = logging.getLogger(__name__)


async def submit_optimistic(ledger: OptimisticLedger,
                            store: RemoteStore,
                            op: StoreOperation,
                            args: dict,
                            *,
                            user_id: str,
                            kind: UpdateKind = UpdateKind.CREATE,
                            data: Any = None,
                            previous_data: Any = None,
                            resolution: ResolutionStrategy | None = None,
                            timeout: float | None = MUTATION_TIMEOUT_S,
                            retries: int = MUTATION_RETRIES,
                            backoff: float = MUTATION_BACKOFF_S) -> str:
    """Apply ``data`` to the ledger, then run the remote mutation.

    Failures without server data (including timeouts) are retried up to
    ``retries`` times with exponential backoff before the update is
    dropped. A rejection carrying server data is not retried; it becomes
    a conflict straight away. Cancelling the coroutine settles the update
    as a failure without data before the cancellation propagates.

    Returns the update id.
    """
    update_id = ledger.apply_update(
        kind=kind,
        collection=COLLECTIONS.get(op, op.value),
        data=args if data is None else data,
        user_id=user_id,
        previous_data=previous_data,
        resolution=resolution,
    )

    try:
        return await _mutate_with_retries(ledger, store, op, args, update_id, timeout, retries, backoff)
    except asyncio.CancelledError:
        # Caller gave up (e.g. its own timeout); settle as a failure without data
        ledger.resolve_update(update_id, False)
        raise


async def _mutate_with_retries(ledger, store, op, args, update_id, timeout, retries, backoff) -> str:
    attempt = 0
    while True:
        try:
            await asyncio.wait_for(store.mutate(op, args), timeout)
        except MutationError as e:
            if e.server_data is not None:
                ledger.resolve_update(update_id, False, e.server_data)
                return update_id
            error = e
        except Exception as e:
            error = e
        else:
            ledger.resolve_update(update_id, True)
            return update_id

        if attempt >= retries:
            logger.warning("%s failed after %d attempts: %s", op.value, attempt + 1, error)
            ledger.resolve_update(update_id, False)
            return update_id

        delay = backoff * (2 ** attempt)
        attempt += 1
        logger.info("%s failed (%s), retry %d/%d in %.2fs", op.value, error, attempt, retries, delay)
        await asyncio.sleep(delay)


async def add_annotation(ledger: OptimisticLedger, store: RemoteStore,
                         session_id: str, annotation: dict, user_id: str, **kwargs) -> str:
    args = {"session_id": session_id, **annotation}
    return await submit_optimistic(
        ledger, store, StoreOperation.ADD_ANNOTATION, args,
        user_id=user_id, data=annotation,
        resolution=ResolutionStrategy(Strategy.LAST_WRITER_WINS), **kwargs,
    )


async def send_chat_message(ledger: OptimisticLedger, store: RemoteStore,
                            session_id: str, message: str, user_id: str,
                            message_type: str = "text", **kwargs) -> str:
    data = {"message": message, "type": message_type}
    return await submit_optimistic(
        ledger, store, StoreOperation.SEND_CHAT_MESSAGE,
        {"session_id": session_id, **data},
        user_id=user_id, data=data,
        resolution=ResolutionStrategy(Strategy.LAST_WRITER_WINS), **kwargs,
    )


async def update_shared_filters(ledger: OptimisticLedger, store: RemoteStore,
                                session_id: str, filters: dict, user_id: str,
                                version: int | None = None, **kwargs) -> str:
    """Shared filters merge field-wise with whatever the session already holds."""
    args = {"key": session_id, "session_id": session_id, "filters": filters}
    if version is not None:
        args["version"] = version
    return await submit_optimistic(
        ledger, store, StoreOperation.UPDATE_SHARED_FILTERS, args,
        user_id=user_id, kind=UpdateKind.UPDATE, data={"filters": filters},
        resolution=ResolutionStrategy(
            Strategy.MERGE,
            merge_function=lambda local, remote: {
                "filters": {**(remote.get("filters") or {}), **local["filters"]},
            },
        ),
        **kwargs,
    )
