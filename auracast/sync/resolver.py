"""Conflict resolution strategies for optimistic updates."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from auracast.errors import InvalidInput


class Strategy(str, Enum):
    LAST_WRITER_WINS = "last-writer-wins"
    MERGE = "merge"
    VERSION_BASED = "version-based"
    MANUAL = "manual"


@dataclass(frozen=True)
class ResolutionStrategy:
    strategy: Strategy
    version: int | None = None
    merge_function: Callable[[Any, Any], Any] | None = None

    @property
    def is_automatic(self) -> bool:
        return self.strategy is not Strategy.MANUAL


def _remote_version(remote: Any) -> int:
    if isinstance(remote, Mapping):
        return remote.get("version") or 0
    return 0


def resolve_data(resolution: ResolutionStrategy, local: Any, remote: Any) -> Any:
    """Compute the payload that should win a conflict.

    - last-writer-wins: the local payload.
    - merge: remote fields overridden by local ones, or whatever
      ``merge_function(local, remote)`` returns.
    - version-based: the side with the higher version wins entirely;
      ties go to the remote side.

    Manual resolution has no automatic value and is rejected here.
    """
    strategy = resolution.strategy
    if strategy is Strategy.LAST_WRITER_WINS:
        return local

    if strategy is Strategy.MERGE:
        if resolution.merge_function is not None:
            return resolution.merge_function(local, remote)
        if not isinstance(local, Mapping) or not isinstance(remote, Mapping):
            raise InvalidInput("Shallow merge needs mapping payloads on both sides")
        return {**remote, **local}

    if strategy is Strategy.VERSION_BASED:
        local_version = resolution.version or 0
        return local if local_version > _remote_version(remote) else remote

    raise InvalidInput(f"{strategy.value} has no automatic resolution")
