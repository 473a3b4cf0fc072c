"""Optimistic update ledger with conflict tracking.

Updates are applied locally first and sit in the ledger until the remote
store answers. A rejection that comes back with the server's copy of the
data turns the update into a ``Conflict``; the update then lives in the
conflict, never in both places. Subscribers see every state transition
synchronously, in registration order.

    pending -> resolved-success      (resolve_update success)
    pending -> resolved-failure      (resolve_update failure, no server data)
    pending -> conflicted            (resolve_update failure with server data)
    conflicted -> conflict-resolved  (resolve_conflict, automatic strategy)
"""

import dataclasses
import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from auracast.config import MAX_PENDING_UPDATES
from auracast.errors import LedgerFull
from auracast.sync.resolver import ResolutionStrategy, Strategy, resolve_data

logger = logging.getLogger(__name__)


class UpdateKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ConflictStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    MANUAL = "manual"


@dataclass(frozen=True)
class OptimisticUpdate:
    id: str
    kind: UpdateKind
    collection: str
    data: Any
    timestamp: float
    user_id: str
    previous_data: Any = None
    resolution: ResolutionStrategy | None = None


@dataclass(frozen=True)
class Conflict:
    id: str
    local_update: OptimisticUpdate
    remote_data: Any
    status: ConflictStatus
    timestamp: float


UpdatesCallback = Callable[[list[OptimisticUpdate]], None]
ConflictsCallback = Callable[[list[Conflict]], None]
ResolvedCallback = Callable[[OptimisticUpdate, Any], None]


def _log_resolved(update: OptimisticUpdate, data: Any) -> None:
    logger.info("Applying resolved data to %s (update %s)", update.collection, update.id)


class OptimisticLedger:

    def __init__(self,
                 on_resolved: ResolvedCallback | None = None,
                 clock: Callable[[], float] = time.time,
                 max_pending: int | None = MAX_PENDING_UPDATES):
        self.on_resolved = on_resolved or _log_resolved
        self.clock = clock
        self.max_pending = max_pending
        self._updates: dict[str, OptimisticUpdate] = {}
        self._conflicts: dict[str, Conflict] = {}
        self._subscribers: list[UpdatesCallback] = []
        self._conflict_subscribers: list[ConflictsCallback] = []
        self._resolved_conflicts = 0
        self._dropped_updates = 0

    # -- subscriptions -------------------------------------------------

    def subscribe(self, callback: UpdatesCallback) -> Callable[[], None]:
        self._subscribers.append(callback)
        return lambda: self._unsubscribe(self._subscribers, callback)

    def subscribe_to_conflicts(self, callback: ConflictsCallback) -> Callable[[], None]:
        self._conflict_subscribers.append(callback)
        return lambda: self._unsubscribe(self._conflict_subscribers, callback)

    @staticmethod
    def _unsubscribe(registry: list, callback) -> None:
        if callback in registry:
            registry.remove(callback)

    def _notify_updates(self) -> None:
        snapshot = self.pending_updates()
        for callback in list(self._subscribers):
            callback(snapshot)

    def _notify_conflicts(self) -> None:
        snapshot = self.active_conflicts()
        for callback in list(self._conflict_subscribers):
            callback(snapshot)

    # -- reads ---------------------------------------------------------

    def pending_updates(self) -> list[OptimisticUpdate]:
        return list(self._updates.values())

    def active_conflicts(self) -> list[Conflict]:
        return [c for c in self._conflicts.values()
                if c.status in (ConflictStatus.PENDING, ConflictStatus.MANUAL)]

    def get_update(self, update_id: str) -> OptimisticUpdate | None:
        return self._updates.get(update_id)

    def get_conflict(self, conflict_id: str) -> Conflict | None:
        return self._conflicts.get(conflict_id)

    def stats(self) -> dict[str, int]:
        return {
            "pending_updates": len(self._updates),
            "active_conflicts": len(self.active_conflicts()),
            "resolved_conflicts": self._resolved_conflicts,
            "dropped_updates": self._dropped_updates,
        }

    # -- mutations -----------------------------------------------------

    def apply_update(self,
                     kind: UpdateKind | str,
                     collection: str,
                     data: Any,
                     user_id: str,
                     previous_data: Any = None,
                     resolution: ResolutionStrategy | None = None) -> str:
        """Record a locally applied change and return its id immediately."""
        if self.max_pending is not None and len(self._updates) >= self.max_pending:
            raise LedgerFull(f"{len(self._updates)} updates already pending (cap {self.max_pending})")

        update = OptimisticUpdate(
            id=f"update_{uuid.uuid4().hex}",
            kind=UpdateKind(kind),
            collection=collection,
            data=data,
            timestamp=self.clock(),
            user_id=user_id,
            previous_data=previous_data,
            resolution=resolution,
        )
        self._updates[update.id] = update
        self._notify_updates()
        return update.id

    def resolve_update(self, update_id: str, success: bool, server_data: Any = None) -> str | None:
        """Settle a pending update once the remote store has answered.

        Returns the id of the conflict created, if any. Unknown ids are
        ignored.
        """
        update = self._updates.pop(update_id, None)
        if update is None:
            return None

        if success or server_data is None:
            if not success:
                # No server copy to reconcile against; the change is lost
                self._dropped_updates += 1
                logger.warning("Dropping update %s on %s: remote rejected it without data",
                               update.id, update.collection)
            self._notify_updates()
            return None

        conflict = Conflict(
            id=f"conflict_{uuid.uuid4().hex}",
            local_update=update,
            remote_data=server_data,
            status=ConflictStatus.PENDING,
            timestamp=self.clock(),
        )
        self._conflicts[conflict.id] = conflict
        logger.info("Conflict %s on %s for update %s", conflict.id, update.collection, update.id)
        self._notify_updates()
        self._notify_conflicts()

        if update.resolution is not None:
            try:
                self.resolve_conflict(conflict.id, update.resolution)
            except Exception as e:
                logger.warning("Automatic resolution of %s failed, left pending: %s",
                               conflict.id, e)
        return conflict.id

    def resolve_conflict(self, conflict_id: str, resolution: ResolutionStrategy) -> Any:
        """Reconcile a conflict; returns the resolved payload (None for manual or no-op)."""
        conflict = self._conflicts.get(conflict_id)
        if conflict is None or conflict.status is ConflictStatus.RESOLVED:
            return None

        if resolution.strategy is Strategy.MANUAL:
            if conflict.status is not ConflictStatus.MANUAL:
                self._conflicts[conflict_id] = dataclasses.replace(conflict, status=ConflictStatus.MANUAL)
                self._notify_conflicts()
            return None

        resolved = resolve_data(resolution, conflict.local_update.data, conflict.remote_data)
        self.on_resolved(conflict.local_update, resolved)

        del self._conflicts[conflict_id]
        self._updates.pop(conflict.local_update.id, None)
        self._resolved_conflicts += 1
        logger.info("Resolved %s with %s", conflict_id, resolution.strategy.value)
        self._notify_conflicts()
        return resolved

    def clear_pending_updates(self) -> None:
        self._updates.clear()
        self._notify_updates()
