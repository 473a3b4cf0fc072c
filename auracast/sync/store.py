"""Remote store boundary: typed query/mutation operations.

The core never talks to a concrete backend; it is handed something that
satisfies ``RemoteStore``. ``InMemoryStore`` is the in-process
implementation used by the scripts, the HTTP app and the tests.
"""

import copy
import logging
import time
import uuid
from collections import defaultdict
from collections.abc import Callable
from enum import Enum
from typing import Any, Protocol

from auracast.errors import MutationError

logger = logging.getLogger(__name__)


class StoreOperation(str, Enum):
    STORE_PREDICTION = "storePredictionResult"
    STORE_ANOMALY_RESULT = "storeAnomalyResult"
    GET_FORECAST = "getForecast"
    ADD_ANNOTATION = "addAnnotation"
    SEND_CHAT_MESSAGE = "sendChatMessage"
    UPDATE_SHARED_FILTERS = "updateSharedFilters"


# Collection each mutation writes to
COLLECTIONS = {
    StoreOperation.STORE_PREDICTION: "predictions",
    StoreOperation.STORE_ANOMALY_RESULT: "anomalies",
    StoreOperation.ADD_ANNOTATION: "annotations",
    StoreOperation.SEND_CHAT_MESSAGE: "chatMessages",
    StoreOperation.UPDATE_SHARED_FILTERS: "sharedFilters",
}


class RemoteStore(Protocol):

    async def query(self, op: StoreOperation, args: dict) -> Any:
        ...

    async def mutate(self, op: StoreOperation, args: dict) -> Any:
        """Apply a mutation; raise on rejection (MutationError may carry server data)."""
        ...


class InMemoryStore:
    """Versioned in-process store.

    Records are keyed by ``args["key"]`` when given (otherwise a fresh id).
    A write that carries ``version`` lower than or equal to the stored
    version is rejected with the stored record as ``server_data``. Every
    accepted write is stamped with the store clock unless it carries its
    own ``timestamp``.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self.collections: dict[str, dict[str, dict]] = defaultdict(dict)

    async def query(self, op: StoreOperation, args: dict) -> Any:
        if op is StoreOperation.GET_FORECAST:
            zone_id = args.get("zone_id")
            rows = [r for r in self.collections["predictions"].values()
                    if zone_id is None or r.get("zone_id") == zone_id]
            return sorted(rows, key=lambda r: (r.get("timestamp", 0), r.get("hour_offset", 0)))
        raise ValueError(f"{op.value} is not a query")

    async def mutate(self, op: StoreOperation, args: dict) -> Any:
        if op not in COLLECTIONS:
            raise ValueError(f"{op.value} is not a mutation")

        records = self.collections[COLLECTIONS[op]]
        key = str(args.get("key") or uuid.uuid4().hex)
        current = records.get(key)

        incoming_version = args.get("version")
        if current is not None and incoming_version is not None:
            if incoming_version <= current.get("version", 0):
                logger.info("Rejected stale write to %s/%s (v%s <= v%s)",
                            COLLECTIONS[op], key, incoming_version, current.get("version", 0))
                raise MutationError(f"Version conflict on {key}",
                                    server_data=copy.deepcopy(current))

        record = {**(current or {}), **args, "key": key}
        record.setdefault("version", 1)
        if "timestamp" not in args:
            record["timestamp"] = self.clock()
        records[key] = record
        return {"key": key, "version": record["version"]}

    def records(self, collection: str) -> list[dict]:
        return list(self.collections[collection].values())
