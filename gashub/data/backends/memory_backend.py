from __future__ import annotations

import copy
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from gashub.config import get_config
from gashub.errors import OrderConflictError, OrderNotFoundError
from gashub.logger import get_logger

from ..interface import ErrorCallback, OrderBackend, OrderPredicate, SnapshotCallback
from ..models import Order


@dataclass
class _Listener:
    on_snapshot: SnapshotCallback
    where: Optional[OrderPredicate]
    on_error: Optional[ErrorCallback]
    active: bool = True
    # Version of the last snapshot handed to this listener
    seen: int = -1


class _Subscription:
    def __init__(self, store: "InMemoryOrderStore", listener: _Listener) -> None:
        self._store = store
        self._listener = listener

    def unsubscribe(self) -> None:
        self._store._remove_listener(self._listener)


class InMemoryOrderStore(OrderBackend):
    """
    In-process document store for one orders collection.
    - Records are kept as camelCase dicts, in insertion order.
    - Every write re-parses the collection and pushes the full snapshot to each
      active listener, synchronously, on the writing thread.
    - Snapshots reach each listener in commit order; an older snapshot is never
      delivered after a newer one.
    """

    def __init__(self, collection: Optional[str] = None, records: Optional[Iterable[Mapping[str, Any]]] = None) -> None:
        config = get_config()
        self.collection = collection or config.orders_collection
        self.anonymous_user_id = config.anonymous_user_id
        self.logger = get_logger(__name__)

        # _delivery_lock is always taken before _lock, never inside it
        self._lock = threading.RLock()
        self._delivery_lock = threading.RLock()
        self._records: Dict[str, Dict[str, Any]] = {}
        self._listeners: List[_Listener] = []
        self._version = 0

        for record in records or []:
            record = dict(record)
            order_id = str(record.get("id") or self._new_id())
            record["id"] = order_id
            self._records[order_id] = record

    # ---------- hooks ----------

    def _persist(self) -> None:
        """Called under the lock after every write; raise to roll the write back."""

    @staticmethod
    def _new_id() -> str:
        return uuid.uuid4().hex[:20]

    # ---------- feed ----------

    def subscribe(
        self,
        on_snapshot: SnapshotCallback,
        where: Optional[OrderPredicate] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> _Subscription:
        listener = _Listener(on_snapshot=on_snapshot, where=where, on_error=on_error)
        with self._delivery_lock:
            with self._lock:
                self._listeners.append(listener)
                active = len(self._listeners)
                version, snapshot = self._version, self._snapshot()
            self.logger.debug(f"New listener on '{self.collection}' ({active} active)")
            self._deliver(listener, version, snapshot)
        return _Subscription(self, listener)

    def _remove_listener(self, listener: _Listener) -> None:
        with self._lock:
            if not listener.active:
                return
            listener.active = False
            self._listeners.remove(listener)
            active = len(self._listeners)
        self.logger.debug(f"Listener removed from '{self.collection}' ({active} active)")

    def _snapshot(self) -> List[Order]:
        orders = []
        for order_id, record in self._records.items():
            try:
                orders.append(Order.model_validate(record))
            except ValidationError as e:
                self.logger.warning(f"Skipping malformed order {order_id}: {e.error_count()} error(s)")
        return orders

    def _deliver(self, listener: _Listener, version: int, snapshot: List[Order]) -> None:
        # A listener that wrote from inside its own callback has already seen a newer snapshot
        if not listener.active or version < listener.seen:
            return
        listener.seen = version
        try:
            selected = [o for o in snapshot if listener.where(o)] if listener.where else list(snapshot)
            listener.on_snapshot(selected)
        except Exception as e:
            # A failing listener must not fail the write that triggered it.
            self.logger.exception(f"Snapshot listener on '{self.collection}' failed")
            if listener.on_error:
                try:
                    listener.on_error(e)
                except Exception:
                    self.logger.exception(f"Error handler of a listener on '{self.collection}' failed")

    def _notify(self) -> None:
        with self._delivery_lock:
            with self._lock:
                listeners = list(self._listeners)
                version, snapshot = self._version, self._snapshot()
            for listener in listeners:
                self._deliver(listener, version, snapshot)

    # ---------- writes ----------

    def create(self, data: Mapping[str, Any]) -> str:
        record = copy.deepcopy(dict(data))
        order_id = self._new_id()
        record["id"] = order_id
        record["timestamp"] = datetime.now().astimezone().isoformat()
        record.setdefault("userId", self.anonymous_user_id)
        record["status"] = "pending"

        with self._lock:
            self._records[order_id] = record
            try:
                self._persist()
            except Exception:
                del self._records[order_id]
                raise
            self._version += 1
        self.logger.debug(f"Created order {order_id} in '{self.collection}'")
        self._notify()
        return order_id

    def update(
        self,
        order_id: str,
        changes: Mapping[str, Any],
        precondition: Optional[OrderPredicate] = None,
    ) -> None:
        changes = {k: copy.deepcopy(v) for k, v in changes.items() if k != "id"}
        with self._lock:
            if order_id not in self._records:
                raise OrderNotFoundError(order_id)
            previous = self._records[order_id]
            if precondition is not None and not self._satisfies(previous, precondition):
                raise OrderConflictError(order_id)
            self._records[order_id] = {**previous, **changes}
            try:
                self._persist()
            except Exception:
                self._records[order_id] = previous
                raise
            self._version += 1
        self.logger.debug(f"Updated order {order_id}: {sorted(changes)}")
        self._notify()

    @staticmethod
    def _satisfies(record: Mapping[str, Any], precondition: OrderPredicate) -> bool:
        try:
            return bool(precondition(Order.model_validate(record)))
        except ValidationError:
            return False

    def get(self, order_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            record = self._records.get(order_id)
            return copy.deepcopy(record) if record is not None else None

    def records(self) -> List[Dict[str, Any]]:
        """Raw copies of every record, in insertion order."""
        with self._lock:
            return copy.deepcopy(list(self._records.values()))
