# gashub/data/interface.py
from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol

from .models import Order

SnapshotCallback = Callable[[List[Order]], None]
ErrorCallback = Callable[[Exception], None]
OrderPredicate = Callable[[Order], bool]


# ---- Live feed ----

class Subscription(Protocol):
    """Handle returned by OrderFeed.subscribe()."""

    def unsubscribe(self) -> None:
        """Stop delivery. Calling it more than once is a no-op."""
        ...


class OrderFeed(Protocol):
    """
    Live query over the orders collection.

    Every delivery is the complete, authoritative snapshot at that instant;
    consumers never diff. The current snapshot is delivered as soon as the
    subscription is made.
    """

    def subscribe(
        self,
        on_snapshot: SnapshotCallback,
        where: Optional[OrderPredicate] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """Deliver every snapshot (restricted to `where`) to `on_snapshot`."""
        ...


# ---- Writes ----

class OrderStore(Protocol):
    """Document writes against the orders collection."""

    def create(self, data: Mapping[str, Any]) -> str:
        """Insert a new order and return its id.

        The store stamps `id`, `timestamp` and `status="pending"`, and sets
        `userId` when the caller leaves it out.
        """
        ...

    def update(
        self,
        order_id: str,
        changes: Mapping[str, Any],
        precondition: Optional[OrderPredicate] = None,
    ) -> None:
        """Merge `changes` into an existing order.

        `precondition` is checked against the stored order in the same atomic
        step as the write.

        Raises:
            OrderNotFoundError: If no order has this id.
            OrderConflictError: If the stored order fails `precondition`.
        """
        ...

    def get(self, order_id: str) -> Optional[Dict[str, Any]]:
        """Return the raw record, or None."""
        ...


class OrderBackend(OrderFeed, OrderStore, Protocol):
    """A store that also serves the live feed."""


# ---- Session ----

class AuthSession(Protocol):
    """Signed-in account as seen by the order services."""

    def current_user_id(self) -> Optional[str]:
        """Id of the signed-in user, or None when nobody is signed in."""
        ...
