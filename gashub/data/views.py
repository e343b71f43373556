"""
Live order views.

Each view owns one subscription to the order feed, re-runs the aggregator on
every snapshot (the most recent snapshot always wins) and releases the
subscription on close(). Use them as context managers so teardown is tied
to the lifetime of the screen that shows them.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, List, Optional

from gashub.config import get_config
from gashub.logger import get_logger

from .aggregator import aggregate, compute_receivables_total, search_by_customer
from .interface import OrderFeed, Subscription
from .models import MutationResult, Order, OrderFilters, OrderMetrics, OrderSummary
from .services import OrderService

Clock = Callable[[], datetime]


def _local_now() -> datetime:
    return datetime.now().astimezone()


class _LiveView:
    def __init__(self) -> None:
        self.logger = get_logger(type(self).__name__)
        self.loading = True
        self.error: Optional[str] = None
        self._subscription: Optional[Subscription] = None

    def _on_error(self, exc: Exception) -> None:
        # Keep the last good snapshot on screen
        self.logger.error(f"Order feed failed: {exc}")
        self.error = "Failed to load orders."
        self.loading = False

    @property
    def closed(self) -> bool:
        return self._subscription is None

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class OrderDashboard(_LiveView):
    """Filtered orders and metrics over the whole collection."""

    def __init__(self, feed: OrderFeed, filters: Optional[OrderFilters] = None, clock: Optional[Clock] = None) -> None:
        super().__init__()
        self.filters = filters or OrderFilters.from_config(get_config())
        self._clock = clock or _local_now
        self._snapshot: List[Order] = []
        self._summary = OrderSummary()
        self._subscription = feed.subscribe(self._on_snapshot, on_error=self._on_error)

    def _on_snapshot(self, orders: List[Order]) -> None:
        self._snapshot = list(orders)
        self.loading = False
        self.error = None
        self._refresh()

    def _refresh(self) -> None:
        self._summary = aggregate(self._snapshot, self.filters, self._clock())

    def update_filters(self, **changes: Any) -> OrderSummary:
        """Merge `changes` into the current filters and recompute from the last snapshot."""
        self.filters = self.filters.with_updates(**changes)
        self._refresh()
        return self._summary

    @property
    def summary(self) -> OrderSummary:
        return self._summary

    @property
    def orders(self) -> List[Order]:
        return self._summary.orders

    @property
    def metrics(self) -> OrderMetrics:
        return self._summary.metrics


class ReceivablesBoard(_LiveView):
    """Unpaid Fiado orders, soonest due date first."""

    def __init__(self, feed: OrderFeed, service: OrderService) -> None:
        super().__init__()
        self.service = service
        self._orders: List[Order] = []
        self._subscription = feed.subscribe(
            self._on_snapshot,
            where=lambda o: o.is_open_receivable,
            on_error=self._on_error,
        )

    def _on_snapshot(self, orders: List[Order]) -> None:
        # Orders without a due date go last
        self._orders = sorted(orders, key=lambda o: (o.due_date is None, o.due_date.timestamp() if o.due_date else 0.0))
        self.loading = False
        self.error = None

    @property
    def orders(self) -> List[Order]:
        return list(self._orders)

    @property
    def total(self) -> float:
        return compute_receivables_total(self._orders)

    @property
    def has_orders(self) -> bool:
        return bool(self._orders)

    def search(self, query: Optional[str]) -> List[Order]:
        return search_by_customer(self._orders, query)

    def mark_as_paid(self, order_id: str) -> MutationResult:
        # The feed drops the order from this board once the write lands
        return self.service.mark_as_paid(order_id)
