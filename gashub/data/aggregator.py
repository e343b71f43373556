"""
Order aggregation shared by every order view.

Given a snapshot of orders and an OrderFilters, produce the filtered and
sorted list plus summary metrics. Pure functions: nothing here mutates its
input, keeps state between calls or raises on malformed records.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Mapping, Optional, Union

import pandas as pd

from .models import Order, OrderFilters, OrderMetrics, OrderSummary

OrderLike = Union[Order, Mapping]


def _as_orders(orders: Iterable[OrderLike]) -> List[Order]:
    return [o if isinstance(o, Order) else Order.model_validate(o) for o in orders]


def _local(ts: datetime) -> datetime:
    # Naive values are taken as local time.
    return ts.astimezone()


def _date_predicate(filters: OrderFilters, now: datetime) -> Optional[Callable[[Order], bool]]:
    now = _local(now)

    if filters.date_range == "today":
        day = now.date()
        return lambda o: o.timestamp is not None and _local(o.timestamp).date() == day

    if filters.date_range == "this_week":
        cutoff = now - timedelta(days=7)
        return lambda o: o.timestamp is not None and _local(o.timestamp) >= cutoff

    if filters.date_range == "this_month":
        cutoff = (pd.Timestamp(now) - pd.DateOffset(months=1)).to_pydatetime()
        return lambda o: o.timestamp is not None and _local(o.timestamp) >= cutoff

    # custom: both bounds are required, otherwise the period is ignored
    if filters.start_ts is None or filters.end_ts is None:
        return None
    start, end = _local(filters.start_ts), _local(filters.end_ts)
    return lambda o: o.timestamp is not None and start <= _local(o.timestamp) <= end


def _status_predicate(filters: OrderFilters) -> Optional[Callable[[Order], bool]]:
    if filters.status == "paid":
        return lambda o: o.is_paid
    if filters.status == "credit":
        return lambda o: o.is_credit
    if filters.status == "pending":
        return lambda o: not o.is_paid
    return None


def _sort_key(filters: OrderFilters) -> Callable[[Order], object]:
    if filters.sort_by == "value":
        return lambda o: o.total_value
    if filters.sort_by == "customer_name":
        return lambda o: o.customer_name
    return lambda o: o.timestamp.timestamp() if o.timestamp is not None else 0.0


def search_by_customer(orders: Iterable[OrderLike], query: Optional[str]) -> List[Order]:
    """Case-insensitive substring match on customer_name; empty query keeps everything."""
    result = _as_orders(orders)
    if not query:
        return result
    needle = query.lower()
    return [o for o in result if needle in o.customer_name.lower()]


def filter_orders(
    orders: Iterable[OrderLike],
    filters: Optional[OrderFilters] = None,
    now: Optional[datetime] = None,
) -> List[Order]:
    """Apply period, status and customer filters, then a stable sort.

    Args:
        orders: Snapshot of orders, as models or raw store records.
        filters: Filters to apply. Defaults to OrderFilters().
        now: Reference time for the period presets. Defaults to the current local time.
    Returns:
        list[Order]: A new list; `orders` is left untouched.
    """
    filters = filters or OrderFilters()
    now = now or datetime.now().astimezone()
    result = _as_orders(orders)

    for predicate in (_date_predicate(filters, now), _status_predicate(filters)):
        if predicate is not None:
            result = [o for o in result if predicate(o)]

    result = search_by_customer(result, filters.customer_name)

    # sorted() is stable in both directions, so ties keep snapshot order
    return sorted(result, key=_sort_key(filters), reverse=filters.sort_order == "desc")


def compute_metrics(orders: Iterable[OrderLike]) -> OrderMetrics:
    orders = _as_orders(orders)
    total_orders = len(orders)
    total_value = float(sum(o.display_value for o in orders))
    paid_count = sum(1 for o in orders if o.is_paid)

    return OrderMetrics(
        total_orders=total_orders,
        total_value=total_value,
        average_order_value=total_value / total_orders if total_orders else 0.0,
        credit_count=sum(1 for o in orders if o.is_credit),
        paid_count=paid_count,
        conversion_rate=paid_count / total_orders * 100 if total_orders else 0.0,
    )


def compute_receivables_total(orders: Iterable[OrderLike]) -> float:
    """Outstanding amount over unpaid Fiado orders."""
    return float(sum(o.pending_value for o in _as_orders(orders) if o.is_open_receivable))


def aggregate(
    orders: Iterable[OrderLike],
    filters: Optional[OrderFilters] = None,
    now: Optional[datetime] = None,
) -> OrderSummary:
    filtered = filter_orders(orders, filters, now)
    return OrderSummary(orders=filtered, metrics=compute_metrics(filtered))


def revenue_by_day(orders: Iterable[OrderLike]) -> pd.DataFrame:
    """Order totals summed per local calendar day (columns `dia`, `valor`), oldest first."""
    rows = [
        {"dia": _local(o.timestamp).date(), "valor": o.total_value}
        for o in _as_orders(orders)
        if o.timestamp is not None
    ]
    if not rows:
        return pd.DataFrame(columns=["dia", "valor"])
    return pd.DataFrame(rows).groupby("dia", as_index=False)["valor"].sum().sort_values("dia", ignore_index=True)
