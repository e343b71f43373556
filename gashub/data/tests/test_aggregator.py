import copy
import time
from datetime import datetime, timedelta

import pytest

from gashub.data.aggregator import (
    aggregate,
    compute_metrics,
    compute_receivables_total,
    filter_orders,
    revenue_by_day,
    search_by_customer,
)
from gashub.data.models import Order, OrderFilters

NOW = datetime(2024, 5, 10, 15, 0)


def _order(**fields):
    record = {
        "customerName": "Cliente",
        "address": "Rua das Flores, 10",
        "products": [{"name": "Botijão de 13kg", "quantity": 1, "price": 110.0}],
        "paymentMethod": "Dinheiro",
        "paymentStatus": "paid",
        "totalValue": 110.0,
        "timestamp": NOW.isoformat(),
    }
    record.update(fields)
    return record


def _all(**changes):
    return OrderFilters(date_range="custom", **changes)


@pytest.fixture
def orders():
    return [
        _order(id="a", customerName="ANA SILVA", totalValue=100.0, timestamp=(NOW - timedelta(hours=2)).isoformat()),
        _order(id="b", customerName="Bruno", totalValue=50.0, paymentMethod="Fiado", paymentStatus="pending",
               pendingValue=50.0, timestamp=(NOW - timedelta(days=1)).isoformat()),
        _order(id="c", customerName="Carla", totalValue=75.0, timestamp=(NOW - timedelta(days=10)).isoformat()),
        _order(id="d", customerName="Mariana", totalValue=30.0, timestamp=(NOW - timedelta(days=45)).isoformat()),
    ]


def test_filter_does_not_mutate_input(orders):
    """Filtering and sorting leave the input list and its records untouched."""
    before = copy.deepcopy(orders)
    filter_orders(orders, OrderFilters(date_range="this_month", sort_by="value", sort_order="asc"), now=NOW)
    assert orders == before


def test_filter_does_not_reorder_model_input(orders):
    models = [Order.model_validate(o) for o in orders]
    ids = [o.id for o in models]
    filter_orders(models, _all(sort_by="customer_name", sort_order="desc"), now=NOW)
    assert [o.id for o in models] == ids


def test_today_excludes_yesterday_includes_earlier_today():
    earlier_today = _order(id="today", timestamp=NOW.replace(hour=0, minute=0, second=1).isoformat())
    yesterday = _order(id="yesterday", timestamp=(NOW.replace(hour=0, minute=0) - timedelta(seconds=1)).isoformat())
    result = filter_orders([earlier_today, yesterday], OrderFilters(date_range="today"), now=NOW)
    assert [o.id for o in result] == ["today"]


def test_this_week_and_this_month(orders):
    week = filter_orders(orders, OrderFilters(date_range="this_week"), now=NOW)
    month = filter_orders(orders, OrderFilters(date_range="this_month"), now=NOW)
    assert {o.id for o in week} == {"a", "b"}
    assert {o.id for o in month} == {"a", "b", "c"}


def test_custom_range_is_inclusive(orders):
    filters = _all(start_ts=NOW - timedelta(days=10), end_ts=NOW - timedelta(days=1))
    assert {o.id for o in filter_orders(orders, filters, now=NOW)} == {"b", "c"}


@pytest.mark.parametrize("bounds", [
    {"start_ts": NOW - timedelta(days=1)},
    {"end_ts": NOW - timedelta(days=1)},
    {},
])
def test_custom_range_missing_bound_is_noop(orders, bounds):
    assert len(filter_orders(orders, _all(**bounds), now=NOW)) == len(orders)


def test_orders_without_timestamp_are_dropped_by_period_filters():
    undated = _order(id="x", timestamp=None)
    assert filter_orders([undated], OrderFilters(date_range="today"), now=NOW) == []
    assert len(filter_orders([undated], _all(), now=NOW)) == 1


@pytest.mark.parametrize("status,expected", [
    ("all", {"a", "b", "c", "d"}),
    ("paid", {"a", "c", "d"}),
    ("credit", {"b"}),
    ("pending", {"b"}),
])
def test_status_filter(orders, status, expected):
    result = filter_orders(orders, _all(status=status), now=NOW)
    assert {o.id for o in result} == expected


def test_customer_filter_is_case_insensitive(orders):
    result = filter_orders(orders, _all(customer_name="ana"), now=NOW)
    assert {o.id for o in result} == {"a", "d"}


def test_empty_customer_query_is_noop(orders):
    assert len(filter_orders(orders, _all(customer_name=""), now=NOW)) == 4


def test_default_sort_is_newest_first(orders):
    result = filter_orders(orders, _all(), now=NOW)
    assert [o.id for o in result] == ["a", "b", "c", "d"]


@pytest.mark.parametrize("sort_by,sort_order,expected", [
    ("date", "asc", ["d", "c", "b", "a"]),
    ("value", "desc", ["a", "c", "b", "d"]),
    ("value", "asc", ["d", "b", "c", "a"]),
    ("customer_name", "asc", ["a", "b", "c", "d"]),
    ("customer_name", "desc", ["d", "c", "b", "a"]),
])
def test_sorting(orders, sort_by, sort_order, expected):
    result = filter_orders(orders, _all(sort_by=sort_by, sort_order=sort_order), now=NOW)
    assert [o.id for o in result] == expected


@pytest.mark.parametrize("sort_order", ["asc", "desc"])
def test_sort_is_stable(sort_order):
    """Equal keys keep their snapshot order in both directions."""
    same = [_order(id=str(i), totalValue=20.0) for i in range(5)]
    mixed = [_order(id="big", totalValue=99.0)] + same
    result = filter_orders(mixed, _all(sort_by="value", sort_order=sort_order), now=NOW)
    assert [o.id for o in result if o.id != "big"] == ["0", "1", "2", "3", "4"]


def test_missing_sort_fields_use_defaults():
    undated = _order(id="undated", timestamp=None, totalValue=None, customerName=None)
    dated = _order(id="dated")
    by_date = filter_orders([dated, undated], _all(sort_by="date", sort_order="asc"), now=NOW)
    by_value = filter_orders([dated, undated], _all(sort_by="value", sort_order="asc"), now=NOW)
    by_name = filter_orders([dated, undated], _all(sort_by="customer_name", sort_order="asc"), now=NOW)
    assert [o.id for o in by_date] == ["undated", "dated"]
    assert [o.id for o in by_value] == ["undated", "dated"]
    assert [o.id for o in by_name] == ["undated", "dated"]


def test_metrics_of_empty_list_are_zero():
    metrics = compute_metrics([])
    assert metrics.model_dump() == {
        "total_orders": 0,
        "total_value": 0,
        "average_order_value": 0,
        "credit_count": 0,
        "paid_count": 0,
        "conversion_rate": 0,
    }


def test_metrics_cash_and_credit():
    orders = [
        {"totalValue": 100, "paymentMethod": "Dinheiro", "paymentStatus": "paid"},
        {"totalValue": 50, "paymentMethod": "Fiado", "paymentStatus": "pending", "pendingValue": 50},
    ]
    metrics = compute_metrics(orders)
    assert metrics.total_orders == 2
    assert metrics.total_value == 150
    assert metrics.average_order_value == 75
    assert metrics.credit_count == 1
    assert metrics.paid_count == 1
    assert metrics.conversion_rate == 50


def test_metrics_prefer_outstanding_value():
    orders = [{"totalValue": 80, "pendingValue": 30}, {"totalValue": "abc"}, {"pendingValue": 0, "totalValue": 10}]
    assert compute_metrics(orders).total_value == 40


def test_receivables_total_counts_only_unpaid_credit():
    orders = [
        _order(paymentMethod="Fiado", paymentStatus="paid", pendingValue=0, totalValue=40),
        _order(paymentMethod="Fiado", paymentStatus="pending", pendingValue=65, totalValue=65),
        _order(paymentMethod="Pago", paymentStatus="paid", pendingValue=0, totalValue=20),
        _order(paymentMethod="Dinheiro", paymentStatus="paid", totalValue=110),
    ]
    assert compute_receivables_total(orders) == 65


def test_receivables_total_empty():
    assert compute_receivables_total([]) == 0


def test_search_by_customer():
    orders = [_order(customerName="José Lima"), _order(customerName=None)]
    assert [o.customer_name for o in search_by_customer(orders, "LIMA")] == ["José Lima"]
    assert len(search_by_customer(orders, None)) == 2


def test_aggregate_bundles_orders_and_metrics(orders):
    summary = aggregate(orders, OrderFilters(date_range="this_week"), now=NOW)
    assert [o.id for o in summary.orders] == ["a", "b"]
    assert summary.metrics.total_orders == 2
    assert summary.metrics.total_value == 150


@pytest.fixture
def sao_paulo_tz(monkeypatch):
    monkeypatch.setenv("TZ", "America/Sao_Paulo")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_revenue_by_day_uses_the_same_local_day_as_the_today_filter(sao_paulo_tz):
    # 01:30 UTC on the 10th is 22:30 on the 9th in Sao Paulo
    late = _order(totalValue=90.0, timestamp="2024-05-10T01:30:00+00:00")
    early = _order(totalValue=110.0, timestamp="2024-05-09T15:00:00+00:00")
    undated = _order(totalValue=50.0, timestamp=None)

    daily = revenue_by_day([late, early, undated])
    assert [str(day) for day in daily["dia"]] == ["2024-05-09"]
    assert daily["valor"].tolist() == [200.0]

    today = filter_orders([late, early], OrderFilters(date_range="today"), now=datetime(2024, 5, 9, 23, 0))
    assert len(today) == 2


def test_revenue_by_day_without_dated_orders():
    daily = revenue_by_day([_order(timestamp=None)])
    assert daily.empty
    assert list(daily.columns) == ["dia", "valor"]
