import threading

import pytest

from gashub.config import set_config_for_test
from gashub.data.aggregator import compute_receivables_total
from gashub.data.backends.memory_backend import InMemoryOrderStore
from gashub.data.models import Order, OrderDraft, ProductDraft
from gashub.data.services import OrderService
from gashub.data.session import ConfigSession


class BrokenStore(InMemoryOrderStore):
    def create(self, data):
        raise ConnectionError("network is unreachable")

    def update(self, order_id, changes, precondition=None):
        raise PermissionError("permission denied")


def _draft(method="Fiado", **changes):
    fields = dict(
        customer_name="Ana Silva",
        address="Rua das Flores, 10",
        products=[ProductDraft(name="Botijão de 13kg", quantity=1, price="R$ 110,00")],
        payment_method=method,
    )
    fields.update(changes)
    return OrderDraft(**fields)


@pytest.fixture
def store():
    return InMemoryOrderStore()


@pytest.fixture
def service(store):
    return OrderService(store, ConfigSession("user-1"))


def _orders(store):
    return [Order.model_validate(r) for r in store.records()]


def test_create_order_writes_document(service, store):
    result = service.create_order(_draft())
    assert result.success
    record = store.get(result.id)
    assert record["userId"] == "user-1"
    assert record["status"] == "pending"
    assert record["totalValue"] == 110.0
    assert record["pendingValue"] == 110.0


def test_create_order_without_session_uses_anonymous(store):
    set_config_for_test(log_level="WARNING", anonymous_user_id="anonymous")
    result = OrderService(store, ConfigSession()).create_order(_draft("Pix"))
    assert store.get(result.id)["userId"] == "anonymous"


def test_invalid_draft_is_not_written(service, store):
    result = service.create_order(_draft(customer_name=""))
    assert not result.success
    assert result.id is None
    assert result.message
    assert store.records() == []


def test_backend_failure_is_reported_not_raised():
    service = OrderService(BrokenStore(), ConfigSession("user-1"))
    result = service.create_order(_draft())
    assert not result.success
    assert result.message == "Could not add the order."


def test_mark_as_paid_settles_credit_order(service, store):
    order_id = service.create_order(_draft()).id
    result = service.mark_as_paid(order_id)
    assert result.success

    order = Order.model_validate(store.get(order_id))
    assert order.payment_method == "Pago"
    assert order.payment_status == "paid"
    assert order.pending_value == 0
    assert order.due_date is None
    assert order.payment_date is not None


def test_created_then_paid_credit_order_leaves_receivables(service, store):
    first = service.create_order(_draft()).id
    service.create_order(_draft(customer_name="Bruno", products=[ProductDraft(name="Galão", quantity=2, price=14)]))
    assert compute_receivables_total(_orders(store)) == pytest.approx(138.0)

    service.mark_as_paid(first)
    assert compute_receivables_total(_orders(store)) == pytest.approx(28.0)


def test_mark_as_paid_is_one_way(service):
    order_id = service.create_order(_draft()).id
    assert service.mark_as_paid(order_id).success
    second = service.mark_as_paid(order_id)
    assert not second.success
    assert second.message == "Order is already paid."


def test_mark_as_paid_rejects_orders_paid_at_creation(service):
    order_id = service.create_order(_draft("Dinheiro")).id
    assert not service.mark_as_paid(order_id).success


def test_mark_as_paid_unknown_order(service):
    result = service.mark_as_paid("missing")
    assert not result.success
    assert result.message == "Order not found."


def test_mark_as_paid_backend_failure():
    store = BrokenStore(records=[{"id": "a", "paymentMethod": "Fiado", "paymentStatus": "pending"}])
    result = OrderService(store).mark_as_paid("a")
    assert not result.success
    assert result.message == "Could not mark the order as paid."
    assert store.get("a")["paymentStatus"] == "pending"


def test_concurrent_mark_as_paid_settles_once(service, store, monkeypatch):
    order_id = service.create_order(_draft()).id
    both_read = threading.Barrier(2, timeout=5)
    get = store.get

    def get_then_wait(oid):
        record = get(oid)
        both_read.wait()
        return record

    monkeypatch.setattr(store, "get", get_then_wait)
    results = []
    threads = [threading.Thread(target=lambda: results.append(service.mark_as_paid(order_id))) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert sorted(r.success for r in results) == [False, True]
    assert [r.message for r in results if not r.success] == ["Order is already paid."]


def test_create_order_succeeds_when_a_listener_error_handler_raises(service, store):
    def boom(orders):
        if orders:
            raise RuntimeError("render failed")

    def broken_handler(exc):
        raise ValueError("handler failed too")

    store.subscribe(boom, on_error=broken_handler)
    result = service.create_order(_draft())
    assert result.success
    assert [r["id"] for r in store.records()] == [result.id]
