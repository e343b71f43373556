from __future__ import annotations


class GasHubError(Exception):
    """Base class for every error raised by GasHub."""


class OrderValidationError(GasHubError):
    """An order draft is incomplete or has invalid product lines."""


class OrderStoreError(GasHubError):
    """The order store could not complete a read or write."""


class OrderNotFoundError(OrderStoreError):
    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


class OrderConflictError(OrderStoreError):
    """The stored order no longer satisfies the precondition of an update."""

    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order changed before the update: {order_id}")
        self.order_id = order_id


class OrderAlreadyPaidError(OrderStoreError):
    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order already paid: {order_id}")
        self.order_id = order_id
