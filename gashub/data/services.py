from __future__ import annotations

from datetime import datetime
from typing import Optional

from gashub.config import get_config
from gashub.errors import OrderAlreadyPaidError, OrderConflictError, OrderNotFoundError, OrderValidationError
from gashub.logger import get_logger

from .interface import AuthSession, OrderStore
from .models import SETTLED, CreateOrderResult, MutationResult, Order, OrderDraft
from .order_entry import build_order_document, validate_order
from .session import ConfigSession


class OrderService:
    """User-initiated order writes.

    Failures are logged and returned as result objects; nothing is retried
    and a failed write leaves the store untouched, so the user can resubmit.
    """

    def __init__(self, store: OrderStore, session: Optional[AuthSession] = None) -> None:
        self.config = get_config()
        self.logger = get_logger(__name__)
        self.store = store
        self.session = session or ConfigSession()

    def create_order(self, draft: OrderDraft) -> CreateOrderResult:
        """Validate `draft` and write it as a new order.

        Args:
            draft (OrderDraft): Order entry form input.
        Returns:
            CreateOrderResult: success with the new id, or the reason it failed.
        """
        try:
            validate_order(draft)
        except OrderValidationError as e:
            self.logger.info(f"Order rejected: {e}")
            return CreateOrderResult(success=False, message=str(e))

        document = build_order_document(draft)
        document["userId"] = self.session.current_user_id() or self.config.anonymous_user_id

        try:
            order_id = self.store.create(document)
        except Exception:
            self.logger.exception(f"Error creating order for {draft.customer_name!r}")
            return CreateOrderResult(success=False, message="Could not add the order.")

        self.logger.info(
            f"Order {order_id} created for {draft.customer_name!r} "
            f"({draft.payment_method}, {document['totalValue']:.2f})"
        )
        return CreateOrderResult(success=True, id=order_id, message="Order added!")

    def mark_as_paid(self, order_id: str) -> MutationResult:
        """Settle an order. Irreversible: an order that is already paid is rejected."""
        try:
            record = self.store.get(order_id)
            if record is None:
                raise OrderNotFoundError(order_id)
            if _is_settled(Order.model_validate(record)):
                raise OrderAlreadyPaidError(order_id)

            # Re-checked inside the store so two concurrent calls cannot both settle it
            self.store.update(
                order_id,
                {
                    "paymentMethod": SETTLED,
                    "paymentStatus": "paid",
                    "pendingValue": 0,
                    "dueDate": None,
                    "paymentDate": datetime.now().astimezone().isoformat(),
                },
                precondition=lambda order: not _is_settled(order),
            )
        except OrderNotFoundError:
            self.logger.warning(f"Cannot mark unknown order {order_id} as paid")
            return MutationResult(success=False, message="Order not found.")
        except (OrderAlreadyPaidError, OrderConflictError):
            self.logger.info(f"Order {order_id} is already paid")
            return MutationResult(success=False, message="Order is already paid.")
        except Exception:
            self.logger.exception(f"Error marking order {order_id} as paid")
            return MutationResult(success=False, message="Could not mark the order as paid.")

        self.logger.info(f"Order {order_id} marked as paid")
        return MutationResult(success=True, message="Order marked as paid!")


def _is_settled(order: Order) -> bool:
    return order.is_paid or order.payment_method == SETTLED


def get_order_service(store: OrderStore, session: Optional[AuthSession] = None) -> OrderService:
    """Returns a new OrderService using the latest config."""
    return OrderService(store, session)
