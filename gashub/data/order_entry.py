from __future__ import annotations

from datetime import datetime, time
from typing import Any, Dict, Iterable, Optional

from gashub.errors import OrderValidationError

from .models import CREDIT, OrderDraft, ProductDraft
from .models.fields import to_number


def parse_price(value: Any) -> float:
    """Read a form price such as 'R$ 12,50'; unparsable input gives 0."""
    return to_number(value)


def calculate_total(products: Iterable[ProductDraft]) -> float:
    """Sum of price * quantity over the draft lines."""
    total = 0.0
    for product in products:
        total += parse_price(product.price) * product.quantity
    return total


def validate_order(draft: OrderDraft) -> None:
    """Check a draft before it is submitted.

    Raises:
        OrderValidationError: With a message suitable for the user.
    """
    if not draft.customer_name.strip() or not draft.address.strip():
        raise OrderValidationError("Customer name and address are required.")

    if not draft.products:
        raise OrderValidationError("Add at least one product to the order.")

    for product in draft.products:
        if not product.name.strip() or product.quantity < 1:
            raise OrderValidationError("Every product needs a name and a quantity of at least 1.")
        if parse_price(product.price) <= 0:
            raise OrderValidationError("Every product price must be greater than zero.")


def build_order_document(draft: OrderDraft, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Turn a validated draft into the camelCase document written to the store.

    Fiado orders start unpaid with the whole total outstanding; every other
    method is settled on the spot.
    """
    now = now or datetime.now().astimezone()
    total = calculate_total(draft.products)

    document: Dict[str, Any] = {
        "customerName": draft.customer_name.strip(),
        "address": draft.address.strip(),
        "products": [
            {"name": p.name.strip(), "quantity": p.quantity, "price": parse_price(p.price)}
            for p in draft.products
        ],
        "paymentMethod": draft.payment_method,
        "totalValue": total,
    }

    if draft.payment_method == CREDIT:
        due = draft.due_date or now.date()
        document.update(
            dueDate=datetime.combine(due, time.min).isoformat(),
            pendingValue=total,
            paymentDate=None,
            paymentStatus="pending",
        )
    else:
        document.update(
            paymentDate=now.isoformat(),
            pendingValue=0,
            paymentStatus="paid",
        )
    return document
