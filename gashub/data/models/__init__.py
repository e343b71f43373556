from .order_filters import (
    DateRange,
    OrderFilters,
    SortBy,
    SortOrder,
    StatusFilter,
)

from .orders import (
    CARD,
    CASH,
    CREDIT,
    PIX,
    SETTLED,
    EntryPaymentMethod,
    Order,
    PaymentStatus,
    ProductLine,
)
from .order_draft import OrderDraft, ProductDraft
from .metrics import OrderMetrics, OrderSummary
from .results import CreateOrderResult, MutationResult

__all__ = [
    # Filter classes
    "DateRange",
    "OrderFilters",
    "SortBy",
    "SortOrder",
    "StatusFilter",
    # Stored orders
    "CARD",
    "CASH",
    "CREDIT",
    "PIX",
    "SETTLED",
    "EntryPaymentMethod",
    "Order",
    "PaymentStatus",
    "ProductLine",
    # Order entry
    "OrderDraft",
    "ProductDraft",
    # Aggregates
    "OrderMetrics",
    "OrderSummary",
    # Write results
    "CreateOrderResult",
    "MutationResult",
]
