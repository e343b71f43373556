from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .fields import to_datetime, to_int, to_number, to_optional_text, to_text

# Payment methods as stored in the document store.
CASH = "Dinheiro"
CARD = "Cartão"
PIX = "Pix"
CREDIT = "Fiado"
# A settled credit order has its method overwritten with this marker.
SETTLED = "Pago"

EntryPaymentMethod = Literal["Dinheiro", "Cartão", "Pix", "Fiado"]
PaymentStatus = Literal["pending", "paid"]


class ProductLine(BaseModel):
    """One product line of a stored order."""
    name: str = Field(default="", description="Product name, e.g. 'Botijão de 13kg'")
    quantity: int = Field(default=0, description="Units ordered")
    price: float = Field(default=0.0, description="Unit price")

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        return to_text(value)

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, value: Any) -> int:
        return to_int(value)

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, value: Any) -> float:
        return to_number(value)


class Order(BaseModel):
    """An order document as read from the `pedidos` collection.

    Records are camelCase in the store. Reading never fails on a bad scalar:
    amounts fall back to 0, dates to None and unknown payment statuses to
    "pending". Fields this model does not know about are kept as extras.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: Optional[str] = Field(default=None, description="Document id assigned by the store")
    customer_name: str = Field(default="", description="Customer name")
    address: str = Field(default="", description="Delivery address")
    products: List[ProductLine] = Field(default_factory=list, description="Ordered product lines")
    payment_method: str = Field(default="", description="Dinheiro, Cartão, Pix, Fiado or Pago")
    total_value: float = Field(default=0.0, description="Sum of price * quantity at creation")
    pending_value: float = Field(default=0.0, description="Outstanding amount of an unpaid credit order")
    payment_status: PaymentStatus = Field(default="pending", description="pending or paid")
    due_date: Optional[datetime] = Field(default=None, description="Due date of an unpaid credit order")
    payment_date: Optional[datetime] = Field(default=None, description="When the order was paid")
    timestamp: Optional[datetime] = Field(default=None, description="Creation timestamp")
    user_id: Optional[str] = Field(default=None, description="Creating account or the anonymous sentinel")
    status: Optional[str] = Field(default=None, description="Delivery status")

    @field_validator("customer_name", "address", "payment_method", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return to_text(value)

    @field_validator("id", "user_id", "status", mode="before")
    @classmethod
    def _coerce_optional_text(cls, value: Any) -> Optional[str]:
        return to_optional_text(value)

    @field_validator("total_value", "pending_value", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> float:
        return to_number(value)

    @field_validator("due_date", "payment_date", "timestamp", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Optional[datetime]:
        return to_datetime(value)

    @field_validator("payment_status", mode="before")
    @classmethod
    def _coerce_status(cls, value: Any) -> str:
        return "paid" if value == "paid" else "pending"

    @field_validator("products", mode="before")
    @classmethod
    def _coerce_products(cls, value: Any) -> list:
        if not isinstance(value, (list, tuple)):
            return []
        return [line for line in value if isinstance(line, (dict, ProductLine))]

    @property
    def is_credit(self) -> bool:
        return self.payment_method == CREDIT

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"

    @property
    def is_open_receivable(self) -> bool:
        """Credit order still waiting for payment."""
        return self.is_credit and not self.is_paid

    @property
    def display_value(self) -> float:
        """Amount still relevant to this order: outstanding value, else the total."""
        return self.pending_value or self.total_value or 0.0

    def to_record(self) -> Dict[str, Any]:
        """Dump back to the camelCase document shape."""
        return self.model_dump(by_alias=True, mode="json")
