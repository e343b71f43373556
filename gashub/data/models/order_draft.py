from __future__ import annotations

from datetime import date
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from .orders import EntryPaymentMethod


class ProductDraft(BaseModel):
    """Product line as typed into the order form; price may still be a 'R$ 0,00' string."""
    name: str = Field(default="", description="Product name")
    quantity: int = Field(default=1, description="Units ordered")
    price: Union[float, str] = Field(default="R$ 0,00", description="Unit price, number or pt-BR money string")


class OrderDraft(BaseModel):
    """Input of the order entry form."""
    customer_name: str = Field(default="", description="Customer name")
    address: str = Field(default="", description="Delivery address")
    products: List[ProductDraft] = Field(default_factory=list, description="Product lines")
    payment_method: EntryPaymentMethod = Field(default="Dinheiro", description="Payment method")
    due_date: Optional[date] = Field(default=None, description="Due date for Fiado orders")
