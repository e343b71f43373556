from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from .orders import Order


class OrderMetrics(BaseModel):
    """Summary metrics over a filtered order list."""
    total_orders: int = Field(default=0, description="Number of orders")
    total_value: float = Field(default=0.0, description="Sum of outstanding value, else total, per order")
    average_order_value: float = Field(default=0.0, description="total_value / total_orders")
    credit_count: int = Field(default=0, description="Orders paid with Fiado")
    paid_count: int = Field(default=0, description="Orders with payment_status 'paid'")
    conversion_rate: float = Field(default=0.0, description="paid_count / total_orders * 100")


class OrderSummary(BaseModel):
    """Filtered orders together with their metrics."""
    orders: List[Order] = Field(default_factory=list, description="Filtered and sorted orders")
    metrics: OrderMetrics = Field(default_factory=OrderMetrics, description="Metrics over `orders`")
