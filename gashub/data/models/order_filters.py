from __future__ import annotations

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

DateRange = Literal["today", "this_week", "this_month", "custom"]
StatusFilter = Literal["all", "paid", "credit", "pending"]
SortBy = Literal["date", "value", "customer_name"]
SortOrder = Literal["asc", "desc"]


class OrderFilters(BaseModel):
    """Filters for the dashboard order view."""
    date_range: DateRange = Field(default="today", description="Period preset; 'custom' uses start_ts/end_ts")
    start_ts: Optional[datetime] = Field(default=None, description="Start of a custom period")
    end_ts: Optional[datetime] = Field(default=None, description="End of a custom period")
    status: StatusFilter = Field(default="all", description="Payment status filter")
    customer_name: Optional[str] = Field(default=None, description="Case-insensitive customer name search")
    sort_by: SortBy = Field(default="date", description="Sort key")
    sort_order: SortOrder = Field(default="desc", description="Sort direction")

    @classmethod
    def from_config(cls, config: Any) -> "OrderFilters":
        return cls(
            date_range=config.default_date_range,
            status=config.default_status_filter,
            sort_by=config.default_sort_by,
            sort_order=config.default_sort_order,
        )

    def with_updates(self, **changes: Any) -> "OrderFilters":
        """Return a copy with `changes` merged in and validated."""
        return type(self).model_validate({**self.model_dump(), **changes})
