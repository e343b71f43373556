from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class MutationResult(BaseModel):
    """Outcome of a user-initiated write."""
    success: bool = Field(description="Whether the write went through")
    message: str = Field(default="", description="User-facing message")


class CreateOrderResult(MutationResult):
    """Outcome of creating an order."""
    id: Optional[str] = Field(default=None, description="Id of the new order on success")
