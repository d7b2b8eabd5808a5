# storefront/schemas/order.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

OrderStatus = Literal["pending", "paid", "failed", "cancelled"]

# Statuses from which a payment can be (re)started
PAYABLE_STATUSES: set[str] = {"pending", "failed"}


class OrderCreate(SQLModel):
    """
    Payload for checking out the current cart.

    Backend derives:
      - user_id from token
      - status = 'pending'
      - total_amount and items from the cart
    """

    model_config = ConfigDict(extra="forbid")

    payment_method: str = Field(max_length=50)

    @field_validator("payment_method")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("payment_method cannot be empty")
        return v


class OrderItemRead(SQLModel):
    id: uuid.UUID
    product_id: uuid.UUID
    product_name: str
    product_price: float
    quantity: int
    line_total: float
    created_at: datetime


class OrderRead(SQLModel):
    """
    Order with its item snapshots.
    """

    id: uuid.UUID
    user_id: uuid.UUID
    total_amount: float
    status: OrderStatus
    payment_method: str | None = None
    payment_id: str | None = None
    created_at: datetime
    updated_at: datetime
    items: list[OrderItemRead]


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
    payment_id: str | None = None
