# storefront/schemas/cart.py
import uuid
from datetime import datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID
    quantity: int = Field(default=1, ge=1)


class CartItemUpdate(SQLModel):
    """
    Payload for setting the quantity of a cart line.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(ge=1)


class CartItemRead(SQLModel):
    """
    Cart line joined with the current product data.
    """

    id: uuid.UUID
    user_id: uuid.UUID
    product_id: uuid.UUID
    product_name: str
    product_description: str
    product_price: float
    product_image_url: str | None = None
    quantity: int
    line_total: float
    created_at: datetime
    updated_at: datetime


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartItemRead]
    total_quantity: int
    total_price: float
