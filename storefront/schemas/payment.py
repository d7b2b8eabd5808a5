# storefront/schemas/payment.py
import uuid

from pydantic import ConfigDict
from sqlmodel import SQLModel


class PaymentUrlCreate(SQLModel):
    """
    Payload for requesting a gateway redirect URL for an order.
    """

    model_config = ConfigDict(extra="forbid")

    order_id: uuid.UUID


class PaymentUrlRead(SQLModel):
    payment_url: str


class PaymentResult(SQLModel):
    """
    Parsed gateway callback.

    `valid_signature` must be checked before trusting any other field.
    """

    valid_signature: bool
    success: bool
    order_id: str | None = None
    transaction_id: str | None = None
    payment_method: str | None = None
    response_code: str | None = None
    amount: float | None = None
    order_description: str | None = None


class PaymentCallbackRead(SQLModel):
    success: bool
    order_id: str
    transaction_id: str | None = None
    message: str
