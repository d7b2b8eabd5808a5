# storefront/routers/payment.py
from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from storefront.core.auth import require_auth
from storefront.core.config import get_settings
from storefront.core.vnpay import VNPayClient
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.common import ApiResponse, ok
from storefront.schemas.payment import (
    PaymentCallbackRead,
    PaymentUrlCreate,
    PaymentUrlRead,
)
from storefront.services.order_service import OrderService
from storefront.services.payment_service import PaymentService

router = APIRouter(prefix="/payment", tags=["Payment"])

gateway = VNPayClient.from_settings(get_settings())
order_service = OrderService(OrderRepository(), CartRepository(), ProductRepository())
service = PaymentService(gateway, order_service)


@router.post("/create-payment-url", response_model=ApiResponse[PaymentUrlRead])
def create_payment_url(
    payload: PaymentUrlCreate,
    request: Request,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Build the signed VNPay redirect URL for one of the caller's orders.

    Only orders in 'pending' or 'failed' status can be paid.
    """
    ip_addr = request.client.host if request.client else None
    result = service.create_payment_url(
        session, current_user.id, payload.order_id, ip_addr
    )
    return ok(result, "Payment URL created successfully")


@router.get("/vnpay-callback", response_model=ApiResponse[PaymentCallbackRead])
def vnpay_callback(
    request: Request,
    session: Session = Depends(get_session),
):
    """
    Gateway return URL handler (public).

    The signed query string is verified before the order is touched;
    response code '00' marks the order paid, anything else failed.
    """
    result = service.handle_callback(session, dict(request.query_params))
    message = (
        "Payment processed successfully" if result.success else "Payment failed"
    )
    return ok(result, message)
