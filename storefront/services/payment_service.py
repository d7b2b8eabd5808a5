# storefront/services/payment_service.py
import logging
import uuid
from typing import Mapping

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.core.vnpay import VNPayClient
from storefront.schemas.order import PAYABLE_STATUSES
from storefront.schemas.payment import PaymentCallbackRead, PaymentUrlRead
from storefront.services.order_service import OrderService

logger = logging.getLogger(__name__)

# VNPay rejects diacritics in vnp_OrderInfo
ORDER_DESCRIPTION = "Thanh toan don hang #{order_id}"


class PaymentService:
    """
    Redirect-based VNPay flow.

    1. create_payment_url: signed URL for an order the caller owns.
    2. handle_callback: verify the signed return query and record the
       outcome on the order (paid / failed).
    """

    def __init__(self, gateway: VNPayClient, order_service: OrderService):
        self.gateway = gateway
        self.order_service = order_service

    def create_payment_url(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
        ip_addr: str | None = None,
    ) -> PaymentUrlRead:
        order = self.order_service.get_order(session, order_id)
        if order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )

        if order.status not in PAYABLE_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Order is not awaiting payment (status: {order.status})",
            )

        url = self.gateway.create_payment_url(
            order_id=order.id,
            amount=order.total_amount,
            description=ORDER_DESCRIPTION.format(order_id=order.id),
            ip_addr=ip_addr,
        )
        logger.info("Payment URL created for order %s", order.id)
        return PaymentUrlRead(payment_url=url)

    def handle_callback(
        self,
        session: Session,
        query: Mapping[str, str],
    ) -> PaymentCallbackRead:
        """
        Process the gateway return query.

        Raises:
            HTTPException(400): bad signature or no order id in the query.
            HTTPException(404): order does not exist.
        """
        result = self.gateway.parse_callback(query)

        if not result.valid_signature:
            logger.warning(
                "Rejected VNPay callback with invalid signature (txn=%s)",
                result.transaction_id,
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid payment signature",
            )

        if not result.order_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Order id missing from payment callback",
            )

        order_id = uuid.UUID(result.order_id)
        order = self.order_service.get_order(session, order_id)

        # Reported amount is informational only; the stored total is kept.
        if result.amount is not None and int(result.amount) != int(order.total_amount):
            logger.warning(
                "Gateway amount %s differs from order %s total %s",
                result.amount,
                order.id,
                order.total_amount,
            )

        new_status = "paid" if result.success else "failed"
        self.order_service.update_status(
            session,
            order_id,
            new_status,
            payment_id=result.transaction_id,
            payment_method=result.payment_method,
        )

        return PaymentCallbackRead(
            success=result.success,
            order_id=result.order_id,
            transaction_id=result.transaction_id,
            message="Payment successful" if result.success else "Payment failed",
        )
