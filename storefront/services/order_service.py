# storefront/services/order_service.py
import logging
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.models.order import Order, OrderItem
from storefront.models.product import Product
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.order import (
    OrderCreate,
    OrderItemRead,
    OrderRead,
    OrderStatusUpdate,
)

logger = logging.getLogger(__name__)


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Create order from cart (checkout)
      - Snapshot product name/price into order items
      - Compute total_amount once, at checkout
      - Clear cart after success
      - Record status changes coming from the payment gateway or an admin

    Status changes are not guarded: a late or replayed callback can move an
    order from any status to any other.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
    ):
        self.order_repo = order_repo
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # -------- User-facing operations --------

    def create_order_from_cart(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: OrderCreate,
    ) -> OrderRead:
        """
        Convert the current user's cart into an Order.

        Steps:
          1. Load cart items; error if empty.
          2. Load each product; error if any is gone.
          3. Compute total_amount = sum(price * quantity).
          4. Create Order row (status='pending').
          5. Create OrderItem snapshot rows.
          6. Clear cart.
          7. Commit and return full order.

        There is no idempotency key: submitting twice with a refilled cart
        creates two orders.
        """
        cart_items = self.cart_repo.list_for_user(session, user_id)
        if not cart_items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart is empty",
            )

        products: dict[uuid.UUID, Product] = {}
        for ci in cart_items:
            product = self.product_repo.get_by_id(session, ci.product_id)
            if product is None:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Product {ci.product_id} not found",
                )
            products[ci.product_id] = product

        total_amount = 0.0
        for ci in cart_items:
            total_amount += products[ci.product_id].price * ci.quantity

        order = Order(
            user_id=user_id,
            total_amount=total_amount,
            status="pending",
            payment_method=payload.payment_method,
        )
        order = self.order_repo.create_order(session, order)

        order_items = [
            OrderItem(
                order_id=order.id,
                product_id=ci.product_id,
                product_name=products[ci.product_id].name,
                product_price=products[ci.product_id].price,
                quantity=ci.quantity,
            )
            for ci in cart_items
        ]
        order_items = self.order_repo.create_items(session, order_items)

        self.cart_repo.clear_user_cart(session, user_id, commit=False)

        session.commit()
        session.refresh(order)
        for item in order_items:
            session.refresh(item)

        logger.info(
            "Order %s created for user %s: %d items, total %.2f",
            order.id,
            user_id,
            len(order_items),
            order.total_amount,
        )
        return self._build_order_read(order, order_items)

    def list_user_orders(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        """
        List orders for the given user, newest first, with items.
        """
        orders = self.order_repo.list_for_user(session, user_id, skip, limit)
        return [self._load_order_read(session, o) for o in orders]

    def get_user_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> OrderRead:
        """
        Get a single order for the user, including items.

        - 404 if order not found or does not belong to this user.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order or order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return self._load_order_read(session, order)

    # -------- Admin operations --------

    def list_all_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[OrderRead]:
        orders = self.order_repo.list_all(session, skip, limit)
        return [self._load_order_read(session, o) for o in orders]

    def get_order(self, session: Session, order_id: uuid.UUID) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return order

    def get_order_admin(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> OrderRead:
        return self._load_order_read(session, self.get_order(session, order_id))

    def set_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: OrderStatusUpdate,
    ) -> OrderRead:
        """
        Admin status override.
        """
        return self.update_status(
            session,
            order_id,
            payload.status,
            payment_id=payload.payment_id,
        )

    def update_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        new_status: str,
        payment_id: str | None = None,
        payment_method: str | None = None,
    ) -> OrderRead:
        """
        Set the order status and, when given, the payment id/method.

        Used by the payment callback and by admins.
        """
        order = self.get_order(session, order_id)

        previous = order.status
        order.status = new_status
        if payment_id:
            order.payment_id = payment_id
        if payment_method:
            order.payment_method = payment_method
        order.updated_at = datetime.now(timezone.utc)

        order = self.order_repo.save(session, order)
        logger.info("Order %s status %s -> %s", order.id, previous, new_status)
        return self._load_order_read(session, order)

    # -------- Helper DTO builders --------

    def _load_order_read(self, session: Session, order: Order) -> OrderRead:
        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_read(order, items)

    def _build_order_read(
        self,
        order: Order,
        items: list[OrderItem],
    ) -> OrderRead:
        item_dtos = [
            OrderItemRead(
                id=it.id,
                product_id=it.product_id,
                product_name=it.product_name,
                product_price=it.product_price,
                quantity=it.quantity,
                line_total=it.product_price * it.quantity,
                created_at=it.created_at,
            )
            for it in items
        ]

        return OrderRead(
            id=order.id,
            user_id=order.user_id,
            total_amount=order.total_amount,
            status=order.status,
            payment_method=order.payment_method,
            payment_id=order.payment_id,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=item_dtos,
        )
