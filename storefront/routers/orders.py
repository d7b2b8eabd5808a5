# storefront/routers/orders.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from storefront.core.auth import require_auth, require_admin
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.order_repo import OrderRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.common import ApiResponse, ok
from storefront.schemas.order import OrderCreate, OrderRead, OrderStatusUpdate
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
cart_repo = CartRepository()
product_repo = ProductRepository()
service = OrderService(order_repo, cart_repo, product_repo)


# -------- User-facing endpoints --------


@router.post(
    "/checkout",
    response_model=ApiResponse[OrderRead],
    status_code=status.HTTP_201_CREATED,
)
def checkout(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Create an order from the current user's cart and empty the cart.

    The order starts as 'pending' until the payment callback arrives.
    """
    order = service.create_order_from_cart(session, current_user.id, payload)
    return ok(order, "Order created successfully", status.HTTP_201_CREATED)


@router.get("/me", response_model=ApiResponse[list[OrderRead]])
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    skip: int = 0,
    limit: int = 50,
):
    """
    List the authenticated user's orders, newest first.
    """
    orders = service.list_user_orders(session, current_user.id, skip, limit)
    return ok(orders, "Orders retrieved successfully")


@router.get("/me/{order_id}", response_model=ApiResponse[OrderRead])
def get_my_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    order = service.get_user_order(session, current_user.id, order_id)
    return ok(order, "Order retrieved successfully")


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=ApiResponse[list[OrderRead]],
    dependencies=[Depends(require_admin)],
)
def list_all_orders(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
):
    orders = service.list_all_orders(session, skip, limit)
    return ok(orders, "Orders retrieved successfully")


@router.get(
    "/{order_id}",
    response_model=ApiResponse[OrderRead],
    dependencies=[Depends(require_admin)],
)
def get_order_admin(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return ok(service.get_order_admin(session, order_id), "Order retrieved successfully")


@router.put(
    "/{order_id}/status",
    response_model=ApiResponse[OrderRead],
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Override order status (admin only), optionally recording a payment id.
    """
    order = service.set_status(session, order_id, payload)
    return ok(order, "Order status updated successfully")
