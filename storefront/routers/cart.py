# storefront/routers/cart.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import require_auth
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import CartSummary, CartItemCreate, CartItemUpdate
from storefront.schemas.common import ApiResponse, ok
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo)


@router.get("", response_model=ApiResponse[CartSummary])
def get_my_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Get current user's cart summary.
    """
    summary = service.get_cart_summary(session, current_user.id)
    return ok(summary, "Cart items retrieved successfully")


@router.post("", response_model=ApiResponse[CartSummary])
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Add product to the current user's cart.

    Adding a product already in the cart increases its quantity.
    """
    summary = service.add_to_cart(session, current_user.id, payload)
    return ok(summary, "Item added to cart successfully")


@router.put("/{product_id}", response_model=ApiResponse[CartSummary])
def update_cart_item(
    product_id: uuid.UUID,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Set quantity of a product in the cart.
    """
    summary = service.update_quantity(
        session=session,
        user_id=current_user.id,
        product_id=product_id,
        payload=payload,
    )
    return ok(summary, "Cart item updated successfully")


@router.delete("/{product_id}", response_model=ApiResponse[CartSummary])
def remove_cart_item(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    summary = service.remove_item(session, current_user.id, product_id)
    return ok(summary, "Item removed from cart successfully")


@router.delete("", response_model=ApiResponse[CartSummary])
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    summary = service.clear_cart(session, current_user.id)
    return ok(summary, "Cart cleared successfully")
