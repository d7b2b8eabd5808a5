# storefront/repositories/cart_repo.py
import uuid
from datetime import datetime, timezone

from sqlmodel import Session, col, select

from storefront.models.cart import CartItem


class CartRepository:
    """
    Data access layer for cart_items, keyed by (user_id, product_id).
    """

    def list_for_user(self, session: Session, user_id: uuid.UUID) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(col(CartItem.created_at))
        )
        return list(session.exec(stmt).all())

    def get_item(
        self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.user_id == user_id, CartItem.product_id == product_id
        )
        return session.exec(stmt).first()

    def create(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def update(self, session: Session, item: CartItem) -> CartItem:
        item.updated_at = datetime.now(timezone.utc)
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.commit()

    def clear_user_cart(
        self, session: Session, user_id: uuid.UUID, commit: bool = True
    ) -> None:
        """
        Delete every line of a user's cart.

        commit=False lets checkout clear the cart inside its own transaction.
        """
        for row in self.list_for_user(session, user_id):
            session.delete(row)
        if commit:
            session.commit()
        else:
            session.flush()

    def delete_for_product(
        self, session: Session, product_id: uuid.UUID, commit: bool = True
    ) -> None:
        stmt = select(CartItem).where(CartItem.product_id == product_id)
        for row in session.exec(stmt).all():
            session.delete(row)
        if commit:
            session.commit()
        else:
            session.flush()
