# storefront/repositories/product_repo.py
import uuid

from sqlalchemy import func, or_
from sqlmodel import Session, col, select

from storefront.models.product import Product
from storefront.schemas.product import ProductSearch


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def list_page(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[Product], int]:
        """
        One page of products ordered by name, plus the total row count.
        """
        total = session.exec(select(func.count()).select_from(Product)).one()
        stmt = (
            select(Product)
            .order_by(col(Product.name), col(Product.id))
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all()), int(total or 0)

    def search(
        self,
        session: Session,
        params: ProductSearch,
    ) -> tuple[list[Product], int]:
        """
        Filter by term (name or description, case-insensitive) and price
        range, sort, and paginate. Returns (items, total matching rows).
        """
        stmt = select(Product)

        if params.search_term:
            stmt = stmt.where(
                or_(
                    col(Product.name).icontains(params.search_term, autoescape=True),
                    col(Product.description).icontains(
                        params.search_term, autoescape=True
                    ),
                )
            )
        if params.min_price is not None:
            stmt = stmt.where(col(Product.price) >= params.min_price)
        if params.max_price is not None:
            stmt = stmt.where(col(Product.price) <= params.max_price)

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = session.exec(count_stmt).one()

        sort_col = col(Product.price) if params.has_price_filter else col(Product.name)
        ordering = sort_col.desc() if params.sort_order == "desc" else sort_col.asc()

        stmt = (
            stmt.order_by(ordering, col(Product.id))
            .offset((params.page - 1) * params.page_size)
            .limit(params.page_size)
        )
        return list(session.exec(stmt).all()), int(total or 0)

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.commit()
