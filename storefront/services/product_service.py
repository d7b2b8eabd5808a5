# storefront/services/product_service.py
import logging
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.core.storage_utils import (
    upload_to_storage,
    delete_public_url,
    generate_filename,
)
from storefront.models.product import Product
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.common import Page, make_page
from storefront.schemas.product import ProductCreate, ProductSearch, ProductUpdate

logger = logging.getLogger(__name__)

# --- Image config ---

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image

ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}

# (content_type, file_bytes) of an uploaded image
ImageUpload = tuple[str, bytes]


class ProductService:
    """
    Business logic for the catalog.

    Responsibilities:
      - paging and search
      - image upload/delete orchestration with Supabase Storage
      - keeping carts consistent when a product disappears
      - admin-only operations (enforced at router via require_admin)
    """

    def __init__(self, repo: ProductRepository, cart_repo: CartRepository):
        self.repo = repo
        self.cart_repo = cart_repo

    # ----- Helpers -----

    @staticmethod
    def _validate_and_get_ext(content_type: str, file_bytes: bytes) -> str:
        if content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Unsupported image type. Allowed: JPEG, PNG, WEBP.",
            )

        if not file_bytes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Image file is empty.",
            )

        if len(file_bytes) > MAX_IMAGE_BYTES:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail="Image too large (max 5MB).",
            )

        return ALLOWED_IMAGE_CONTENT_TYPES[content_type]

    def _upload_image(self, image: ImageUpload) -> str:
        """
        Validate and upload a product image to a random filename.

        Path pattern:
            products/<uuid>.<ext>
        """
        content_type, file_bytes = image
        ext = self._validate_and_get_ext(content_type, file_bytes)
        path = f"products/{generate_filename(ext)}"
        return upload_to_storage(path, file_bytes, content_type)

    # ----- Queries -----

    def list_products(
        self,
        session: Session,
        page: int = 1,
        page_size: int = 10,
    ) -> Page:
        items, total = self.repo.list_page(
            session, skip=(page - 1) * page_size, limit=page_size
        )
        return make_page(items, page, page_size, total)

    def search_products(self, session: Session, params: ProductSearch) -> Page:
        items, total = self.repo.search(session, params)
        return make_page(items, params.page, params.page_size, total)

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    # ----- Admin operations -----

    def create_product(
        self,
        session: Session,
        payload: ProductCreate,
        image: ImageUpload | None = None,
    ) -> Product:
        """
        Create a product. The image (if any) is uploaded before the row
        is written so the row never points at a missing object.
        """
        image_url = self._upload_image(image) if image else None

        product = Product(
            name=payload.name,
            description=payload.description,
            price=payload.price,
            image_url=image_url,
        )
        try:
            product = self.repo.create(session, product)
        except Exception:
            session.rollback()
            if image_url:
                delete_public_url(image_url)
            raise

        logger.info("Created product %s", product.id)
        return product

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
        image: ImageUpload | None = None,
    ) -> Product:
        """
        Replace name/description/price and optionally the image.

        The previous image is removed from Storage only after the new
        URL has been saved. If the save fails the new upload is
        deleted instead.
        """
        product = self.get_product(session, product_id)
        old_image_url = product.image_url

        new_image_url = self._upload_image(image) if image else None
        if new_image_url:
            product.image_url = new_image_url

        product.name = payload.name
        product.description = payload.description
        product.price = payload.price
        product.updated_at = datetime.now(timezone.utc)

        try:
            product = self.repo.update(session, product)
        except Exception:
            session.rollback()
            if new_image_url:
                delete_public_url(new_image_url)
            raise

        if new_image_url and old_image_url and old_image_url != new_image_url:
            delete_public_url(old_image_url)

        return product

    def delete_product(
        self,
        session: Session,
        product_id: uuid.UUID,
    ) -> None:
        """
        Delete a product, the cart lines pointing at it, and its image.

        Order items keep their own name/price snapshot and are not touched.
        """
        product = self.get_product(session, product_id)
        image_url = product.image_url

        self.cart_repo.delete_for_product(session, product.id, commit=False)
        self.repo.delete(session, product)

        if image_url:
            delete_public_url(image_url)

        logger.info("Deleted product %s", product_id)
