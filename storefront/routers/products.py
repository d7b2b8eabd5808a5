# storefront/routers/products.py
import uuid
from typing import Annotated

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Query,
    UploadFile,
    status,
)
from pydantic import ValidationError
from sqlmodel import Session

from storefront.core.auth import require_admin
from storefront.core.errors import as_request_validation_error
from storefront.database import get_session
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.common import ApiResponse, Page, ok
from storefront.schemas.product import (
    ProductCreate,
    ProductRead,
    ProductSearch,
    ProductUpdate,
)
from storefront.services.product_service import ImageUpload, ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
cart_repo = CartRepository()
service = ProductService(repo, cart_repo)


def _read_image(image_file: UploadFile | None) -> ImageUpload | None:
    if image_file is None or not image_file.filename:
        return None
    if not image_file.content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing content-type for uploaded file",
        )
    return image_file.content_type, image_file.file.read()


# -------- Public endpoints --------


@router.get("", response_model=ApiResponse[Page[ProductRead]])
def list_products(
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
):
    """
    List products, ordered by name.
    """
    result = service.list_products(session, page=page, page_size=page_size)
    return ok(result, "Products retrieved successfully")


@router.get("/search", response_model=ApiResponse[Page[ProductRead]])
def search_products(
    params: Annotated[ProductSearch, Query()],
    session: Session = Depends(get_session),
):
    """
    Search by name/description and price range.

    - Sorted by price when min_price/max_price is given, else by name.
    - `sort_order`: asc | desc
    """
    result = service.search_products(session, params)
    return ok(result, "Products retrieved successfully")


@router.get("/{product_id}", response_model=ApiResponse[ProductRead])
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return ok(service.get_product(session, product_id), "Product retrieved successfully")


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=ApiResponse[ProductRead],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    name: str = Form(..., min_length=2, max_length=100),
    description: str = Form(..., min_length=10, max_length=500),
    price: float = Form(..., gt=0, allow_inf_nan=False),
    image_file: UploadFile | None = File(None),
    session: Session = Depends(get_session),
):
    """
    Create a new product (admin only).

    Multipart form: name, description, price, optional image_file
    (JPEG, PNG, WEBP; max 5MB). The image is stored before the product.
    """
    try:
        payload = ProductCreate(name=name, description=description, price=price)
    except ValidationError as e:
        raise as_request_validation_error(e)

    product = service.create_product(session, payload, _read_image(image_file))
    return ok(product, "Product created successfully", status.HTTP_201_CREATED)


@router.put(
    "/{product_id}",
    response_model=ApiResponse[ProductRead],
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: uuid.UUID,
    name: str = Form(..., min_length=2, max_length=100),
    description: str = Form(..., min_length=10, max_length=500),
    price: float = Form(..., gt=0, allow_inf_nan=False),
    image_file: UploadFile | None = File(None),
    session: Session = Depends(get_session),
):
    """
    Replace a product's fields (admin only). A new image_file replaces
    the stored image.
    """
    try:
        payload = ProductUpdate(name=name, description=description, price=price)
    except ValidationError as e:
        raise as_request_validation_error(e)

    product = service.update_product(
        session, product_id, payload, _read_image(image_file)
    )
    return ok(product, "Product updated successfully")


@router.delete(
    "/{product_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete a product and its image (admin only).

    Past orders keep their item snapshots.
    """
    service.delete_product(session, product_id)
    return ok(None, "Product deleted successfully")
