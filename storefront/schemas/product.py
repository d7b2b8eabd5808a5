# storefront/schemas/product.py
import math
import uuid
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field

SortOrder = Literal["asc", "desc"]


class ProductCreate(SQLModel):
    """
    Payload for creating a product.

    The image is uploaded separately as a multipart file; the stored
    image_url is set by the service after the upload succeeds.
    """

    # Strip before length checks so padding cannot satisfy min_length
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    name: str = Field(min_length=2, max_length=100)
    description: str = Field(min_length=10, max_length=500)
    price: float = Field(gt=0)

    @field_validator("price")
    @classmethod
    def finite_price(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("price must be a finite number")
        return v


class ProductUpdate(ProductCreate):
    """
    Full replacement of the editable fields (PUT semantics).
    """

    pass


class ProductRead(SQLModel):
    """
    Product representation for clients.
    """

    id: uuid.UUID
    name: str
    description: str
    price: float
    image_url: str | None = None
    created_at: datetime
    updated_at: datetime


class ProductSearch(SQLModel):
    """
    Catalog query: free-text term, inclusive price range, sort, paging.

    Results are ordered by price when a price bound is given,
    otherwise by name.
    """

    search_term: str | None = None
    min_price: float | None = Field(default=None, ge=0)
    max_price: float | None = Field(default=None, ge=0)
    sort_order: SortOrder = "asc"
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=100)

    @field_validator("search_term")
    @classmethod
    def normalize_term(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None

    @model_validator(mode="after")
    def check_price_range(self) -> "ProductSearch":
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValueError("min_price cannot be greater than max_price")
        return self

    @property
    def has_price_filter(self) -> bool:
        return self.min_price is not None or self.max_price is not None
