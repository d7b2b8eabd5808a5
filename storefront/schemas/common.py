# storefront/schemas/common.py
import math
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorInfo(BaseModel):
    """
    Error block of the response envelope.
    """

    error_code: str
    error_message: str
    validation_errors: dict[str, list[str]] | None = None
    details: Any | None = None


class ApiResponse(BaseModel, Generic[T]):
    """
    Envelope returned by every endpoint, success or failure.
    """

    success: bool = True
    message: str = ""
    status_code: int = 200
    data: T | None = None
    error: ErrorInfo | None = None
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class Page(BaseModel, Generic[T]):
    """
    One page of results plus paging metadata.
    """

    items: list[T]
    current_page: int
    page_size: int
    total_items: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool


def ok(data: Any = None, message: str = "", status_code: int = 200) -> ApiResponse:
    """Wrap a payload in a success envelope."""
    return ApiResponse(
        success=True,
        message=message,
        status_code=status_code,
        data=data,
    )


def make_page(items: list, page: int, page_size: int, total_items: int) -> Page:
    total_pages = math.ceil(total_items / page_size) if page_size else 0
    return Page(
        items=items,
        current_page=page,
        page_size=page_size,
        total_items=total_items,
        total_pages=total_pages,
        has_previous_page=page > 1,
        has_next_page=page < total_pages,
    )
