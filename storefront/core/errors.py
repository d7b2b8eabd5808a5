# storefront/core/errors.py
"""
Centralized exception handling.

Every error leaves the API in the same envelope as successful responses
(see storefront.schemas.common.ApiResponse):

    {
      "success": false,
      "message": "...",
      "status_code": 404,
      "data": null,
      "error": {"error_code": "NOT_FOUND", "error_message": "...", ...},
      "timestamp": "..."
    }
"""
import logging
from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.schemas.common import ApiResponse, ErrorInfo

logger = logging.getLogger(__name__)


def _error_code(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).name
    except ValueError:
        return "ERROR"


def error_response(
    status_code: int,
    message: str,
    validation_errors: dict[str, list[str]] | None = None,
    details=None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ApiResponse(
        success=False,
        message=message,
        status_code=status_code,
        data=None,
        error=ErrorInfo(
            error_code=_error_code(status_code),
            error_message=message,
            validation_errors=validation_errors,
            details=details,
        ),
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body),
        headers=headers,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    # detail may be a plain string or a structured dict (e.g. per-item errors)
    if isinstance(exc.detail, str):
        message, details = exc.detail, None
    elif isinstance(exc.detail, dict):
        message = str(exc.detail.get("message", "Request failed"))
        details = exc.detail
    else:
        message, details = "Request failed", exc.detail

    return error_response(
        exc.status_code,
        message,
        details=details,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path", "form")]
        field = ".".join(loc) or "request"
        errors.setdefault(field, []).append(err.get("msg", "Invalid value"))

    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation failed",
        validation_errors=errors,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


def as_request_validation_error(exc: ValidationError) -> RequestValidationError:
    """
    Re-raise a pydantic error from hand-built payloads (e.g. multipart forms)
    as a 422 instead of letting it surface as a 500.
    """
    return RequestValidationError(exc.errors(include_url=False))
