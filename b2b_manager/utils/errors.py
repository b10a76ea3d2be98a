"""Application errors and retry helpers."""

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from b2b_manager.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ErrorCode(str, Enum):
    """Machine-readable error codes returned to API clients."""

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

    # Business logic errors
    RULE_NOT_FOUND = "RULE_NOT_FOUND"
    DUPLICATE_RULE = "DUPLICATE_RULE"
    INVALID_DISCOUNT_VALUE = "INVALID_DISCOUNT_VALUE"

    # External service errors
    SHOPIFY_API_ERROR = "SHOPIFY_API_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"


class AppError(Exception):
    """Error carrying an HTTP status and a stable error code."""

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        status_code: int = 500,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details

    def to_response(self) -> dict[str, Any]:
        """Render the error as a JSON-serializable body."""
        body: dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.code.value,
        }
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """Invalid merchant or customer input."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message, ErrorCode.VALIDATION_ERROR, 400, details)


class NotFoundError(AppError):
    """Requested record does not exist for this shop."""

    def __init__(self, message: str):
        super().__init__(message, ErrorCode.RULE_NOT_FOUND, 404)


class ShopifyAPIError(AppError):
    """The Shopify Admin API rejected or failed a request."""

    def __init__(self, message: str, status_code: int = 502, details: Any = None):
        super().__init__(message, ErrorCode.SHOPIFY_API_ERROR, status_code, details)


def validate_required(value: Any, field_name: str) -> None:
    """Raise if a required field is missing or blank."""
    if value is None or value == "":
        raise AppError(
            f"{field_name} is required",
            ErrorCode.MISSING_REQUIRED_FIELD,
            400,
        )


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    delay: float = 1.0,
) -> T:
    """Run an async operation with exponential backoff.

    ``max_retries`` is the number of attempts; the operation always runs at
    least once. Client errors (``AppError`` with a status below 500) are
    raised immediately.
    """
    max_retries = max(max_retries, 1)
    for attempt in range(max_retries):
        try:
            return await operation()

        except AppError as e:
            if e.status_code < 500 or attempt == max_retries - 1:
                raise
            wait_time = delay * (2**attempt)
            logger.warning(
                "operation_failed_retrying",
                attempt=attempt + 1,
                max_retries=max_retries,
                wait_seconds=wait_time,
                error=e.message,
            )
            await asyncio.sleep(wait_time)

        except Exception as e:
            if attempt == max_retries - 1:
                raise
            wait_time = delay * (2**attempt)
            logger.warning(
                "operation_failed_retrying",
                attempt=attempt + 1,
                max_retries=max_retries,
                wait_seconds=wait_time,
                error=str(e),
            )
            await asyncio.sleep(wait_time)

    raise AppError("Max retries exceeded", ErrorCode.INTERNAL_ERROR)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render ``AppError`` as a consistent JSON error response."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "app_error",
        path=request.url.path,
        code=exc.code.value,
        status_code=exc.status_code,
        error=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Hide unexpected failures behind a generic internal error."""
    logger.exception("unhandled_error", path=request.url.path, error=str(exc))
    error = AppError("An unexpected error occurred", ErrorCode.INTERNAL_ERROR, 500)
    return JSONResponse(status_code=500, content=error.to_response())


def register_error_handlers(app: FastAPI) -> None:
    """Install the application's exception handlers."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
