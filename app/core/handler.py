"""Exception handlers for the FastAPI application."""
import logging
from fastapi import Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse
from app.core.exceptions import AppException
from app.core.constants import GeneralErrorDetails

logger = logging.getLogger(__name__)


def create_error_response(
    status_code: int, message: str, data: dict | None = None, retry_after: int | None = None
) -> JSONResponse:
    """Create a standardized error response."""
    headers = {"Retry-After": str(retry_after)} if retry_after is not None else None
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            "data": data
        },
        headers=headers,
    )


def _field_path(loc: tuple | list) -> str:
    """Dotted field path without the request part, e.g. ``("body", "goalId")`` -> ``goalId``."""
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "unknown"


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with standardized response format."""
    return create_error_response(exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle validation errors with standardized format."""
    error_details = []

    for error in exc.errors():
        message = error.get("msg", "")

        # Remove "Value error, " prefix if present
        if message.startswith("Value error, "):
            message = message[13:]

        error_details.append({"field": _field_path(error.get("loc", ())), "message": message})

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="Validation error",
        data={"validation_errors": error_details}
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle application-specific exceptions.

    Model outages and rate limits carry a Retry-After header so clients can
    back off instead of resending the chat message immediately.
    """
    if exc.status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    elif exc.status_code == status.HTTP_429_TOO_MANY_REQUESTS:
        logger.warning(f"[API] Rate limit hit on {request.url.path}")
    return create_error_response(exc.status_code, exc.message, exc.data, retry_after=exc.retry_after)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other unhandled exceptions with error logging."""
    logger.exception(
        "Unhandled exception occurred",
        extra={"path": request.url.path, "method": request.method}
    )

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message=GeneralErrorDetails.INTERNAL_SERVER_ERROR
    )
