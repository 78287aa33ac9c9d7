import traceback
from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from pymongo.errors import DuplicateKeyError
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.logging import get_logger

log = get_logger(__name__)


class AppError(Exception):
    """Base application error with consistent schema.

    Subclasses are expected operational outcomes; anything else reaching the
    generic handler is treated as a bug.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class BadRequestError(AppError):
    def __init__(self, message: str = "Bad request", details: dict[str, Any] | None = None):
        super().__init__(message, status_code=status.HTTP_400_BAD_REQUEST, details=details)


class NotFoundError(AppError):
    def __init__(self, message: str = "Not found"):
        super().__init__(message, status_code=status.HTTP_404_NOT_FOUND)


class PayloadTooLargeError(AppError):
    def __init__(self, message: str = "Payload too large"):
        super().__init__(message, status_code=413)


class UnprocessableError(AppError):
    def __init__(self, message: str = "Unprocessable entity"):
        super().__init__(message, status_code=422)


class InvalidTransitionError(UnprocessableError):
    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move resume from '{current}' to '{target}'.")
        self.current = current
        self.target = target


class ReadFailureError(AppError):
    def __init__(self, message: str = "Failed to read uploaded file."):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


class AnalysisProviderError(AppError):
    """Raised by an analysis provider; the analyzer may fall back on it."""

    def __init__(self, message: str, provider: str):
        super().__init__(message, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.provider = provider


class ProviderConfigError(AnalysisProviderError):
    pass


class ProviderResponseError(AnalysisProviderError):
    pass


def _body(request: Request, status_code: int, message: str, exc: BaseException | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {
        "status": "fail" if status_code < 500 else "error",
        "message": message,
    }
    if hasattr(request.state, "request_id"):
        body["request_id"] = request.state.request_id
    if exc is not None and get_settings().is_development:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


def error_response(request: Request, status_code: int, message: str, exc: BaseException | None = None) -> ORJSONResponse:
    if status_code >= 500:
        log.error(
            "request_failed",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            message=message,
            exc_info=exc,
        )
    else:
        log.warning(
            "operational_error",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            message=message,
        )
    return ORJSONResponse(status_code=status_code, content=_body(request, status_code, message, exc))


async def app_exception_handler(request: Request, exc: AppError) -> ORJSONResponse:
    return error_response(request, exc.status_code, exc.message, exc)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> ORJSONResponse:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    message = "Validation failed: " + ". ".join(parts) if parts else "Validation failed"
    return error_response(request, status.HTTP_400_BAD_REQUEST, message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> ORJSONResponse:
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return error_response(
            request,
            status.HTTP_404_NOT_FOUND,
            f"Route not found: {request.method} {request.url.path}",
        )
    return error_response(request, exc.status_code, str(exc.detail))


async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded) -> ORJSONResponse:
    response = error_response(
        request,
        status.HTTP_429_TOO_MANY_REQUESTS,
        "Too many requests from this IP. Please try again later.",
    )
    view_limit = getattr(request.state, "view_rate_limit", None)
    if view_limit is not None:
        response = request.app.state.limiter._inject_headers(response, view_limit)
    return response


async def duplicate_key_exception_handler(request: Request, exc: DuplicateKeyError) -> ORJSONResponse:
    key_value = (exc.details or {}).get("keyValue") or {}
    field = next(iter(key_value), "unknown")
    return error_response(
        request,
        status.HTTP_409_CONFLICT,
        f"Duplicate value for field: {field}. Please use another value.",
    )


async def generic_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    log.exception("unhandled_exception", exc_info=exc)
    return ORJSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_body(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "An unexpected error occurred.", exc),
    )
