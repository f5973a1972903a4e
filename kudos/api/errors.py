"""Translate errors into JSON responses shaped ``{"error": message}``."""

from __future__ import annotations

from typing import Dict, Optional, Type

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.log import LOGGER
from ..services.errors import (
    Conflict,
    Forbidden,
    InvalidInput,
    NotFound,
    RateLimited,
    ServiceError,
    Unauthorized,
)

STATUS_BY_ERROR: Dict[Type[ServiceError], int] = {
    InvalidInput: 400,
    Unauthorized: 401,
    # Policy violations such as self-voting are reported as bad requests.
    Forbidden: 400,
    NotFound: 404,
    Conflict: 409,
    RateLimited: 429,
}


def status_for(exc: ServiceError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return 500


def _payload(message: str, status: int, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status, headers=headers)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        headers = None
        if isinstance(exc, RateLimited):
            headers = {"Retry-After": str(exc.retry_after)}
        return _payload(exc.message, status_for(exc), headers)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request error"
        return _payload(message, exc.status_code, getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if not errors or any(error.get("loc", ("",))[0] == "body" for error in errors):
            return _payload("Invalid JSON payload", 400)
        field = errors[0].get("loc", ("", "request"))[-1]
        return _payload(f"Invalid value for {field}", 400)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        # Starlette re-raises after this response, so the server still sees it.
        LOGGER.exception(f"Unhandled exception on {request.method} {request.url.path}")
        return _payload("An unexpected error occurred", 500)


__all__ = ["STATUS_BY_ERROR", "register_error_handlers", "status_for"]
