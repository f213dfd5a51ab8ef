"""Middleware and error handlers for the API.

This module provides FastAPI middleware and global exception handlers for
CORS, structured logging, and error handling.

Middleware Stack:
    1. StructuredLoggingMiddleware: Logs all HTTP requests
    2. CORSMiddleware: Any origin by default, GET/OPTIONS only

Exception Handlers:
    - AppError: Problem-details body with the variant's status
    - RequestValidationError: 400 ErrorResponse (malformed query values)
    - Exception: SYS_001 problem-details body (500)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from fastapi import Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from img_optimizer.api.dependencies import get_request_context
from img_optimizer.api.error_handlers import log_app_error, problem_response
from img_optimizer.api.models import ErrorResponse
from img_optimizer.domain.exceptions import AppError
from img_optimizer.telemetry.structured_logging import log_request_event

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

CORS_ALLOWED_METHODS = ["GET", "OPTIONS"]
CORS_ALLOWED_HEADERS = ["Origin", "X-Requested-With", "Content-Type", "Accept"]
CORS_MAX_AGE = 3600


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that emits structured logs for every HTTP request.

    Logs are emitted in the ``finally`` block so failed requests are recorded
    too; exceptions are re-raised untouched.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        start_time = time.perf_counter()
        status_code: int | None = None
        error_type: str | None = None
        error_message: str | None = None
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        except Exception as exc:
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
            error_type = type(exc).__name__
            error_message = str(exc)
            raise
        finally:
            ctx = get_request_context(request)
            event = {
                "event": "http_request",
                "request_id": ctx.request_id,
                "client_ip": ctx.client_ip,
                "user_agent": ctx.user_agent,
                "path": request.url.path,
                "method": request.method,
                "status_code": status_code,
                "latency_ms": round((time.perf_counter() - start_time) * 1000, 3),
            }
            if error_type:
                event["error_type"] = error_type
                event["error_message"] = error_message
            log_request_event(event)


def setup_middleware(app: FastAPI) -> None:
    """Configure middleware for the FastAPI application.

    Args:
        app: FastAPI application instance to configure.
    """
    from img_optimizer.core.config import settings

    # Structured logging must run first to capture the full lifecycle
    app.add_middleware(StructuredLoggingMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.allow_origins,
        allow_methods=CORS_ALLOWED_METHODS,
        allow_headers=CORS_ALLOWED_HEADERS,
        max_age=CORS_MAX_AGE,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers.

    Args:
        app: FastAPI application instance.
    """

    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        ctx = get_request_context(request)
        log_app_error(ctx, exc)
        return problem_response(exc)

    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Reject query values that do not parse (e.g. ``w=abc``) with 400."""
        ctx = get_request_context(request)
        error_details = exc.errors()
        logger.warning("validation_error: request_id=%s, errors=%s", ctx.request_id, error_details)
        if error_details:
            first_error = error_details[0]
            error_msg = f"Validation error: {first_error.get('msg', 'Invalid request')} at {first_error.get('loc', [])}"
        else:
            error_msg = "Invalid request parameters"
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(
                error=error_msg,
                error_type="ValidationError",
                request_id=ctx.request_id,
            ).model_dump(),
        )

    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Map any unhandled exception to SYS_001 without exposing details."""
        ctx = get_request_context(request)
        logger.exception(
            "unhandled_exception: request_id=%s, error_type=%s, error=%s",
            ctx.request_id,
            type(exc).__name__,
            str(exc),
        )
        return problem_response(AppError.internal_server_error())

    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(Exception)(global_exception_handler)


__all__ = [
    "StructuredLoggingMiddleware",
    "setup_exception_handlers",
    "setup_middleware",
]
