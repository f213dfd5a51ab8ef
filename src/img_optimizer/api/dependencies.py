"""Dependency injection for FastAPI endpoints.

The request pipeline is built once during lifespan startup and stored here;
routes obtain it through FastAPI ``Depends()``.

Dependency Flow:
    1. Lifespan startup builds cache, fetcher, transformer and pipeline
    2. set_dependencies() stores the pipeline
    3. get_pipeline() retrieves it (raises SYS_002 if not initialized)
    4. FastAPI Depends() wires it into route handlers
"""

from __future__ import annotations

import logging
import uuid

from fastapi import Request

from img_optimizer.api.models import RequestContext
from img_optimizer.application.use_cases import OptimizeImageUseCase
from img_optimizer.core.config import APIConfig, settings
from img_optimizer.domain.exceptions import AppError

logger = logging.getLogger(__name__)

# Global instances (initialized in lifespan)
_pipeline: OptimizeImageUseCase | None = None


def set_dependencies(pipeline: OptimizeImageUseCase | None) -> None:
    """Set global dependencies (called during lifespan startup and shutdown).

    Args:
        pipeline: Request pipeline shared by all image requests. None clears it.
    """
    global _pipeline
    _pipeline = pipeline


def get_pipeline() -> OptimizeImageUseCase:
    """Get the request pipeline.

    Raises:
        AppError: SYS_002 if the pipeline was not initialized.
    """
    if _pipeline is None:
        logger.warning("Image request received before the pipeline was initialized")
        raise AppError.service_unavailable()
    return _pipeline


def get_api_config() -> APIConfig:
    """Get the API configuration section."""
    return settings.api


def get_request_context(request: Request) -> RequestContext:
    """Extract (or reuse) request context from FastAPI request.

    The context is stored in ``request.state`` after first access so that
    middleware, handlers and routes share one request_id.
    """
    from slowapi.util import get_remote_address

    ctx: RequestContext | None = getattr(request.state, "request_context", None)
    if ctx is None:
        ctx = RequestContext(
            request_id=str(uuid.uuid4()),
            client_ip=get_remote_address(request),
            user_agent=request.headers.get("user-agent"),
        )
        request.state.request_context = ctx
    return ctx


__all__ = [
    "get_api_config",
    "get_pipeline",
    "get_request_context",
    "set_dependencies",
]
