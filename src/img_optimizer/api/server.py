"""FastAPI REST API server for the Image Optimizer Service.

An on-demand image transformation proxy: clients pass a remote image URL
plus width, quality and format, and receive the resized, re-encoded image.
Results are cached under a hash of the normalized request.

Endpoints:
    - GET /img-optimizer/v1/img - Transform a remote image
    - GET /img-optimizer/v1/img/{image_id} - Opaque-id lookup (no store)
    - GET /health - Liveness probe
    - GET /errors - Error code catalog
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from img_optimizer.api.lifespan import lifespan_context
from img_optimizer.api.middleware import setup_exception_handlers, setup_middleware
from img_optimizer.api.routes import images_router, system_router
from img_optimizer.core.config import settings

logging.basicConfig(
    level=settings.api.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.api.title,
    description="On-demand image resizing and re-encoding proxy with result caching",
    version=settings.api.version,
    lifespan=lifespan_context,
)

setup_middleware(app)
setup_exception_handlers(app)

app.include_router(system_router)
app.include_router(images_router)


def main() -> None:
    """Run the service with uvicorn on the configured host and port."""
    import uvicorn

    logger.info("Starting image optimizer service on port %s", settings.api.port)
    uvicorn.run(app, host=settings.api.host, port=settings.api.port, log_level=settings.api.log_level)


if __name__ == "__main__":
    main()
