"""API routes for the Image Optimizer Service.

Modular route definitions organized by functionality.
"""

from img_optimizer.api.routes.images import router as images_router
from img_optimizer.api.routes.system import router as system_router

__all__ = ["images_router", "system_router"]
