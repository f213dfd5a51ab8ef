"""Core helpers for the Image Optimizer Service."""

from img_optimizer.core.locks import NoKeyLock, PerKeyLock
from img_optimizer.core.utils import (
    generate_cache_key,
    get_project_root,
    guess_content_type,
    is_svg_source,
    is_valid_source_url,
)

__all__ = [
    "NoKeyLock",
    "PerKeyLock",
    "generate_cache_key",
    "get_project_root",
    "guess_content_type",
    "is_svg_source",
    "is_valid_source_url",
]
