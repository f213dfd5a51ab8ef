"""Image Optimizer Service - on-demand image resizing and re-encoding proxy."""

from img_optimizer.application import OptimizeImageUseCase
from img_optimizer.core import generate_cache_key, get_project_root, guess_content_type
from img_optimizer.domain import (
    AppError,
    ErrorKind,
    OutputFormat,
    ProcessedImage,
    RequestParams,
    list_all_errors,
    to_problem_details,
)

__version__ = "1.0.0"

__all__ = [
    "AppError",
    "ErrorKind",
    "OptimizeImageUseCase",
    "OutputFormat",
    "ProcessedImage",
    "RequestParams",
    "__version__",
    "generate_cache_key",
    "get_project_root",
    "guess_content_type",
    "list_all_errors",
    "to_problem_details",
]
