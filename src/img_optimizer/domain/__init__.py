"""Domain layer for the Image Optimizer Service.

This package contains the error taxonomy and the immutable request/result
values, with no dependencies on frameworks, infrastructure, or external
libraries.

The domain layer is the innermost layer and has no dependencies on outer layers.
"""

from img_optimizer.domain.exceptions import (
    AppError,
    DomainError,
    ErrorKind,
    error_code,
    error_title,
    how_to_fix,
    http_status,
    list_all_errors,
    to_problem_details,
)
from img_optimizer.domain.value_objects import (
    DEFAULT_QUALITY,
    MAX_IMAGE_SIZE,
    MAX_WIDTH,
    OutputFormat,
    ProcessedImage,
    RequestParams,
    ValidatedRequest,
)

__all__ = [
    "DEFAULT_QUALITY",
    "MAX_IMAGE_SIZE",
    "MAX_WIDTH",
    "AppError",
    "DomainError",
    "ErrorKind",
    "OutputFormat",
    "ProcessedImage",
    "RequestParams",
    "ValidatedRequest",
    "error_code",
    "error_title",
    "how_to_fix",
    "http_status",
    "list_all_errors",
    "to_problem_details",
]
