"""Conversion of domain errors into HTTP responses.

Every ``AppError`` leaving a route becomes a problem-details JSON body with
the status, title and remediation hint derived from its ``ErrorKind``.
"""

from __future__ import annotations

import logging

from fastapi.responses import JSONResponse

from img_optimizer.api.models import PROBLEM_JSON, ProblemDetails, RequestContext
from img_optimizer.domain.exceptions import AppError, http_status, to_problem_details

logger = logging.getLogger(__name__)


def problem_response(error: AppError) -> JSONResponse:
    """Render ``error`` as an ``application/problem+json`` response."""
    body = ProblemDetails(**to_problem_details(error))
    return JSONResponse(
        status_code=int(http_status(error.kind)),
        content=body.model_dump(),
        media_type=PROBLEM_JSON,
    )


def log_app_error(ctx: RequestContext, error: AppError) -> None:
    """Log a taxonomy failure at a level matching its status class."""
    status_code = int(http_status(error.kind))
    if status_code >= 500:
        logger.error("app_error: request_id=%s, %s", ctx.request_id, error)
    else:
        logger.info("app_error: request_id=%s, %s", ctx.request_id, error)


__all__ = ["log_app_error", "problem_response"]
