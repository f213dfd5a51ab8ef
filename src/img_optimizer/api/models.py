"""Request and response models for the REST API.

This module defines Pydantic v2 models for the JSON bodies the service
returns. Image responses are raw bytes and have no model.

Key Models:
    - ProblemDetails: Error body for every taxonomy failure
    - ErrorResponse: Error body for malformed query values
    - HealthResponse: Liveness probe body
    - ErrorCatalogResponse: Listing of every error code
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

PROBLEM_JSON = "application/problem+json"


class ProblemDetails(BaseModel):
    """Problem-details body for a failed request.

    Field names are a compatibility surface shared with existing clients,
    hence the camelCase extension members.

    Attributes:
        type: Documentation URL for the error code.
        title: Short title derived from the status class.
        status: HTTP status code.
        detail: ``"<CODE>: <message>"``.
        instance: Always null.
        errorCode: Stable error code (e.g. ``VAL_001``).
        howToFix: Remediation hint.
        moreInfo: Documentation anchor for the error code.
    """

    model_config = ConfigDict(extra="forbid")

    type: str = Field(..., description="Documentation URL for the error code")
    title: str = Field(..., description="Short problem title")
    status: int = Field(..., ge=400, le=599, description="HTTP status code")
    detail: str = Field(..., description="Error code and message")
    instance: str | None = Field(None, description="Always null")
    errorCode: str = Field(..., description="Stable error code")  # noqa: N815
    howToFix: str = Field(..., description="Remediation hint")  # noqa: N815
    moreInfo: str = Field(..., description="Documentation anchor")  # noqa: N815


class ErrorResponse(BaseModel):
    """Response model for malformed requests that never reach the pipeline.

    Attributes:
        error: Human-readable error message.
        error_type: Type/category of error (e.g., "ValidationError").
        request_id: Request identifier for tracking.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
    )

    error: str = Field(..., description="Error message")
    error_type: str | None = Field(None, description="Error type")
    request_id: str | None = Field(None, description="Request identifier if available")


class HealthResponse(BaseModel):
    """Response model for the health check endpoint."""

    model_config = ConfigDict(extra="forbid")

    status: Literal["ok"] = Field("ok", description="Service status")
    service: str = Field("img-optimizer", description="Service name")


class ErrorCatalogResponse(BaseModel):
    """Response model for the error catalog endpoint.

    Attributes:
        errors: One ``"<code>: <message>"`` line per error variant, in
            declaration order.
        total: Number of entries.
    """

    model_config = ConfigDict(extra="forbid")

    errors: list[str] = Field(..., description="Error code listing")
    total: int = Field(..., ge=0, description="Number of error codes")


@dataclass(slots=True, frozen=True)
class RequestContext:
    """Context for tracking API requests.

    Attributes:
        request_id: Unique request identifier (UUID string).
        client_ip: Client IP address extracted from request.
        user_agent: User-Agent header value. None if not present.
    """

    request_id: str
    client_ip: str
    user_agent: str | None = None


__all__ = [
    "PROBLEM_JSON",
    "ErrorCatalogResponse",
    "ErrorResponse",
    "HealthResponse",
    "ProblemDetails",
    "RequestContext",
]
