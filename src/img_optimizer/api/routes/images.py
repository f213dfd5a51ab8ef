"""Image routes.

Endpoints:
    GET /img-optimizer/v1/img
        - Query Params: src (required), w, q, f
        - Response: transformed image bytes, content type sniffed from bytes
        - ``.svg`` sources are redirected (302) to the source when
          ``API_SVG_REDIRECT`` is on

    GET /img-optimizer/v1/img/{image_id}
        - Opaque-id lookup. No id store exists: malformed ids fail with
          IMG_001 and well-formed ids with IMG_002
"""

from __future__ import annotations

import logging
import re
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import RedirectResponse

from img_optimizer.api.dependencies import get_api_config, get_pipeline, get_request_context
from img_optimizer.api.models import PROBLEM_JSON, ProblemDetails
from img_optimizer.application.use_cases import OptimizeImageUseCase
from img_optimizer.core.config import APIConfig
from img_optimizer.core.utils import is_svg_source
from img_optimizer.domain.exceptions import AppError
from img_optimizer.domain.value_objects import RequestParams

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Images"])

IMAGE_CACHE_CONTROL = "public, max-age=31536000, immutable"
IMAGE_ID_PATTERN = re.compile(r"^[a-f0-9]{32}\.\w+$")

_PROBLEM_RESPONSES = {
    code: {"model": ProblemDetails, "content": {PROBLEM_JSON: {}}}
    for code in (400, 422, 500, 503)
}


@router.get(
    "/img-optimizer/v1/img",
    response_class=Response,
    responses={
        200: {"content": {"image/jpeg": {}, "image/png": {}, "image/webp": {}}},
        302: {"description": "Redirect to an SVG source"},
        **_PROBLEM_RESPONSES,
    },
)
async def optimize_image(
    request: Request,
    pipeline: Annotated[OptimizeImageUseCase, Depends(get_pipeline)],
    api_config: Annotated[APIConfig, Depends(get_api_config)],
    src: Annotated[str | None, Query(description="Source image URL")] = None,
    w: Annotated[int | None, Query(description="Target width (1-3840)")] = None,
    q: Annotated[int | None, Query(description="Quality (1-100), default 75")] = None,
    f: Annotated[str | None, Query(description="Output format: jpeg, jpg, png, webp")] = None,
) -> Response:
    """Fetch, resize and re-encode a remote image.

    Raises:
        AppError: Any taxonomy failure; rendered as problem details.
    """
    if api_config.svg_redirect and src is not None and is_svg_source(src):
        return RedirectResponse(src, status_code=status.HTTP_302_FOUND)

    ctx = get_request_context(request)
    data, content_type = await pipeline.execute(
        RequestParams.from_query(src=src, w=w, q=q, f=f),
        request_id=ctx.request_id,
        client_ip=ctx.client_ip,
    )
    return Response(
        content=data,
        media_type=content_type,
        headers={"Cache-Control": IMAGE_CACHE_CONTROL},
    )


@router.get("/img-optimizer/v1/img/{image_id}", responses=_PROBLEM_RESPONSES)
async def get_image_by_id(image_id: str) -> Response:
    """Look up a previously stored image by opaque id.

    Raises:
        AppError: IMG_001 for a malformed id, IMG_002 otherwise.
    """
    if not IMAGE_ID_PATTERN.match(image_id):
        raise AppError.invalid_image_url()
    logger.debug("No image store configured for id %s", image_id)
    raise AppError.image_fetch_failed(image_id)


__all__ = ["IMAGE_CACHE_CONTROL", "IMAGE_ID_PATTERN", "router"]
