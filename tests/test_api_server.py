"""
Comprehensive behavioral tests for the FastAPI REST API server.

Tests focus on HTTP behavior: image responses and headers, problem-details
error bodies, the SVG redirect policy, the opaque-id endpoint, CORS and the
system endpoints. Only the upstream fetch is faked.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from helpers import SOURCE_URL, FakeFetcher, make_image, open_image

from img_optimizer.api.dependencies import get_api_config, set_dependencies
from img_optimizer.api.server import app
from img_optimizer.application.use_cases import OptimizeImageUseCase
from img_optimizer.core.config import APIConfig
from img_optimizer.domain.exceptions import AppError
from img_optimizer.infrastructure.image_cache import MemoryCacheStore
from img_optimizer.infrastructure.image_processing import ImageTransformer

IMG_PATH = "/img-optimizer/v1/img"


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher(make_image(100, 50))


@pytest.fixture
def client(fetcher: FakeFetcher) -> Iterator[TestClient]:
    """Test client with a pipeline wired to a fake fetcher and in-memory cache."""
    set_dependencies(OptimizeImageUseCase(MemoryCacheStore(), fetcher, ImageTransformer()))
    app.dependency_overrides[get_api_config] = lambda: APIConfig(svg_redirect=True)
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
        set_dependencies(None)


def assert_problem(response, status_code: int, error_code: str) -> dict:
    """Assert a problem-details response and return its body."""
    assert response.status_code == status_code
    assert response.headers["content-type"].startswith("application/problem+json")
    body = response.json()
    assert set(body) == {
        "type",
        "title",
        "status",
        "detail",
        "instance",
        "errorCode",
        "howToFix",
        "moreInfo",
    }
    assert body["status"] == status_code
    assert body["errorCode"] == error_code
    assert body["instance"] is None
    return body


class TestSystemEndpoints:
    """Tests for /health and /errors."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "img-optimizer"}

    def test_health_does_not_need_pipeline(self):
        set_dependencies(None)
        response = TestClient(app).get("/health")
        assert response.status_code == 200

    def test_error_catalog(self, client):
        response = client.get("/errors")
        body = response.json()

        assert response.status_code == 200
        assert body["total"] == 11
        assert len(body["errors"]) == 11
        assert body["errors"][5].startswith("VAL_001: Invalid width")


class TestImageEndpoint:
    """Tests for GET /img-optimizer/v1/img."""

    def test_transforms_image(self, client, fetcher):
        """Test a cache miss: fetched, resized, encoded as JPEG with immutable caching."""
        response = client.get(IMG_PATH, params={"src": SOURCE_URL, "w": 40, "q": 80})

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"
        assert response.headers["cache-control"] == "public, max-age=31536000, immutable"
        assert response.content[:3] == b"\xff\xd8\xff"
        assert fetcher.calls == [SOURCE_URL]

    def test_repeat_request_is_served_from_cache(self, client, fetcher):
        params = {"src": SOURCE_URL, "w": 40}
        first = client.get(IMG_PATH, params=params)
        second = client.get(IMG_PATH, params=params)

        assert first.content == second.content
        assert len(fetcher.calls) == 1

    def test_explicit_webp(self, client):
        response = client.get(IMG_PATH, params={"src": SOURCE_URL, "f": "webp"})
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/webp"

    def test_resize_to_webp(self, client, fetcher):
        """Test w=100, q=80, f=webp on a wider source yields WebP at most 100px wide."""
        fetcher.data = make_image(300, 200)
        response = client.get(
            IMG_PATH, params={"src": SOURCE_URL, "w": 100, "q": 80, "f": "webp"}
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/webp"
        assert open_image(response.content).size == (100, 66)

    def test_invalid_width(self, client, fetcher):
        """Test that an out-of-range width is rejected before fetching."""
        response = client.get(IMG_PATH, params={"src": SOURCE_URL, "w": 5000})

        body = assert_problem(response, 400, "VAL_001")
        assert body["title"] == "Bad Request"
        assert body["detail"] == "VAL_001: Invalid width - Width must be between 1 and 3840, got 5000"
        assert body["howToFix"] == "Provide a width value between 1 and 3840"
        assert body["type"] == "https://github.com/fgribreau/plasmic-img-optimizer/errors/VAL_001"
        assert body["moreInfo"] == "https://github.com/fgribreau/plasmic-img-optimizer#error-val_001"
        assert fetcher.calls == []

    def test_invalid_quality(self, client):
        response = client.get(IMG_PATH, params={"src": SOURCE_URL, "q": 0})
        assert_problem(response, 400, "VAL_002")

    def test_missing_src(self, client):
        body = assert_problem(client.get(IMG_PATH), 400, "VAL_003")
        assert body["howToFix"] == "Include the 'src' parameter in your request"

    def test_invalid_url(self, client):
        assert_problem(client.get(IMG_PATH, params={"src": "not-a-url"}), 400, "IMG_001")

    def test_unsupported_format(self, client):
        body = assert_problem(
            client.get(IMG_PATH, params={"src": SOURCE_URL, "f": "gif"}), 400, "IMG_004"
        )
        assert "'gif'" in body["detail"]

    def test_upstream_failure(self, client, fetcher):
        fetcher.error = AppError.image_fetch_failed(SOURCE_URL)
        body = assert_problem(client.get(IMG_PATH, params={"src": SOURCE_URL}), 422, "IMG_002")
        assert body["title"] == "Processing Error"
        assert SOURCE_URL in body["detail"]

    def test_upstream_too_large(self, client, fetcher):
        fetcher.error = AppError.image_too_large()
        assert_problem(client.get(IMG_PATH, params={"src": SOURCE_URL}), 422, "IMG_005")

    def test_malformed_number_is_a_400_validation_error(self, client):
        """Test that w=abc never reaches the pipeline and yields an ErrorResponse."""
        response = client.get(IMG_PATH, params={"src": SOURCE_URL, "w": "abc"})

        assert response.status_code == 400
        body = response.json()
        assert body["error_type"] == "ValidationError"
        assert body["request_id"]

    def test_unexpected_exception_is_sys_001(self, client, fetcher):
        fetcher.error = RuntimeError("kaboom")  # type: ignore[assignment]
        body = assert_problem(client.get(IMG_PATH, params={"src": SOURCE_URL}), 500, "SYS_001")
        assert "kaboom" not in body["detail"]

    def test_pipeline_not_initialized(self, client):
        set_dependencies(None)
        body = assert_problem(client.get(IMG_PATH, params={"src": SOURCE_URL}), 503, "SYS_002")
        assert body["title"] == "Service Unavailable"


class TestSvgPolicy:
    """Tests for the SVG redirect transport policy."""

    def test_svg_source_redirects(self, client, fetcher):
        svg = "https://example.com/logo.SVG"
        response = client.get(IMG_PATH, params={"src": svg}, follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == svg
        assert fetcher.calls == []

    def test_svg_source_rejected_when_redirect_disabled(self, client):
        app.dependency_overrides[get_api_config] = lambda: APIConfig(svg_redirect=False)
        response = client.get(
            IMG_PATH, params={"src": "https://example.com/logo.svg"}, follow_redirects=False
        )

        body = assert_problem(response, 400, "IMG_004")
        assert body["detail"] == "IMG_004: Invalid image format - Format 'svg' is not supported"


class TestImageIdEndpoint:
    """Tests for the opaque-id endpoint."""

    def test_malformed_id(self, client):
        assert_problem(client.get(f"{IMG_PATH}/not-an-id"), 400, "IMG_001")

    def test_uppercase_hex_is_malformed(self, client):
        assert_problem(client.get(f"{IMG_PATH}/{'A' * 32}.png"), 400, "IMG_001")

    def test_well_formed_id_is_never_found(self, client):
        image_id = f"{'ab' * 16}.png"
        body = assert_problem(client.get(f"{IMG_PATH}/{image_id}"), 422, "IMG_002")
        assert image_id in body["detail"]


class TestCors:
    """Tests for CORS policy."""

    def test_simple_request_allows_any_origin(self, client):
        response = client.get("/health", headers={"Origin": "https://app.example.com"})
        assert response.headers["access-control-allow-origin"] == "*"

    def test_preflight(self, client):
        response = client.options(
            IMG_PATH,
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "GET",
                "Access-Control-Request-Headers": "Accept",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-max-age"] == "3600"
        assert "GET" in response.headers["access-control-allow-methods"]

    def test_preflight_rejects_post(self, client):
        response = client.options(
            IMG_PATH,
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert response.status_code == 400
