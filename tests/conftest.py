"""
Pytest configuration and fixtures for Image Optimizer Service tests.
"""

import os
import sys
import tempfile
from pathlib import Path

import pytest

TESTS_ROOT = Path(__file__).resolve().parent
SRC_ROOT = TESTS_ROOT.parent / "src"
for path in (SRC_ROOT, TESTS_ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

# Keep request logs out of the working tree.
os.environ.setdefault("IMG_OPTIMIZER_LOG_DIR", tempfile.mkdtemp(prefix="img-optimizer-logs-"))

from helpers import FakeFetcher, FakeTransformer, RecordingLogger, make_image

from img_optimizer.application.use_cases import OptimizeImageUseCase
from img_optimizer.infrastructure.image_cache import FileSystemCacheStore, MemoryCacheStore
from img_optimizer.infrastructure.image_processing import ImageTransformer


@pytest.fixture
def png_bytes() -> bytes:
    """Opaque 100x50 PNG."""
    return make_image(100, 50)


@pytest.fixture
def rgba_png_bytes() -> bytes:
    """Semi-transparent 100x50 PNG."""
    return make_image(100, 50, mode="RGBA")


@pytest.fixture
def memory_store() -> MemoryCacheStore:
    return MemoryCacheStore(max_size=100, ttl_seconds=60)


@pytest.fixture
def fs_store(tmp_path: Path) -> FileSystemCacheStore:
    return FileSystemCacheStore(tmp_path / "cache")


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def fake_fetcher(png_bytes: bytes) -> FakeFetcher:
    return FakeFetcher(png_bytes)


@pytest.fixture
def pipeline(
    memory_store: MemoryCacheStore,
    fake_fetcher: FakeFetcher,
    recording_logger: RecordingLogger,
) -> OptimizeImageUseCase:
    """Pipeline with a real transformer, in-memory cache and fake fetcher."""
    return OptimizeImageUseCase(
        cache=memory_store,
        fetcher=fake_fetcher,
        transformer=ImageTransformer(),
        logger=recording_logger,
    )


@pytest.fixture
def fake_transformer() -> FakeTransformer:
    return FakeTransformer(make_image(10, 10))
