"""Reusable test utilities and helpers for Image Optimizer Service tests.

This module provides image builders and lightweight fakes for the pipeline's
collaborators, so tests exercise real pipeline logic without network access.
"""

from __future__ import annotations

import asyncio
import io
from typing import Any

from PIL import Image

from img_optimizer.domain.exceptions import AppError
from img_optimizer.domain.value_objects import OutputFormat, ProcessedImage

SOURCE_URL = "https://example.com/a.png"


def make_image(
    width: int = 100,
    height: int = 50,
    *,
    mode: str = "RGB",
    format: str = "PNG",
    color: Any = None,
) -> bytes:
    """Encode a solid-colour test image."""
    if color is None:
        color = (200, 30, 30, 128) if "A" in mode else (200, 30, 30)
    img = Image.new(mode, (width, height), color)
    buffer = io.BytesIO()
    img.save(buffer, format=format)
    return buffer.getvalue()


def open_image(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


class FakeFetcher:
    """Fetcher returning canned bytes (or raising) and counting calls."""

    def __init__(
        self,
        data: bytes = b"",
        error: AppError | None = None,
        delay: float = 0.0,
    ) -> None:
        self.data = data
        self.error = error
        self.delay = delay
        self.calls: list[str] = []

    async def fetch(self, url: str) -> bytes:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.data


class FakeTransformer:
    """Transformer returning fixed bytes and recording its arguments."""

    def __init__(self, output: bytes, error: AppError | None = None) -> None:
        self.output = output
        self.error = error
        self.calls: list[tuple[bytes, int | None, int, str | None]] = []

    def process(
        self,
        data: bytes,
        width: int | None,
        quality: int,
        format: str | None,
    ) -> ProcessedImage:
        self.calls.append((data, width, quality, format))
        if self.error is not None:
            raise self.error
        return ProcessedImage(data=self.output, format=OutputFormat.PNG, width=1, height=1)


class FailingCacheStore:
    """Store whose writes are always dropped."""

    def __init__(self) -> None:
        self.put_calls = 0

    async def get(self, key: str) -> bytes | None:
        return None

    async def put(self, key: str, data: bytes) -> bool:
        self.put_calls += 1
        return False


class RecordingLogger:
    """RequestLoggerInterface implementation that keeps events in memory."""

    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []

    def log_request(self, data: dict[str, Any]) -> None:
        self.events.append(dict(data))
