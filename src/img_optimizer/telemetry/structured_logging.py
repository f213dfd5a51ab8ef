"""Structured logging utilities for the Image Optimizer Service.

This module provides JSON-based structured logging for request events. All
events are written in JSON Lines (JSONL) format to a log file for easy parsing
and analysis.

Key Features:
    - JSON Lines Format: One JSON object per line
    - Automatic Timestamps: Injected if not present in event data
    - Custom Serialization: Handles datetime and Path objects correctly
    - Isolation: Non-propagating logger to avoid duplicate logs

Log File Configuration:
    - Location: ``logs/requests.jsonl`` under the project root, or under
      ``$IMG_OPTIMIZER_LOG_DIR`` when set
    - Encoding: UTF-8
    - Rotation: Not implemented

Event Schema:
    All events should include:
        - event: Event type identifier (e.g., "image_request", "http_request")
        - timestamp: ISO 8601 timestamp (auto-injected if missing)
        - Additional fields: request_id, status, latency_ms, error_code, etc.
"""

from __future__ import annotations

import functools
import json
import logging
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter

from img_optimizer.core.utils import get_project_root

LOG_DIR_ENV = "IMG_OPTIMIZER_LOG_DIR"


@functools.cache
def _get_logs_dir() -> Path:
    """Resolve (and create) the logs directory. Cached for the process lifetime."""
    override = os.environ.get(LOG_DIR_ENV)
    logs_dir = Path(override) if override else get_project_root() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


@functools.cache
def _get_request_logger() -> logging.Logger:
    request_logger = logging.getLogger("img_optimizer.requests")
    if not request_logger.handlers:
        request_logger.setLevel(logging.INFO)
        handler = logging.FileHandler(_get_logs_dir() / "requests.jsonl", encoding="utf-8")
        handler.setFormatter(logging.Formatter("%(message)s"))
        request_logger.addHandler(handler)
        request_logger.propagate = False
    return request_logger


def _json_default(value: Any) -> Any:
    """Fallback serializer for datetime and Path objects."""
    match value:
        case datetime():
            return TypeAdapter(datetime).dump_python(value, mode="json")
        case Path():
            return str(value)
        case _:
            return str(value)


def log_request_event(event: dict[str, Any]) -> None:
    """Emit a structured request event.

    Writes a JSON-formatted line to the requests log. Injects ``timestamp``
    (ISO 8601, UTC) if missing; this mutates ``event``.

    Args:
        event: Event payload. Should contain ``event`` (type identifier) and
            ``status`` ("success" or "error"), plus any operation fields such
            as request_id, cache ("hit"/"miss"), error_code, latency_ms.

    Example:
        >>> log_request_event({
        ...     "event": "image_request",
        ...     "status": "success",
        ...     "cache": "hit",
        ...     "latency_ms": 1.23,
        ... })
    """
    event.setdefault("timestamp", datetime.now(UTC).isoformat())
    _get_request_logger().info(json.dumps(event, default=_json_default))


__all__ = ["LOG_DIR_ENV", "log_request_event"]
