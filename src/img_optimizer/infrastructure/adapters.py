"""Infrastructure adapters implementing application layer interfaces.

Key Adapters:
    - RequestLoggerAdapter: Wraps structured logging for RequestLoggerInterface
"""

from __future__ import annotations

from typing import Any

from img_optimizer.telemetry.structured_logging import log_request_event


class RequestLoggerAdapter:
    """Adapter that wraps structured logging to implement RequestLoggerInterface.

    Stateless; delegates to the global ``log_request_event`` function.
    """

    @staticmethod
    def log_request(data: dict[str, Any]) -> None:
        """Log a request event with structured data.

        Args:
            data: Event payload. Expected keys: ``event``, ``status`` and
                ``request_id``; the pipeline adds ``cache``, ``error_code`` and
                ``latency_ms``.
        """
        log_request_event(data)


__all__ = ["RequestLoggerAdapter"]
