"""Telemetry utilities (structured logging)."""

from img_optimizer.telemetry.structured_logging import log_request_event

__all__ = ["log_request_event"]
