"""Telemetry: request-aware logging, OpenTelemetry setup and span helpers."""

from app.shared.telemetry.logging import get_logger, setup_logging
from app.shared.telemetry.telemetry import Telemetry, get_telemetry, set_telemetry
from app.shared.telemetry.tracing import TracedOperation, add_span_attributes, traced

__all__ = [
    "Telemetry",
    "TracedOperation",
    "add_span_attributes",
    "get_logger",
    "get_telemetry",
    "set_telemetry",
    "setup_logging",
    "traced",
]
