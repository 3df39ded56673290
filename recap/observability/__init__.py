"""Observability helpers."""

from recap.observability.otel import (
    initialize,
    shutdown,
    start_span,
    record_query,
    record_skipped_lines,
    record_interruption,
)

__all__ = [
    "initialize",
    "shutdown",
    "start_span",
    "record_query",
    "record_skipped_lines",
    "record_interruption",
]
