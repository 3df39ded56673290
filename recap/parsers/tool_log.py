"""Parse Desktop Commander tool-call log lines into LogEvent models.

Line format::

    <ISO timestamp> | <tool name, padded> | <context JSON> | Args: <arguments JSON>

Legacy lines without structured context coexist with enhanced ones, so every
per-line failure is non-fatal: the line is skipped and parsing continues.
"""
from __future__ import annotations

import json
import logging
import math
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from recap import observability
from recap.date_utils import ensure_utc, parse_timestamp
from recap.errors import LogParseError
from recap.models import (
    WORK_PATTERNS,
    ContextInfo,
    FileHeat,
    LogEvent,
    OperationChain,
    SearchEvolution,
)

logger = logging.getLogger("recap.parser")

FIELD_SEPARATOR = " | "
ARGS_PREFIX = "Args:"
_MAX_FIELDS = 4


def _safe_json_object(raw: str) -> dict[str, Any] | None:
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _safe_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _safe_str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item]


def _safe_confidence(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)) and math.isfinite(value):
        return max(0, min(100, int(round(value))))
    return None


def _safe_models(raw: Any, model: type) -> list:
    if not isinstance(raw, list):
        return []
    items = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        try:
            items.append(model.model_validate(item))
        except ValidationError:
            continue
    return items


def _coerce_context(payload: dict[str, Any]) -> ContextInfo:
    """Build a ContextInfo, dropping values whose type does not match the contract."""
    work_pattern = payload.get("workPattern")
    search_evolution = None
    if isinstance(payload.get("searchEvolution"), dict):
        try:
            search_evolution = SearchEvolution.model_validate(payload["searchEvolution"])
        except ValidationError:
            search_evolution = None
    new_session = payload.get("newSession")

    return ContextInfo(
        session=_safe_str(payload.get("session")),
        sessionAge=_safe_str(payload.get("sessionAge")),
        newSession=new_session if isinstance(new_session, bool) else None,
        project=_safe_str(payload.get("project")),
        workflow=_safe_str(payload.get("workflow")),
        sequence=_safe_str(payload.get("sequence")),
        files=_safe_str_list(payload.get("files")),
        intent=_safe_str(payload.get("intent")),
        intentConfidence=_safe_confidence(payload.get("intentConfidence")),
        intentEvidence=_safe_str_list(payload.get("intentEvidence")),
        workPattern=work_pattern if work_pattern in WORK_PATTERNS else None,
        operationChains=_safe_models(payload.get("operationChains"), OperationChain),
        fileHeatmap=_safe_models(payload.get("fileHeatmap"), FileHeat),
        searchEvolution=search_evolution,
        pendingTests=_safe_str_list(payload.get("pendingTests")),
    )


def _parse_arguments(field: str | None) -> dict[str, Any]:
    if not field:
        return {}
    token = field.strip()
    if not token.startswith(ARGS_PREFIX):
        return {}
    parsed = _safe_json_object(token[len(ARGS_PREFIX):].strip())
    return parsed or {}


def parse_log_line(line: str, line_number: int | None = None) -> LogEvent | None:
    """Parse one log line.

    Returns None for lines that are not enhanced event lines (too few fields or
    no structured context). Raises LogParseError when the timestamp or tool
    name is unusable.
    """
    parts = line.rstrip("\r\n").split(FIELD_SEPARATOR, _MAX_FIELDS - 1)
    if len(parts) < 3:
        return None

    timestamp = parse_timestamp(parts[0])
    if timestamp is None:
        raise LogParseError(f"Invalid timestamp format: {parts[0].strip()[:40]!r}", line_number)

    tool_name = parts[1].strip()
    if not tool_name:
        raise LogParseError("Missing tool name", line_number)

    context_payload = _safe_json_object(parts[2].strip())
    if context_payload is None:
        return None

    return LogEvent(
        timestamp=timestamp,
        toolName=tool_name,
        contextInfo=_coerce_context(context_payload),
        arguments=_parse_arguments(parts[3] if len(parts) > 3 else None),
    )


def parse_log_text(text: str, cutoff: datetime | None = None) -> list[LogEvent]:
    """Parse a whole log, keeping events at or after ``cutoff`` in file order."""
    cutoff_utc = ensure_utc(cutoff) if cutoff else None
    events: list[LogEvent] = []
    skipped = 0

    for idx, raw_line in enumerate(text.splitlines(), start=1):
        if not raw_line.strip():
            continue
        try:
            event = parse_log_line(raw_line, idx)
        except LogParseError as exc:
            logger.debug("Skipping line %s: %s", idx, exc)
            skipped += 1
            continue
        except Exception as exc:  # noqa: BLE001
            logger.debug("Skipping line %s after unexpected parse failure: %s", idx, exc)
            skipped += 1
            continue
        if event is None:
            continue
        if cutoff_utc is not None and event.timestamp < cutoff_utc:
            continue
        events.append(event)

    if skipped:
        logger.info("Skipped %s malformed log line(s)", skipped)
        observability.record_skipped_lines(skipped)
    return events
