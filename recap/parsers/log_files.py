"""Locate and load the tool-call log."""
from __future__ import annotations

import os
from datetime import datetime, timedelta
from pathlib import Path

from recap import config
from recap.date_utils import ensure_utc, utc_now
from recap.errors import LogFileNotFound, LogReadError
from recap.models import LogEvent
from recap.parsers.tool_log import parse_log_text


def _is_readable_file(path: Path) -> bool:
    try:
        return path.is_file() and os.access(path, os.R_OK)
    except OSError:
        return False


def locate_log_file(candidates: list[Path] | None = None) -> Path:
    """Return the first existing, readable candidate path."""
    search_paths = list(candidates) if candidates is not None else list(config.LOG_PATHS)
    for path in search_paths:
        if _is_readable_file(path):
            return path
    raise LogFileNotFound(search_paths)


def read_log_file(path: Path) -> str:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise LogReadError(path, str(exc)) from exc


def load_events(
    hours: int,
    *,
    now: datetime | None = None,
    log_path: Path | None = None,
) -> list[LogEvent]:
    """Read the log and return events from the trailing ``hours`` window."""
    path = log_path if log_path is not None else locate_log_file()
    if log_path is not None and not path.exists():
        raise LogFileNotFound([path])
    reference = ensure_utc(now) if now else utc_now()
    cutoff = reference - timedelta(hours=hours)
    return parse_log_text(read_log_file(path), cutoff)
