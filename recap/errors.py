"""Error taxonomy for log discovery, reading, parsing and checkpoint storage."""
from __future__ import annotations

from pathlib import Path
from typing import Any


class RecapError(Exception):
    """Base error carrying a stable code and structured details."""

    code = "RECAP_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class LogFileNotFound(RecapError):
    """No candidate log location exists; the event producer is not installed or configured."""

    code = "LOG_FILE_NOT_FOUND"

    def __init__(self, search_paths: list[Path]) -> None:
        self.search_paths = [str(p) for p in search_paths]
        super().__init__(
            "Desktop Commander tool-call log not found (searched: "
            + ", ".join(self.search_paths)
            + ")",
            {"searchPaths": self.search_paths},
        )


class LogReadError(RecapError):
    """A log path was resolved but could not be read."""

    code = "LOG_READ_ERROR"

    def __init__(self, log_path: Path, reason: str) -> None:
        self.log_path = str(log_path)
        super().__init__(f"Failed to read log file {self.log_path}: {reason}", {"logPath": self.log_path})


class LogParseError(RecapError):
    """A single malformed line. Always handled inside the parser."""

    code = "LOG_PARSE_ERROR"

    def __init__(self, message: str, line_number: int | None = None) -> None:
        self.line_number = line_number
        super().__init__(message, {"lineNumber": line_number})


class CheckpointWriteError(RecapError):
    """The checkpoint file or its directory could not be written."""

    code = "CHECKPOINT_WRITE_ERROR"

    def __init__(self, path: Path, reason: str) -> None:
        self.checkpoint_path = str(path)
        super().__init__(
            f"Failed to write checkpoint {self.checkpoint_path}: {reason}",
            {"checkpointPath": self.checkpoint_path},
        )


class InvalidQueryError(RecapError, ValueError):
    """Query arguments rejected before any file access."""

    code = "INVALID_QUERY"
