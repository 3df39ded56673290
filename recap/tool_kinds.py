"""Tool-call classification rules shared by the interruption and recovery analyzers.

Every classifier is a plain predicate over a ``LogEvent`` so rule tables can be
declared as ordered ``(predicate, label)`` data and evaluated in priority order.
"""
from __future__ import annotations

from typing import Callable

from recap.models import LogEvent

EventPredicate = Callable[[LogEvent], bool]

EDIT_TOOLS = {"edit_block", "write_file"}
SEARCH_TOOLS = {"search_code", "search_files"}
EXECUTE_TOOLS = {"execute_command", "start_process"}
READ_TOOLS = {"read_file", "read_multiple_files"}
# Desktop Commander returns a pid from execute_command; output arrives via these.
RESULT_TOOLS = {"read_output", "read_process_output", "interact_with_process"}

_FILE_ARG_KEYS = ("file_path", "path")
_COMMAND_ARG_KEYS = ("command", "cmd")
_VERIFICATION_MARKERS = ("test", "build", "pytest", "jest", "vitest", "tsc")
_COMMIT_MARKERS = ("git commit",)
ERROR_MARKERS = ("error", "undefined", "exception", "fail", "traceback")


def _string_arg(event: LogEvent, keys: tuple[str, ...]) -> str:
    for key in keys:
        value = event.arguments.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def file_argument(event: LogEvent) -> str:
    return _string_arg(event, _FILE_ARG_KEYS)


def command_text(event: LogEvent) -> str:
    return _string_arg(event, _COMMAND_ARG_KEYS)


def search_pattern(event: LogEvent) -> str:
    return _string_arg(event, ("pattern", "query"))


def is_edit(event: LogEvent) -> bool:
    return event.toolName in EDIT_TOOLS


def is_search(event: LogEvent) -> bool:
    return event.toolName in SEARCH_TOOLS


def is_execute(event: LogEvent) -> bool:
    return event.toolName in EXECUTE_TOOLS


def is_verification(event: LogEvent) -> bool:
    if not is_execute(event):
        return False
    lowered = command_text(event).lower()
    return any(marker in lowered for marker in _VERIFICATION_MARKERS)


def is_bare_command(event: LogEvent) -> bool:
    return is_execute(event) and not is_verification(event)


def is_commit(event: LogEvent) -> bool:
    if not is_execute(event):
        return False
    lowered = command_text(event).lower()
    return any(marker in lowered for marker in _COMMIT_MARKERS)


def is_result_read(event: LogEvent) -> bool:
    return event.toolName in RESULT_TOOLS


def is_consuming(event: LogEvent) -> bool:
    return event.toolName in READ_TOOLS or event.toolName in EDIT_TOOLS


def mentions_error(text: str) -> bool:
    lowered = (text or "").lower()
    return any(marker in lowered for marker in ERROR_MARKERS)


# (label, dangling operation, follow-up that resolves it), highest priority first.
DANGLING_RULES: list[tuple[str, EventPredicate, EventPredicate]] = [
    ("unverified_edit", is_edit, is_verification),
    ("unread_command", is_bare_command, is_result_read),
    ("unconsumed_search", is_search, is_consuming),
]
