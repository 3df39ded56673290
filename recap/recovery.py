"""Build a recovery context for an interrupted session."""
from __future__ import annotations

import posixpath
from pathlib import Path

from recap.current_state import project_directory
from recap.interruption import TRAILING_CALLS
from recap.models import InterruptedOperation, RecoveryContext, Session
from recap.tool_kinds import (
    command_text,
    file_argument,
    is_bare_command,
    is_commit,
    is_edit,
    is_result_read,
    is_search,
    is_verification,
    mentions_error,
    search_pattern,
)

MAX_SUGGESTIONS = 3
_ERROR_SCAN_COMMANDS = 3

# (workflow label, suggestions), checked in order after pending-operation suggestions.
_WORKFLOW_SUGGESTIONS: list[tuple[str, tuple[str, ...]]] = [
    ("DEBUGGING", ("Continue debugging the identified issue", "Run tests to verify fixes")),
    ("EDITING", ("Complete the current implementation", "Add tests for new functionality")),
    ("EXECUTION", ("Review the output of the last command",)),
]
_FALLBACK_SUGGESTIONS = (
    "Review recent changes",
    "Check for uncommitted work",
    "Continue with the previous task",
)


def extract_pending_operations(session: Session, last_error: str | None = None) -> list[InterruptedOperation]:
    operations: list[InterruptedOperation] = []
    calls = session.toolCalls

    for idx, call in enumerate(calls):
        later = calls[idx + 1:]
        if is_edit(call) and not any(is_verification(c) for c in later):
            operations.append(InterruptedOperation(
                type="unsaved_edit",
                file=file_argument(call) or "unknown",
                timestamp=call.timestamp,
                description="File edited but not verified",
            ))

    if calls:
        last = calls[-1]
        if is_search(last):
            operations.append(InterruptedOperation(
                type="pending_search",
                pattern=search_pattern(last) or "unknown",
                timestamp=last.timestamp,
                description="Search performed but no action taken",
            ))

    for idx in range(max(0, len(calls) - TRAILING_CALLS), len(calls)):
        call = calls[idx]
        if is_bare_command(call) and not any(is_result_read(c) for c in calls[idx + 1:]):
            operations.append(InterruptedOperation(
                type="incomplete_command",
                command=command_text(call) or "unknown",
                timestamp=call.timestamp,
                description="Command started but its output was never read",
            ))

    if last_error and calls:
        operations.append(InterruptedOperation(
            type="unresolved_error",
            timestamp=calls[-1].timestamp,
            description=last_error,
        ))
    return operations


def detect_uncommitted_changes(session: Session) -> list[str]:
    """Files edited in the session; any commit call is assumed to cover all of them."""
    if any(is_commit(call) for call in session.toolCalls):
        return []
    edited: list[str] = []
    for call in session.toolCalls:
        if is_edit(call):
            file_path = file_argument(call)
            if file_path and file_path not in edited:
                edited.append(file_path)
    return edited


def find_last_error(session: Session) -> str | None:
    """Weak signal: a test/build run followed by a search for error-like text."""
    calls = session.toolCalls
    verification_idx = [idx for idx, call in enumerate(calls) if is_verification(call)]
    for idx in reversed(verification_idx[-_ERROR_SCAN_COMMANDS:]):
        followup = next(
            (c for c in calls[idx + 1:] if is_search(c) and mentions_error(search_pattern(c))),
            None,
        )
        if followup is not None:
            return f"Possible error after {command_text(calls[idx])}"
    return None


def extract_last_file(session: Session) -> str | None:
    for call in reversed(session.toolCalls):
        if call.contextInfo is not None and call.contextInfo.files:
            return call.contextInfo.files[0]
        file_path = file_argument(call)
        if file_path:
            return file_path
    return None


def _common_directory(paths: list[str]) -> str:
    if len(paths) == 1:
        return posixpath.dirname(paths[0]) or "/"
    return posixpath.commonpath(paths) or "/"


def extract_working_directory(session: Session, projects_root: Path | None = None) -> str | None:
    if session.primaryProject:
        return project_directory(session.primaryProject, projects_root)
    absolute = [p for p in session.filesAccessed if p.startswith("/")]
    if not absolute:
        return None
    return _common_directory(absolute)


def _suggestions_for(operation: InterruptedOperation) -> tuple[str, ...]:
    if operation.type == "unsaved_edit":
        return (f"Test changes to {operation.file}", f"Review and commit {operation.file}")
    if operation.type == "pending_search":
        return (f'Review search results for "{operation.pattern}"', "Take action on search findings")
    if operation.type == "incomplete_command":
        return (f"Check the output of `{operation.command}`",)
    return (f"Investigate: {operation.description}",)


def generate_suggested_actions(session: Session, pending: list[InterruptedOperation]) -> list[str]:
    suggestions: list[str] = []

    for operation in pending:
        suggestions.extend(_suggestions_for(operation))
    for label, workflow_suggestions in _WORKFLOW_SUGGESTIONS:
        if label in session.workflowPatterns:
            suggestions.extend(workflow_suggestions)
    if not suggestions:
        suggestions.extend(_FALLBACK_SUGGESTIONS)

    return list(dict.fromkeys(suggestions))[:MAX_SUGGESTIONS]


def build_recovery_context(session: Session, *, projects_root: Path | None = None) -> RecoveryContext:
    last = session.toolCalls[-1]
    last_error = find_last_error(session)
    pending = extract_pending_operations(session, last_error)
    context = last.contextInfo

    return RecoveryContext(
        sessionId=session.id,
        lastActivityTime=last.timestamp,
        lastToolUsed=last.toolName,
        lastFile=extract_last_file(session),
        workingDirectory=extract_working_directory(session, projects_root),
        pendingOperations=pending,
        uncommittedChanges=detect_uncommitted_changes(session),
        lastError=last_error,
        suggestedActions=generate_suggested_actions(session, pending),
        operationChains=list(context.operationChains) if context else [],
        fileHeatmap=list(context.fileHeatmap) if context else [],
        searchEvolution=context.searchEvolution if context else None,
        pendingTests=list(context.pendingTests) if context else [],
    )
