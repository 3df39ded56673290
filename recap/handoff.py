"""Structured work handoff for the most recent session."""
from __future__ import annotations

from typing import Callable

from recap.models import CurrentStateSnapshot, EditContext, LogEvent, Session, WorkHandoff
from recap.recovery import extract_working_directory, find_last_error
from recap.tool_kinds import (
    file_argument,
    is_edit,
    is_execute,
    is_search,
    is_verification,
    search_pattern,
)

SequencePredicate = Callable[[list[str]], bool]

_RECENT_TOOLS = 3


def _contains_run(sequence: list[str], run: tuple[str, ...]) -> bool:
    width = len(run)
    return any(tuple(sequence[idx:idx + width]) == run for idx in range(len(sequence) - width + 1))


# (predicate over the full tool sequence, task), first match wins.
_TASK_RULES: list[tuple[SequencePredicate, str]] = [
    (lambda seq: _contains_run(seq, ("search_code", "read_file", "edit_block")),
     "Debugging and fixing code based on search results"),
    (lambda seq: _contains_run(seq, ("read_file", "edit_block")), "Modifying existing code"),
    (lambda seq: "execute_command" in seq, "Running tests/builds and validating changes"),
    (lambda seq: any(name.startswith("search_") for name in seq), "Investigating codebase and exploring files"),
]
_DEFAULT_TASK = "General development work"

# (predicate over the last few calls, next steps), first match wins.
_NEXT_STEP_RULES: list[tuple[Callable[[list[LogEvent]], bool], tuple[str, ...]]] = [
    (lambda calls: any(is_edit(c) for c in calls),
     ("Test the recent changes", "Commit with meaningful message", "Continue with next development task")),
    (lambda calls: any(is_search(c) for c in calls),
     ("Review search results", "Make necessary code changes", "Test and validate changes")),
    (lambda calls: any(is_execute(c) for c in calls),
     ("Review command output", "Address any issues found", "Continue with development")),
]
_DEFAULT_NEXT_STEPS = ("Review recent work", "Determine next development priority", "Continue implementation")


def infer_current_task(session: Session) -> str:
    sequence = [call.toolName for call in session.toolCalls]
    for predicate, task in _TASK_RULES:
        if predicate(sequence):
            return task
    return _DEFAULT_TASK


def next_steps(session: Session) -> list[str]:
    recent = session.toolCalls[-_RECENT_TOOLS:]
    for predicate, steps in _NEXT_STEP_RULES:
        if predicate(recent):
            return list(steps)
    return list(_DEFAULT_NEXT_STEPS)


def last_edit(session: Session) -> EditContext | None:
    call = next((c for c in reversed(session.toolCalls) if is_edit(c)), None)
    if call is None:
        return None
    if call.toolName == "write_file":
        edit_type = "create"
    elif call.arguments.get("old_string") and call.arguments.get("new_string") == "":
        edit_type = "delete"
    else:
        edit_type = "modify"
    return EditContext(
        file=file_argument(call) or "unknown",
        editType=edit_type,
        purpose=session.primaryIntent or "",
    )


def last_search(session: Session) -> str | None:
    call = next((c for c in reversed(session.toolCalls) if is_search(c)), None)
    if call is None:
        return None
    return search_pattern(call) or "Unknown pattern"


def project_status(session: Session) -> str:
    if find_last_error(session):
        return "Possible failure after the last test/build run, needs attention"
    if any(is_verification(c) for c in session.toolCalls):
        return "Tests/builds run, ready to proceed"
    return "Development in progress"


def build_handoff(
    sessions: list[Session],
    current_state: CurrentStateSnapshot | None = None,
) -> WorkHandoff | None:
    if not sessions:
        return None
    session = sessions[-1]
    location = current_state.lastWorkingDirectory if current_state else None
    return WorkHandoff(
        sessionId=session.id,
        location=location or extract_working_directory(session),
        activeEdit=last_edit(session),
        currentTask=infer_current_task(session),
        lastSearch=last_search(session),
        status=project_status(session),
        nextSteps=next_steps(session),
    )
