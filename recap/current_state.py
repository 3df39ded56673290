"""Derive a "where is the user right now" snapshot from the latest session."""
from __future__ import annotations

from datetime import datetime
from pathlib import Path

from recap import config
from recap.date_utils import ensure_utc, round_minutes, utc_now, window_start
from recap.models import CurrentStateSnapshot, Session

NO_RECENT_ACTIVITY_DETECTED = "No recent activity detected"
NO_RECENT_ACTIVITY = "No recent activity"
_SUMMARY_TOOL_LIMIT = 3


def project_directory(project: str | None, projects_root: Path | None = None) -> str | None:
    """Best-effort path for a bare project name; the producer logs no absolute cwd."""
    if not project:
        return None
    root = projects_root if projects_root is not None else config.PROJECTS_ROOT
    return str(root / project)


def summarize_recent_activity(tool_names: list[str]) -> str:
    if not tool_names:
        return NO_RECENT_ACTIVITY
    unique = list(dict.fromkeys(tool_names))
    if len(unique) <= _SUMMARY_TOOL_LIMIT:
        return f"Recent actions: {', '.join(unique)}"
    return f"{len(tool_names)} recent operations including {', '.join(unique[:_SUMMARY_TOOL_LIMIT])}"


def analyze_current_state(
    sessions: list[Session],
    now: datetime | None = None,
    *,
    recent_files_minutes: float = config.RECENT_FILES_MINUTES,
    activity_minutes: float = config.RECENT_ACTIVITY_MINUTES,
    max_recent_files: int = config.MAX_RECENT_FILES,
    projects_root: Path | None = None,
) -> CurrentStateSnapshot:
    if not sessions:
        return CurrentStateSnapshot(recentActivitySummary=NO_RECENT_ACTIVITY_DETECTED)

    reference = ensure_utc(now) if now else utc_now()
    files_since = window_start(reference, recent_files_minutes)
    activity_since = window_start(reference, activity_minutes)
    session = sessions[-1]

    recent_files: list[str] = []
    for call in session.toolCalls:
        if call.timestamp < files_since or call.contextInfo is None:
            continue
        for file_path in call.contextInfo.files:
            if file_path not in recent_files:
                recent_files.append(file_path)

    recent_tools = [call.toolName for call in session.toolCalls if call.timestamp >= activity_since]

    last_project = next(
        (
            call.contextInfo.project
            for call in reversed(session.toolCalls)
            if call.contextInfo is not None and call.contextInfo.project
        ),
        None,
    )

    return CurrentStateSnapshot(
        lastWorkingDirectory=project_directory(last_project, projects_root),
        currentProject=session.primaryProject,
        recentFiles=recent_files[:max_recent_files],
        activeSessionId=session.id,
        activeSessionDuration=max(0, round_minutes(session.startTime, reference)),
        recentActivitySummary=summarize_recent_activity(recent_tools),
    )
