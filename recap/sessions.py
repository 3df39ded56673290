"""Group tool-call events into sessions and derive per-session aggregates.

Session identity is assigned upstream by the log producer (15 minutes of
inactivity opens a new id), so reconstruction is a pure grouping of its input.
"""
from __future__ import annotations

from collections import Counter
from typing import Any

from recap.date_utils import round_minutes
from recap.models import LogEvent, Session


def _mode(values: list[str]) -> str | None:
    if not values:
        return None
    # most_common is stable, so ties keep first-seen order.
    return Counter(values).most_common(1)[0][0]


def _append_unique(items: list[str], seen: set[str], value: str) -> None:
    if value in seen:
        return
    seen.add(value)
    items.append(value)


def _aggregate_intents(tool_calls: list[LogEvent]) -> dict[str, dict[str, Any]]:
    intents: dict[str, dict[str, Any]] = {}
    for call in tool_calls:
        context = call.contextInfo
        if context is None or not context.intent or not context.intentConfidence:
            continue
        entry = intents.get(context.intent)
        if entry is None:
            intents[context.intent] = {
                "confidence": context.intentConfidence,
                "count": 1,
                "evidence": list(dict.fromkeys(context.intentEvidence)),
            }
            continue
        entry["count"] += 1
        entry["confidence"] = max(entry["confidence"], context.intentConfidence)
        for item in context.intentEvidence:
            if item not in entry["evidence"]:
                entry["evidence"].append(item)
    return intents


def _pick_primary_intent(intents: dict[str, dict[str, Any]]) -> tuple[str, dict[str, Any]] | None:
    if not intents:
        return None
    # max() keeps the first maximal entry, which is the first-seen intent.
    return max(
        intents.items(),
        key=lambda item: (item[1]["confidence"] * item[1]["count"], item[1]["confidence"]),
    )


def finalize_session(session: Session) -> Session:
    """Return ``session`` with aggregates recomputed from its tool calls."""
    workflows: list[str] = []
    workflows_seen: set[str] = set()
    files: list[str] = []
    files_seen: set[str] = set()
    projects: list[str] = []
    work_patterns: list[str] = []

    for call in session.toolCalls:
        context = call.contextInfo
        if context is None:
            continue
        if context.workflow:
            _append_unique(workflows, workflows_seen, context.workflow)
        if context.project:
            projects.append(context.project)
        for file_path in context.files:
            _append_unique(files, files_seen, file_path)
        if context.workPattern:
            work_patterns.append(context.workPattern)

    primary = _pick_primary_intent(_aggregate_intents(session.toolCalls))

    return session.model_copy(
        update={
            "duration": round_minutes(session.startTime, session.endTime),
            "workflowPatterns": workflows,
            "filesAccessed": files,
            "primaryProject": _mode(projects),
            "primaryIntent": primary[0] if primary else None,
            "intentConfidence": int(primary[1]["confidence"]) if primary else None,
            "intentEvidence": list(primary[1]["evidence"]) if primary else [],
            "workPattern": _mode(work_patterns),
        }
    )


def reconstruct_sessions(events: list[LogEvent]) -> list[Session]:
    """Group events by session id, finalize each session, order by start time."""
    by_id: dict[str, Session] = {}

    for event in events:
        session_id = event.session_id
        if not session_id:
            continue
        session = by_id.get(session_id)
        if session is None:
            by_id[session_id] = Session(
                id=session_id,
                startTime=event.timestamp,
                endTime=event.timestamp,
                toolCalls=[event],
            )
            continue
        session.toolCalls.append(event)
        session.endTime = event.timestamp

    sessions = [finalize_session(session) for session in by_id.values()]
    sessions.sort(key=lambda s: s.startTime)
    return sessions
