"""Aggregate recap analysis across reconstructed sessions."""
from __future__ import annotations

from collections import Counter
from datetime import datetime

from recap.date_utils import ensure_utc, utc_now
from recap.models import (
    CurrentStateSnapshot,
    RecapAnalysis,
    Session,
    SessionMetadata,
    SessionSummary,
    TimeRange,
)


def session_metadata(session: Session) -> SessionMetadata:
    return SessionMetadata(
        id=session.id,
        startTime=session.startTime,
        duration=session.duration,
        primaryProject=session.primaryProject,
        workflowPatterns=list(session.workflowPatterns),
        filesAccessed=list(session.filesAccessed),
        operationCount=len(session.toolCalls),
        primaryIntent=session.primaryIntent,
        workPattern=session.workPattern,
        intentConfidence=session.intentConfidence,
    )


def build_analysis(
    sessions: list[Session],
    current_state: CurrentStateSnapshot | None = None,
    now: datetime | None = None,
) -> RecapAnalysis:
    reference = ensure_utc(now) if now else utc_now()
    projects: list[str] = []
    files: list[str] = []
    workflow_counts: Counter[str] = Counter()

    for session in sessions:
        if session.primaryProject and session.primaryProject not in projects:
            projects.append(session.primaryProject)
        for file_path in session.filesAccessed:
            if file_path not in files:
                files.append(file_path)
        workflow_counts.update(session.workflowPatterns)

    summary = SessionSummary(
        totalSessions=len(sessions),
        totalDuration=sum(s.duration for s in sessions),
        totalOperations=sum(len(s.toolCalls) for s in sessions),
        primaryProjects=projects,
        workflowDistribution=dict(workflow_counts.most_common()),
        filesModified=files,
        timeRange=TimeRange(
            start=sessions[0].startTime if sessions else reference,
            end=sessions[-1].endTime if sessions else reference,
        ),
    )
    return RecapAnalysis(
        summary=summary,
        sessions=[session_metadata(s) for s in sessions],
        currentState=current_state,
    )
