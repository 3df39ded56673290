"""Decide whether the most recent session was cut off mid-task."""
from __future__ import annotations

from datetime import datetime

from recap import config
from recap.date_utils import ensure_utc, minutes_between, utc_now
from recap.models import Session
from recap.tool_kinds import DANGLING_RULES

# Only the trailing calls are inspected.
TRAILING_CALLS = 2


def find_dangling_operation(session: Session) -> str | None:
    """Return the label of the first dangling-shape rule matching the session tail."""
    tail = session.toolCalls[-TRAILING_CALLS:]
    for label, is_dangling, resolves in DANGLING_RULES:
        for idx, call in enumerate(tail):
            if not is_dangling(call):
                continue
            if not any(resolves(later) for later in tail[idx + 1:]):
                return label
    return None


def is_stale(session: Session, now: datetime, staleness_minutes: float) -> bool:
    return minutes_between(session.endTime, now) >= staleness_minutes


def detect_interrupted_session(
    sessions: list[Session],
    now: datetime | None = None,
    *,
    staleness_minutes: float = config.STALENESS_MINUTES,
) -> Session | None:
    """Return the latest session if it is both fresh and ends in a dangling shape."""
    if not sessions:
        return None
    reference = ensure_utc(now) if now else utc_now()
    session = sessions[-1]
    if not session.toolCalls or is_stale(session, reference, staleness_minutes):
        return None
    if find_dangling_operation(session) is None:
        return None
    return session
