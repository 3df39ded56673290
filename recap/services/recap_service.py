"""Query surface: read the log, reconstruct sessions, assemble recap views."""
from __future__ import annotations

import logging
import time
from datetime import datetime
from pathlib import Path

from recap import config, observability
from recap.checkpoints import load_last_checkpoint, save_state_checkpoint
from recap.current_state import analyze_current_state
from recap.date_utils import ensure_utc, utc_now
from recap.errors import InvalidQueryError, RecapError
from recap.handoff import build_handoff
from recap.interruption import detect_interrupted_session, find_dangling_operation
from recap.models import (
    RecapAnalysis,
    ReconstructionResult,
    RecoveryContext,
    StateCheckpoint,
    WorkHandoff,
)
from recap.parsers.log_files import load_events
from recap.recovery import build_recovery_context
from recap.sessions import reconstruct_sessions
from recap.summaries import build_analysis

logger = logging.getLogger("recap.service")


def validate_hours(hours: object) -> int:
    if isinstance(hours, bool) or not isinstance(hours, int):
        raise InvalidQueryError(f"hours must be an integer between {config.MIN_HOURS} and {config.MAX_HOURS}")
    if hours < config.MIN_HOURS or hours > config.MAX_HOURS:
        raise InvalidQueryError(
            f"hours must be between {config.MIN_HOURS} and {config.MAX_HOURS} (got {hours})",
            {"hours": hours},
        )
    return hours


def reconstruct(
    hours: int = config.DEFAULT_HOURS,
    *,
    now: datetime | None = None,
    log_path: Path | None = None,
) -> ReconstructionResult:
    """Run the read-parse-reconstruct-analyze pipeline over the trailing window.

    Raises ``InvalidQueryError`` before touching the filesystem, and
    ``LogFileNotFound``/``LogReadError`` when the log cannot be loaded.
    """
    validate_hours(hours)
    reference = ensure_utc(now) if now else utc_now()
    t0 = time.monotonic()
    result = "error"
    try:
        with observability.start_span("recap.reconstruct", {"recap.hours": hours}) as span:
            events = load_events(hours, now=reference, log_path=log_path)
            sessions = reconstruct_sessions(events)
            current_state = analyze_current_state(sessions, reference, projects_root=config.PROJECTS_ROOT)

            recovery: RecoveryContext | None = None
            interrupted = detect_interrupted_session(sessions, reference)
            if interrupted is not None:
                shape = find_dangling_operation(interrupted) or "unknown"
                observability.record_interruption(shape)
                logger.info("Session %s looks interrupted (%s)", interrupted.id, shape)
                recovery = build_recovery_context(interrupted, projects_root=config.PROJECTS_ROOT)

            if span is not None:
                span.set_attribute("recap.events", len(events))
                span.set_attribute("recap.sessions", len(sessions))
                span.set_attribute("recap.interrupted", recovery is not None)
        result = "interrupted" if recovery else "ok"
    except RecapError as exc:
        logger.warning("Reconstruction failed [%s]: %s", exc.code, exc.message)
        raise
    finally:
        elapsed_ms = (time.monotonic() - t0) * 1000
        observability.record_query(result, elapsed_ms)

    logger.info(
        "Reconstructed %d sessions from %d events over %dh in %.1fms",
        len(sessions),
        len(events),
        hours,
        elapsed_ms,
    )
    return ReconstructionResult(sessions=sessions, currentState=current_state, recovery=recovery)


def recovery_context(
    hours: int = config.DEFAULT_HOURS,
    *,
    now: datetime | None = None,
    log_path: Path | None = None,
) -> RecoveryContext | None:
    return reconstruct(hours, now=now, log_path=log_path).recovery


def analysis(
    hours: int = config.DEFAULT_HOURS,
    *,
    now: datetime | None = None,
    log_path: Path | None = None,
) -> RecapAnalysis:
    reconstruction = reconstruct(hours, now=now, log_path=log_path)
    return build_analysis(reconstruction.sessions, reconstruction.currentState, now)


def handoff(
    hours: int = config.DEFAULT_HOURS,
    *,
    now: datetime | None = None,
    log_path: Path | None = None,
) -> WorkHandoff | None:
    reconstruction = reconstruct(hours, now=now, log_path=log_path)
    return build_handoff(reconstruction.sessions, reconstruction.currentState)


def save_checkpoint(
    hours: int = config.DEFAULT_HOURS,
    *,
    now: datetime | None = None,
    log_path: Path | None = None,
    checkpoint_path: Path | None = None,
) -> StateCheckpoint | None:
    """Checkpoint the most recent session; None when the window holds no sessions."""
    reconstruction = reconstruct(hours, now=now, log_path=log_path)
    if not reconstruction.sessions:
        return None
    path = checkpoint_path or config.CHECKPOINT_PATH
    return save_state_checkpoint(reconstruction.sessions[-1], path, now)


def last_checkpoint(checkpoint_path: Path | None = None) -> StateCheckpoint | None:
    return load_last_checkpoint(checkpoint_path or config.CHECKPOINT_PATH)
