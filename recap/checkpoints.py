"""Save and restore lightweight session checkpoints."""
from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from recap.date_utils import ensure_utc, utc_now
from recap.errors import CheckpointWriteError
from recap.models import CheckpointTool, Session, StateCheckpoint

logger = logging.getLogger("recap.checkpoints")

CHECKPOINT_TOOL_LIMIT = 5


def build_checkpoint(session: Session, now: datetime | None = None) -> StateCheckpoint:
    return StateCheckpoint(
        timestamp=ensure_utc(now) if now else utc_now(),
        sessionId=session.id,
        project=session.primaryProject,
        workflowPatterns=list(session.workflowPatterns),
        filesAccessed=list(session.filesAccessed),
        lastTools=[
            CheckpointTool(tool=call.toolName, timestamp=call.timestamp, args=dict(call.arguments))
            for call in session.toolCalls[-CHECKPOINT_TOOL_LIMIT:]
        ],
        intent=session.primaryIntent,
        intentConfidence=session.intentConfidence,
    )


def save_state_checkpoint(session: Session, path: Path, now: datetime | None = None) -> StateCheckpoint:
    checkpoint = build_checkpoint(session, now)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(checkpoint.model_dump(mode="json"), indent=2), encoding="utf-8")
    except OSError as exc:
        raise CheckpointWriteError(path, str(exc)) from exc
    logger.info("Saved checkpoint for session %s to %s", session.id, path)
    return checkpoint


def load_last_checkpoint(path: Path) -> StateCheckpoint | None:
    if not path.exists():
        return None
    try:
        return StateCheckpoint.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValidationError) as exc:
        logger.warning("Ignoring unreadable checkpoint %s: %s", path, exc)
        return None
