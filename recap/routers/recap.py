"""API router for session recaps and interruption recovery."""
from __future__ import annotations

import asyncio
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from recap import config
from recap.errors import InvalidQueryError, LogFileNotFound, RecapError
from recap.models import (
    RecapAnalysis,
    ReconstructionResult,
    RecoveryContext,
    StateCheckpoint,
    WorkHandoff,
)
from recap.services import recap_service

recap_router = APIRouter(prefix="/api/recap", tags=["recap"])


def _http_error(exc: RecapError) -> HTTPException:
    if isinstance(exc, LogFileNotFound):
        return HTTPException(status_code=404, detail=exc.message)
    if isinstance(exc, InvalidQueryError):
        return HTTPException(status_code=400, detail=exc.message)
    # LogReadError, CheckpointWriteError and anything unexpected.
    return HTTPException(status_code=500, detail=exc.message)


async def _run(func, *args, **kwargs):
    try:
        return await asyncio.to_thread(func, *args, **kwargs)
    except RecapError as exc:
        raise _http_error(exc) from exc


@recap_router.get("", response_model=ReconstructionResult)
async def get_recap(hours: int = Query(config.DEFAULT_HOURS, ge=config.MIN_HOURS, le=config.MAX_HOURS)):
    """Sessions, current state and recovery context for the trailing window."""
    return await _run(recap_service.reconstruct, hours)


@recap_router.get("/recovery", response_model=Optional[RecoveryContext])
async def get_recovery(hours: int = Query(config.DEFAULT_HOURS, ge=config.MIN_HOURS, le=config.MAX_HOURS)):
    return await _run(recap_service.recovery_context, hours)


@recap_router.get("/analysis", response_model=RecapAnalysis)
async def get_analysis(hours: int = Query(config.DEFAULT_HOURS, ge=config.MIN_HOURS, le=config.MAX_HOURS)):
    return await _run(recap_service.analysis, hours)


@recap_router.get("/handoff", response_model=Optional[WorkHandoff])
async def get_handoff(hours: int = Query(config.DEFAULT_HOURS, ge=config.MIN_HOURS, le=config.MAX_HOURS)):
    return await _run(recap_service.handoff, hours)


@recap_router.post("/checkpoint", response_model=StateCheckpoint)
async def create_checkpoint(hours: int = Query(config.DEFAULT_HOURS, ge=config.MIN_HOURS, le=config.MAX_HOURS)):
    """Persist a checkpoint of the most recent session."""
    checkpoint = await _run(recap_service.save_checkpoint, hours)
    if checkpoint is None:
        raise HTTPException(status_code=404, detail="No session found in the requested window")
    return checkpoint


@recap_router.get("/checkpoint", response_model=StateCheckpoint)
async def get_checkpoint():
    checkpoint = await _run(recap_service.last_checkpoint)
    if checkpoint is None:
        raise HTTPException(status_code=404, detail="No checkpoint saved")
    return checkpoint
