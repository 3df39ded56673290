"""Recap FastAPI backend: main application entry point."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recap import config
from recap.errors import LogFileNotFound
from recap.observability import initialize as initialize_observability, shutdown as shutdown_observability
from recap.parsers.log_files import locate_log_file
from recap.routers.recap import recap_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("recap")


def _resolved_log_path() -> str | None:
    try:
        return str(locate_log_file())
    except LogFileNotFound:
        return None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    logger.info("Recap backend starting up")
    initialize_observability(app)

    log_path = _resolved_log_path()
    if log_path:
        logger.info("Reading tool-call log from %s", log_path)
    else:
        logger.warning(
            "No tool-call log found yet (searched: %s)",
            ", ".join(str(p) for p in config.LOG_PATHS),
        )

    yield

    logger.info("Recap backend shutting down")
    shutdown_observability(app)


app = FastAPI(
    title="Recap API",
    description="Session reconstruction and interruption recovery from the Desktop Commander tool-call log",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        config.FRONTEND_ORIGIN,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(recap_router)


@app.get("/api/health")
def health():
    """Health check endpoint."""
    log_path = _resolved_log_path()
    return {
        "status": "ok",
        "log": "found" if log_path else "missing",
        "logPath": log_path,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("recap.main:app", host=config.HOST, port=config.PORT)
