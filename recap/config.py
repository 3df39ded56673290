"""Recap Backend Configuration."""
import os
from pathlib import Path


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_paths(name: str, default: list[Path]) -> list[Path]:
    value = os.getenv(name)
    if not value:
        return default
    paths = [Path(token.strip()).expanduser() for token in value.split(os.pathsep) if token.strip()]
    return paths or default


# Desktop Commander writes its tool-call log here; first readable candidate wins.
DEFAULT_LOG_PATHS = [
    Path.home() / ".claude-server-commander" / "claude_tool_call.log",
    Path("/.claude-server-commander/claude_tool_call.log"),
]
LOG_PATHS = _env_paths("RECAP_LOG_PATHS", DEFAULT_LOG_PATHS)

# Query bounds (hours of log history to analyze)
DEFAULT_HOURS = _env_int("RECAP_DEFAULT_HOURS", 24)
MIN_HOURS = 1
MAX_HOURS = 168

# Analysis windows (minutes)
STALENESS_MINUTES = _env_int("RECAP_STALENESS_MINUTES", 10)
RECENT_FILES_MINUTES = _env_int("RECAP_RECENT_FILES_MINUTES", 10)
RECENT_ACTIVITY_MINUTES = _env_int("RECAP_RECENT_ACTIVITY_MINUTES", 5)
MAX_RECENT_FILES = _env_int("RECAP_MAX_RECENT_FILES", 10)

# Project names in the log are bare directory names; this is where they live.
PROJECTS_ROOT = Path(os.getenv("RECAP_PROJECTS_ROOT", str(Path.home()))).expanduser()

CHECKPOINT_PATH = Path(
    os.getenv("RECAP_CHECKPOINT_PATH", str(Path.home() / ".recap" / "checkpoint.json"))
).expanduser()

# Observability
OTEL_ENABLED = _env_bool("RECAP_OTEL_ENABLED", False)
OTEL_ENDPOINT = os.getenv("RECAP_OTEL_ENDPOINT", "http://localhost:4318")
OTEL_SERVICE_NAME = os.getenv("RECAP_OTEL_SERVICE_NAME", "recap-backend")
PROM_PORT = _env_int("RECAP_PROM_PORT", 9465)

# Server settings
HOST = os.getenv("RECAP_HOST", "127.0.0.1")
PORT = int(os.getenv("RECAP_PORT", "8010"))

# CORS
FRONTEND_ORIGIN = os.getenv("RECAP_FRONTEND_ORIGIN", "http://localhost:3000")
