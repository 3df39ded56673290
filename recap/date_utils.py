"""Shared timestamp parsing and window helpers."""
from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone


def ensure_utc(value: datetime) -> datetime:
    dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(token: str) -> datetime | None:
    """Parse an ISO-8601 log timestamp; naive values are taken as UTC."""
    cleaned = (token or "").strip()
    if not cleaned:
        return None
    try:
        return ensure_utc(datetime.fromisoformat(cleaned.replace("Z", "+00:00")))
    except ValueError:
        pass
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y/%m/%d %H:%M:%S"):
        try:
            return datetime.strptime(cleaned, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return None


def minutes_between(start: datetime, end: datetime) -> float:
    return (ensure_utc(end) - ensure_utc(start)).total_seconds() / 60


def round_minutes(start: datetime, end: datetime) -> int:
    # Half-up rounding.
    return int(math.floor(minutes_between(start, end) + 0.5))


def window_start(now: datetime, minutes: float) -> datetime:
    return ensure_utc(now) - timedelta(minutes=minutes)
