"""Recency cutoffs and filesystem timestamp helpers."""
from __future__ import annotations

import time
from datetime import datetime, timezone
from pathlib import Path

SECONDS_PER_DAY = 86_400
_NS_PER_SECOND = 1_000_000_000


def _format_datetime_utc(value: datetime) -> str:
    dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt.isoformat().replace("+00:00", "Z")


def cutoff_from_days(since_days: int | None, now_ns: int | None = None) -> int | None:
    """Return the mtime cutoff (epoch nanoseconds) for a look-back window.

    ``None`` means no cutoff. A window reaching past the epoch clamps to 0.
    """
    if since_days is None:
        return None
    if now_ns is None:
        now_ns = time.time_ns()
    return max(0, now_ns - int(since_days) * SECONDS_PER_DAY * _NS_PER_SECOND)


def is_recent(path: Path, cutoff_ns: int | None) -> bool:
    """True when the file was modified at or after the cutoff.

    Unreadable metadata counts as not recent.
    """
    if cutoff_ns is None:
        return True
    try:
        mtime_ns = path.stat().st_mtime_ns
    except OSError:
        return False
    return mtime_ns >= cutoff_ns


def file_updated_at(path: Path) -> str:
    """Return the normalized modification timestamp, or "" if unavailable."""
    try:
        stats = path.stat()
    except OSError:
        return ""
    return _format_datetime_utc(datetime.fromtimestamp(float(stats.st_mtime), timezone.utc))
