"""Human-readable rendering of a line attribution."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Optional

from ..git.blame import AttributionRecord

UNKNOWN_AUTHOR = "Unknown author"
UNKNOWN_DATE = "unknown date"

SUMMARY_LIMIT = 60
SUMMARY_PREFIX = 80
ELLIPSIS = "…"

_MINUTE = 60
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count > 1 else ''} ago"


def relative_time(seconds: int, now: Optional[float] = None) -> str:
    """Describe how long ago the unix timestamp ``seconds`` was.

    ``now`` defaults to the current time; timestamps in the future read as
    "just now".
    """

    current = time.time() if now is None else now
    elapsed = max(0, int(current - seconds))
    if elapsed < 10:
        return "just now"
    if elapsed < _MINUTE:
        return _plural(elapsed, "sec")
    if elapsed < _HOUR:
        return _plural(elapsed // _MINUTE, "min")
    if elapsed < _DAY:
        return _plural(elapsed // _HOUR, "hour")

    days = elapsed // _DAY
    if days < 30:
        return _plural(days, "day")
    months = days // 30
    if months < 12:
        return _plural(months, "month")
    # 360-364 days is twelve months but not yet a full year
    return _plural(max(1, days // 365), "year")


def truncate_summary(summary: str) -> str:
    if len(summary) > SUMMARY_LIMIT:
        return f"{summary[:SUMMARY_PREFIX]}{ELLIPSIS}"
    return summary


def short_hash(commit_id: str) -> str:
    return commit_id[:7]


def calendar_date(seconds: int) -> str:
    """Format a unix timestamp as a UTC ``YYYY-MM-DD`` date."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc).strftime("%Y-%m-%d")


def format_label(record: AttributionRecord, now: Optional[float] = None) -> str:
    """Render ``record`` as the title of a code action.

    The result always has the shape ``⎇ <author>, <when> · <summary> ↗``;
    missing fields are replaced by fixed placeholders so the output is a pure
    function of ``record`` and ``now``.
    """

    author = record.author or UNKNOWN_AUTHOR
    if record.authored_at is None:
        when = UNKNOWN_DATE
    else:
        when = relative_time(record.authored_at, now=now)
    message = truncate_summary(record.summary or "")
    return f"⎇ {author}, {when} · {message} ↗"
