"""
Wall-clock helpers.

Timestamps are captured as aware datetimes in the configured zone.  Some
stores (SQLite) hand back naive values; ``localize`` re-attaches the zone
so durations never mix naive and aware operands.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Callable, Optional
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]


def zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def system_clock(tz: tzinfo) -> Clock:
    """Return a clock reading "now" in *tz*, truncated to whole seconds."""

    def now() -> datetime:
        return datetime.now(tz).replace(microsecond=0)

    return now


def localize(moment: Optional[datetime], tz: tzinfo) -> Optional[datetime]:
    if moment is None or moment.tzinfo is not None:
        return moment
    return moment.replace(tzinfo=tz)


def format_elapsed(started_at: datetime, now: datetime) -> str:
    """Render the observational duty timer as ``HH:MM:SS``.

    Hours are not wrapped at 24.  A start in the future reads as zero.
    """
    total = max(0, int((now - started_at).total_seconds()))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
