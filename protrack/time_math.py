"""Clock and duration arithmetic for time entries.

Every function here is pure and total: malformed numbers coerce to 0 and
malformed clock strings produce ``None`` (or an empty string for display
helpers) instead of raising.  Durations are carried as ``(hours, minutes)``
pairs; ``minutes`` is always in ``0..59`` for non-negative totals.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from typing import Any, NamedTuple, Optional

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 1440

_REFERENCE_DATE = "2000-01-01"
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class Duration(NamedTuple):
    hours: int
    minutes: int


def coerce_int(value: Any) -> int:
    """Parse the leading integer of ``value``, returning 0 when there is none.

    Example:
        >>> coerce_int("3h")
        3
        >>> coerce_int(2.9)
        2
        >>> coerce_int(None)
        0
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        return int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def to_minutes(hours: Any, minutes: Any) -> int:
    """Convert an hours/minutes pair into total minutes."""
    return coerce_int(hours) * MINUTES_PER_HOUR + coerce_int(minutes)


def from_minutes(total_minutes: Any) -> Duration:
    """Split total minutes into hours and minutes.

    Uses floor division, so negative totals keep a non-negative minute
    component (``-1`` becomes ``Duration(-1, 59)``).
    """
    hours, minutes = divmod(coerce_int(total_minutes), MINUTES_PER_HOUR)
    return Duration(hours, minutes)


def _parse_clock(value: str) -> Optional[datetime]:
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(f"{_REFERENCE_DATE} {value}", f"%Y-%m-%d {fmt}")
        except ValueError:
            continue
    return None


def duration_from_range(start_time: Optional[str], end_time: Optional[str]) -> Optional[Duration]:
    """Duration between two clock times, wrapping past midnight.

    Both times accept 24h (``"14:30"``) or 12h (``"02:30 PM"``) input.  A
    range whose end is not strictly after its start is taken to cross
    midnight, so equal start and end yield a full 24 hours.

    Returns ``None`` when either time cannot be parsed.

    Example:
        >>> duration_from_range("23:00", "01:00")
        Duration(hours=2, minutes=0)
    """
    start24 = to_24_hour(start_time)
    end24 = to_24_hour(end_time)
    if start24 is None or end24 is None:
        return None
    start = _parse_clock(start24)
    end = _parse_clock(end24)
    if start is None or end is None:
        return None

    diff = round((end - start).total_seconds() / 60)
    if diff <= 0:
        diff += MINUTES_PER_DAY
    return from_minutes(diff)


def to_24_hour(value: Optional[str]) -> Optional[str]:
    """Normalize a clock string to ``"HH:MM"``.

    Strings that already look like 24h times (a colon and no space) are
    returned unchanged.  For 12h input the hour ``12`` is first mapped to
    ``00`` and PM then adds twelve, so ``12:xx PM`` stays ``12:xx``.
    """
    if not value:
        return None
    text = str(value).strip()
    if ":" in text and " " not in text:
        return text

    parts = text.split()
    if len(parts) < 2:
        return None
    clock, modifier = parts[0], parts[1].upper()
    if modifier not in ("AM", "PM"):
        return None

    clock_parts = clock.split(":")
    if len(clock_parts) < 2:
        return None
    hours, minutes = clock_parts[0], clock_parts[1]
    if not hours.isdigit() or not minutes.isdigit():
        return None

    if hours == "12":
        hours = "00"
    if modifier == "PM":
        hours = str(int(hours) + 12)
    return f"{hours.zfill(2)}:{minutes.zfill(2)}"


def to_12_hour(value: Optional[str]) -> str:
    """Render a 24h clock string as ``"hh:mm AM/PM"``."""
    if not value:
        return ""
    parts = str(value).strip().split(":")
    if len(parts) < 2 or not parts[0].isdigit():
        return ""
    hour = int(parts[0])
    suffix = "PM" if hour >= 12 else "AM"
    hour12 = hour % 12 or 12
    return f"{hour12:02d}:{parts[1]} {suffix}"


def format_duration(hours: Any, minutes: Any) -> str:
    """Format a duration, omitting zero units.

    Example:
        >>> format_duration(1, 30)
        '1h 30m'
        >>> format_duration(0, 0)
        '0m'
    """
    h = coerce_int(hours)
    m = coerce_int(minutes)
    if h == 0 and m == 0:
        return "0m"
    if h == 0:
        return f"{m}m"
    if m == 0:
        return f"{h}h"
    return f"{h}h {m}m"


def format_minutes(total_minutes: Any) -> str:
    """Shorthand for ``format_duration(*from_minutes(total_minutes))``."""
    return format_duration(*from_minutes(total_minutes))
