"""Record types for expenses and time entries.

Records arrive from the store as loosely shaped mappings (document ids
under ``_id`` or ``id``, camelCase keys, time entries that predate the
``hours``/``minutes`` fields).  They are converted exactly once, at the
I/O boundary, into the dataclasses below so the aggregation code can rely
on every field being present.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

from .time_math import coerce_int, duration_from_range, format_duration, from_minutes, to_24_hour, to_minutes


class InvalidTimeRangeError(ValueError):
    """Raised when a start/end pair cannot be turned into a duration."""


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _amount(value: Any) -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if amount != amount:  # NaN
        return 0.0
    return amount


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass
class Expense:
    """A single spend on one calendar day."""
    id: str
    user_id: str
    date: str  # YYYY-MM-DD
    category: str
    amount: float
    payment_mode: str = ""
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TimeEntry:
    """A normalized time block; ``hours``/``minutes`` are always populated."""
    id: str
    user_id: str
    date: str  # YYYY-MM-DD
    activity: str
    start_time: str
    end_time: str
    hours: int
    minutes: int
    notes: str = ""

    @property
    def total_minutes(self) -> int:
        return to_minutes(self.hours, self.minutes)

    @property
    def duration(self) -> str:
        return format_duration(self.hours, self.minutes)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['duration'] = self.duration
        return data


@dataclass
class RawTimeEntry:
    """A time entry as stored, possibly without ``hours``/``minutes``."""
    id: str
    user_id: str
    date: str
    activity: str
    start_time: str = ""
    end_time: str = ""
    hours: Optional[int] = None
    minutes: Optional[int] = None
    notes: str = ""


def expense_from_dict(data: Mapping[str, Any]) -> Expense:
    """Build an :class:`Expense` from a store document or form payload."""
    return Expense(
        id=_text(_pick(data, '_id', 'id', default='')),
        user_id=_text(_pick(data, 'userId', 'user_id', default='')),
        date=_text(data.get('date')),
        category=_text(data.get('category')),
        amount=_amount(data.get('amount')),
        payment_mode=_text(_pick(data, 'paymentMode', 'payment_mode', default='')),
        notes=_text(data.get('notes')),
    )


def raw_time_entry_from_dict(data: Mapping[str, Any]) -> RawTimeEntry:
    hours = _pick(data, 'hours')
    minutes = _pick(data, 'minutes')
    return RawTimeEntry(
        id=_text(_pick(data, '_id', 'id', default='')),
        user_id=_text(_pick(data, 'userId', 'user_id', default='')),
        date=_text(data.get('date')),
        activity=_text(data.get('activity')),
        start_time=_text(_pick(data, 'startTime', 'start_time', default='')),
        end_time=_text(_pick(data, 'endTime', 'end_time', default='')),
        hours=None if hours is None else coerce_int(hours),
        minutes=None if minutes is None else coerce_int(minutes),
        notes=_text(data.get('notes')),
    )


def normalize_time_entry(raw: RawTimeEntry) -> TimeEntry:
    """Convert a stored entry into a :class:`TimeEntry`.

    Entries missing either ``hours`` or ``minutes`` get both recomputed
    from their time range.  Without a usable range the duration is zero.
    """
    hours, minutes = raw.hours, raw.minutes
    if hours is None or minutes is None:
        duration = None
        if raw.start_time and raw.end_time:
            duration = duration_from_range(raw.start_time, raw.end_time)
        if duration is None:
            hours, minutes = 0, 0
        else:
            hours, minutes = duration
    else:
        # Stored values may carry minutes >= 60; fold them into hours.
        hours, minutes = from_minutes(to_minutes(hours, minutes))

    return TimeEntry(
        id=raw.id,
        user_id=raw.user_id,
        date=raw.date,
        activity=raw.activity,
        start_time=raw.start_time,
        end_time=raw.end_time,
        hours=hours,
        minutes=minutes,
        notes=raw.notes,
    )


def time_entry_from_dict(data: Mapping[str, Any]) -> TimeEntry:
    return normalize_time_entry(raw_time_entry_from_dict(data))


def build_time_entry(
    *,
    user_id: str,
    date: str,
    activity: str,
    start_time: str,
    end_time: str,
    notes: str = "",
    entry_id: str = "",
) -> TimeEntry:
    """Create a time entry from user input in either clock format.

    Raises:
        InvalidTimeRangeError: If either time is missing or malformed.
    """
    if not start_time or not end_time:
        raise InvalidTimeRangeError("Please select both start and end times")
    start24 = to_24_hour(start_time)
    end24 = to_24_hour(end_time)
    duration = duration_from_range(start24, end24)
    if start24 is None or end24 is None or duration is None:
        raise InvalidTimeRangeError(f"Cannot compute a duration for {start_time!r} - {end_time!r}")

    return TimeEntry(
        id=entry_id,
        user_id=user_id,
        date=date,
        activity=activity,
        start_time=start24,
        end_time=end24,
        hours=duration.hours,
        minutes=duration.minutes,
        notes=notes,
    )
