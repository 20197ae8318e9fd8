"""Aggregations over expense and time-entry collections.

This module contains pure functions that turn already fetched, already
user-scoped records into the derived numbers shown on the dashboards:
daily and monthly totals, category/activity breakdowns, productivity and
the remaining time in a day.  Nothing here performs I/O or keeps state
between calls, and every function accepts an empty collection, returning
zero totals or empty mappings rather than raising.
"""

from __future__ import annotations

import calendar
import math
import re
from datetime import date, datetime, timedelta
from typing import Callable, Dict, Hashable, Iterable, List, NamedTuple, Optional, Sequence, Tuple, TypeVar

import numpy as np
import pandas as pd

from .records import Expense, TimeEntry
from .taxonomy import STANDARD_ACTIVITIES, STANDARD_CATEGORIES, matches_selection
from .time_math import MINUTES_PER_DAY

R = TypeVar('R')

_ISO_DATE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})')

EXPENSE_SORT_ORDERS = ('date-desc', 'date-asc', 'amount-desc', 'amount-asc', 'category')
TIME_SORT_ORDERS = ('date-desc', 'date-asc', 'duration-desc', 'duration-asc')


class WorkSplit(NamedTuple):
    work_minutes: int
    personal_minutes: int
    total_minutes: int


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (``2.5 -> 3``)."""
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def today_iso(now: Optional[datetime] = None) -> str:
    """The caller's local calendar date as ``YYYY-MM-DD``."""
    current = now or datetime.now()
    return current.date().isoformat()


def parse_iso_date(value: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """Read ``(year, month, day)`` straight from a ``YYYY-MM-DD`` string.

    The components are taken as written; no timezone conversion happens, so
    ``"2024-06-01"`` is always June regardless of the local offset.
    """
    if not value:
        return None
    match = _ISO_DATE.match(str(value).strip())
    if not match:
        return None
    year, month, day = (int(group) for group in match.groups())
    if not 1 <= month <= 12:
        return None
    return year, month, day


def days_in_month(month: int, year: int) -> int:
    return calendar.monthrange(year, month)[1]


def dates_in_month(month: int, year: int) -> List[str]:
    return [date(year, month, day).isoformat() for day in range(1, days_in_month(month, year) + 1)]


def last_n_days(today: date, n: int = 7) -> List[str]:
    """ISO dates of the ``n`` days ending at ``today``, oldest first."""
    return [(today - timedelta(days=offset)).isoformat() for offset in range(n - 1, -1, -1)]


def previous_day(day: str) -> str:
    return (date.fromisoformat(day) - timedelta(days=1)).isoformat()


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


def filter_by_date(records: Iterable[R], day: str) -> List[R]:
    """Records whose ``date`` string equals ``day`` exactly."""
    return [record for record in records if record.date == day]


def filter_by_month(records: Iterable[R], month: int, year: int) -> List[R]:
    """Records falling in calendar ``month`` (1-12) of ``year``.

    Records with an unparseable date are left out.
    """
    selected = []
    for record in records:
        parsed = parse_iso_date(record.date)
        if parsed is not None and parsed[0] == year and parsed[1] == month:
            selected.append(record)
    return selected


def filter_by_month_prefix(records: Iterable[R], month_key: str) -> List[R]:
    """Records whose date starts with a ``YYYY-MM`` month key."""
    return [record for record in records if (record.date or '').startswith(month_key)]


def filter_expenses(
    expenses: Iterable[Expense],
    *,
    day: Optional[str] = None,
    month_key: Optional[str] = None,
    category: Optional[str] = None,
    custom_category: str = '',
    payment_mode: Optional[str] = None,
) -> List[Expense]:
    """Apply the expense list filters.

    A specific ``day`` takes precedence over ``month_key``.  Selecting
    "Other" as ``category`` matches free-text categories, narrowed by
    ``custom_category`` when it is given.
    """
    selected = list(expenses)
    if day:
        selected = filter_by_date(selected, day)
    elif month_key:
        selected = filter_by_month_prefix(selected, month_key)
    if category:
        selected = [
            e for e in selected
            if matches_selection(e.category, category, STANDARD_CATEGORIES, custom_category)
        ]
    if payment_mode:
        selected = [e for e in selected if e.payment_mode == payment_mode]
    return selected


def filter_time_entries(
    entries: Iterable[TimeEntry],
    *,
    day: Optional[str] = None,
    month_key: Optional[str] = None,
    activity: Optional[str] = None,
    custom_activity: str = '',
) -> List[TimeEntry]:
    """Apply the time list filters, mirroring :func:`filter_expenses`."""
    selected = list(entries)
    if day:
        selected = filter_by_date(selected, day)
    elif month_key:
        selected = filter_by_month_prefix(selected, month_key)
    if activity:
        selected = [
            e for e in selected
            if matches_selection(e.activity, activity, STANDARD_ACTIVITIES, custom_activity)
        ]
    return selected


# ---------------------------------------------------------------------------
# Sorting
# ---------------------------------------------------------------------------


def sort_expenses(expenses: Iterable[Expense], order: str = 'date-desc') -> List[Expense]:
    """Sort expenses for display; unknown orders fall back to newest first."""
    items = list(expenses)
    if order == 'date-asc':
        return sorted(items, key=lambda e: e.date)
    if order == 'amount-desc':
        return sorted(items, key=lambda e: e.amount, reverse=True)
    if order == 'amount-asc':
        return sorted(items, key=lambda e: e.amount)
    if order == 'category':
        return sorted(items, key=lambda e: e.category.casefold())
    return sorted(items, key=lambda e: e.date, reverse=True)


def sort_time_entries(entries: Iterable[TimeEntry], order: str = 'date-desc') -> List[TimeEntry]:
    items = list(entries)
    if order == 'date-asc':
        return sorted(items, key=lambda e: e.date)
    if order == 'duration-desc':
        return sorted(items, key=lambda e: e.total_minutes, reverse=True)
    if order == 'duration-asc':
        return sorted(items, key=lambda e: e.total_minutes)
    return sorted(items, key=lambda e: e.date, reverse=True)


# ---------------------------------------------------------------------------
# Grouping and totals
# ---------------------------------------------------------------------------


def sum_by(
    records: Iterable[R],
    key_fn: Callable[[R], Hashable],
    value_fn: Callable[[R], float],
) -> Dict[Hashable, float]:
    """Sum ``value_fn`` per ``key_fn``; keys keep first-seen order."""
    totals: Dict[Hashable, float] = {}
    for record in records:
        key = key_fn(record)
        totals[key] = totals.get(key, 0) + value_fn(record)
    return totals


def sort_by_value(mapping: Dict[Hashable, float]) -> List[Tuple[Hashable, float]]:
    """Items ordered by value, largest first; ties keep their order."""
    return sorted(mapping.items(), key=lambda item: item[1], reverse=True)


def top_by_amount(expenses: Iterable[Expense], n: int) -> List[Expense]:
    """The ``n`` largest expenses; equal amounts keep their input order."""
    if n <= 0:
        return []
    return sorted(expenses, key=lambda e: e.amount, reverse=True)[:n]


def total_amount(expenses: Iterable[Expense]) -> float:
    return float(sum(e.amount for e in expenses))


def total_minutes(entries: Iterable[TimeEntry]) -> int:
    return sum(e.total_minutes for e in entries)


def amount_by_category(expenses: Iterable[Expense]) -> Dict[Hashable, float]:
    return sum_by(expenses, lambda e: e.category, lambda e: e.amount)


def amount_by_payment_mode(expenses: Iterable[Expense]) -> Dict[Hashable, float]:
    return sum_by(expenses, lambda e: e.payment_mode, lambda e: e.amount)


def minutes_by_activity(entries: Iterable[TimeEntry]) -> Dict[Hashable, float]:
    return sum_by(entries, lambda e: e.activity, lambda e: e.total_minutes)


def daily_totals(expenses: Iterable[Expense], month: int, year: int) -> Dict[str, float]:
    """Spend per day of the month, with every day present (zero-filled)."""
    totals = {day: 0.0 for day in dates_in_month(month, year)}
    for expense in filter_by_month(expenses, month, year):
        if expense.date in totals:
            totals[expense.date] += expense.amount
    return totals


def rolling_daily_totals(expenses: Iterable[Expense], today: date, n: int = 7) -> Dict[str, float]:
    """Spend for each of the last ``n`` days ending at ``today``."""
    totals = {day: 0.0 for day in last_n_days(today, n)}
    for expense in expenses:
        if expense.date in totals:
            totals[expense.date] += expense.amount
    return totals


# ---------------------------------------------------------------------------
# Ratios
# ---------------------------------------------------------------------------


def percentage_breakdown(
    mapping: Dict[Hashable, float],
    key_label: str = 'Key',
    value_label: str = 'Value',
) -> pd.DataFrame:
    """Share of each group in the total, largest first.

    Returns:
        DataFrame with columns ``key_label``, ``value_label`` and ``Percent``
        (one decimal).  A zero total gives 0 percent for every row and an
        empty mapping gives an empty frame.

    Example:
        >>> percentage_breakdown({'Food': 30, 'Rent': 70}, 'Category', 'Amount')
          Category  Amount  Percent
        0     Rent    70.0     70.0
        1     Food    30.0     30.0
    """
    columns = [key_label, value_label, 'Percent']
    if not mapping:
        return pd.DataFrame(columns=columns)

    values = np.asarray(list(mapping.values()), dtype=float)
    total = values.sum()
    # One decimal, halves rounded up (0.25 shows as 0.3).
    percent = np.floor(values * 1000 / total + 0.5) / 10 if total else np.zeros(len(values))

    frame = pd.DataFrame({
        key_label: list(mapping.keys()),
        value_label: values,
        'Percent': percent,
    })
    return frame.sort_values(value_label, ascending=False, kind='stable').reset_index(drop=True)


def percent_change(current: float, previous: float) -> float:
    """Relative change from ``previous`` to ``current`` in percent.

    Defined as 0 whenever ``previous`` is not positive.
    """
    if previous > 0:
        return (current - previous) / previous * 100
    return 0.0


def work_personal_split(
    entries: Iterable[TimeEntry],
    work_activities: Iterable[str],
    excluded: Iterable[str] = ('Sleep',),
) -> WorkSplit:
    """Minutes spent on work, on personal time, and in total.

    Personal time is everything that is neither work nor ``excluded``.
    """
    work_set = set(work_activities)
    excluded_set = set(excluded)
    work = personal = total = 0
    for entry in entries:
        minutes = entry.total_minutes
        total += minutes
        if entry.activity in work_set:
            work += minutes
        elif entry.activity not in excluded_set:
            personal += minutes
    return WorkSplit(work, personal, total)


def productivity(entries: Iterable[TimeEntry], work_activities: Iterable[str]) -> int:
    """Whole-number percentage of tracked minutes spent on work."""
    split = work_personal_split(entries, work_activities)
    if split.total_minutes <= 0:
        return 0
    return round_half_up(split.work_minutes / split.total_minutes * 100)


def productivity_rate(entries: Iterable[TimeEntry], work_activities: Iterable[str]) -> float:
    """Like :func:`productivity` but to one decimal place."""
    split = work_personal_split(entries, work_activities)
    if split.total_minutes <= 0:
        return 0.0
    return round(split.work_minutes / split.total_minutes * 100, 1)


def remaining_minutes(total: int) -> int:
    """Minutes left in a day; over-booked days saturate at 0."""
    return max(0, MINUTES_PER_DAY - total)


def day_progress(total: int) -> float:
    """Share of the day already tracked, capped at 100."""
    return round(min(MINUTES_PER_DAY, max(0, total)) / MINUTES_PER_DAY * 100, 1)


# ---------------------------------------------------------------------------
# Frames
# ---------------------------------------------------------------------------

EXPENSE_COLUMNS = ['id', 'user_id', 'date', 'category', 'amount', 'payment_mode', 'notes']
TIME_ENTRY_COLUMNS = [
    'id', 'user_id', 'date', 'activity', 'start_time', 'end_time', 'hours', 'minutes', 'notes', 'duration',
]


def records_frame(records: Sequence[object], columns: Sequence[str]) -> pd.DataFrame:
    """Tabulate records for display; always carries ``columns``."""
    if not records:
        return pd.DataFrame(columns=list(columns))
    return pd.DataFrame([record.to_dict() for record in records], columns=list(columns))
