"""View models for the ProTrack screens.

The functions below combine the aggregation and budget helpers into the
numbers each screen displays.  They take already fetched records plus the
values they depend on (the current date, the work activity set), so they
can be called from any UI layer or from tests without a store.

:class:`ProTrackContext` carries the injected store, the user and the
current date.  ``snapshot()`` fetches the user's records once and the
convenience methods forward to the view functions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from . import aggregation as agg
from .budget import BudgetState, budget_message, monthly_budget_state
from .common.formatting import format_month
from .config import get_work_activities
from .records import Expense, TimeEntry
from .store import RecordStore
from .taxonomy import activity_icon, category_icon
from .time_math import format_minutes

DAYS_FOR_DAILY_AVERAGE = 30


@dataclass
class UserRecords:
    """Everything fetched for one user in one pass."""
    expenses: List[Expense] = field(default_factory=list)
    time_entries: List[TimeEntry] = field(default_factory=list)
    budget: float = 0.0


def change_label(change: float) -> str:
    """Describe a day-over-day change in spend."""
    rounded = round(change, 1)
    if rounded > 0:
        return f"+{rounded:.1f}% from yesterday"
    if rounded < 0:
        return f"{rounded:.1f}% from yesterday"
    return 'Same as yesterday'


def dashboard_stats(records: UserRecords, today: date, work_activities: Iterable[str]) -> Dict[str, Any]:
    """Headline numbers for the home screen."""
    today_key = today.isoformat()
    today_total = agg.total_amount(agg.filter_by_date(records.expenses, today_key))
    yesterday_total = agg.total_amount(agg.filter_by_date(records.expenses, agg.previous_day(today_key)))
    change = agg.percent_change(today_total, yesterday_total)
    month_total = agg.total_amount(agg.filter_by_month(records.expenses, today.month, today.year))

    today_entries = agg.filter_by_date(records.time_entries, today_key)
    today_minutes = agg.total_minutes(today_entries)
    remaining = agg.remaining_minutes(today_minutes)

    return {
        'today_expense': today_total,
        'yesterday_expense': yesterday_total,
        'expense_change': change,
        'expense_change_label': change_label(change),
        'month_expense': month_total,
        'today_minutes': today_minutes,
        'today_duration': format_minutes(today_minutes),
        'remaining_minutes': remaining,
        'remaining_duration': format_minutes(remaining),
        'productivity': agg.productivity(today_entries, work_activities),
    }


def today_top_expenses(records: UserRecords, today: date, n: int = 5) -> List[Expense]:
    return agg.top_by_amount(agg.filter_by_date(records.expenses, today.isoformat()), n)


def activity_breakdown(entries: Iterable[TimeEntry]) -> pd.DataFrame:
    """Minutes per activity with share, formatted duration and icon."""
    frame = agg.percentage_breakdown(agg.minutes_by_activity(entries), 'Activity', 'Minutes')
    frame['Duration'] = [format_minutes(m) for m in frame['Minutes']]
    frame['Icon'] = [activity_icon(a) for a in frame['Activity']]
    return frame


def category_breakdown(expenses: Iterable[Expense]) -> pd.DataFrame:
    """Spend per category with share and icon, largest first."""
    frame = agg.percentage_breakdown(agg.amount_by_category(expenses), 'Category', 'Amount')
    frame['Icon'] = [category_icon(c) for c in frame['Category']]
    return frame


def budget_summary(records: UserRecords, today: date) -> Dict[str, Any]:
    state: BudgetState = monthly_budget_state(records.budget, records.expenses, today.month, today.year)
    return {
        'state': state,
        'budget': state.budget,
        'spent': state.spent,
        'balance': state.balance,
        'percentage': state.percentage,
        'percentage_label': f"{state.percentage:.1f}% used",
        'progress_width': state.progress_width,
        'status': state.status,
        'message': budget_message(state),
    }


def day_time_summary(entries: Iterable[TimeEntry], day: str) -> Dict[str, Any]:
    """Tracked vs remaining time for one day (the 24h quota card)."""
    tracked = agg.total_minutes(agg.filter_by_date(entries, day))
    remaining = agg.remaining_minutes(tracked)
    return {
        'date': day,
        'tracked_minutes': tracked,
        'tracked': format_minutes(tracked),
        'remaining_minutes': remaining,
        'remaining': format_minutes(remaining),
        'progress': agg.day_progress(tracked),
    }


def expense_list_view(
    expenses: Sequence[Expense],
    *,
    day: Optional[str] = None,
    month_key: Optional[str] = None,
    category: Optional[str] = None,
    custom_category: str = '',
    payment_mode: Optional[str] = None,
    order: str = 'date-desc',
) -> Dict[str, Any]:
    selected = agg.filter_expenses(
        expenses,
        day=day,
        month_key=month_key,
        category=category,
        custom_category=custom_category,
        payment_mode=payment_mode,
    )
    items = agg.sort_expenses(selected, order)
    return {'items': items, 'total': agg.total_amount(items), 'count': len(items)}


def time_list_view(
    entries: Sequence[TimeEntry],
    today: date,
    *,
    day: Optional[str] = None,
    month_key: Optional[str] = None,
    activity: Optional[str] = None,
    custom_activity: str = '',
    order: str = 'date-desc',
) -> Dict[str, Any]:
    """Filtered time entries plus the day quota card.

    The quota card follows the selected day, or today when none is
    selected.  With only a month selected the month's tracked total is
    reported alongside.
    """
    selected = agg.filter_time_entries(
        entries,
        day=day,
        month_key=month_key,
        activity=activity,
        custom_activity=custom_activity,
    )
    items = agg.sort_time_entries(selected, order)
    view: Dict[str, Any] = {
        'items': items,
        'count': len(items),
        'day_summary': day_time_summary(entries, day or today.isoformat()),
        'month_minutes': None,
    }
    if month_key and not day:
        view['month_minutes'] = agg.total_minutes(items)
    return view


def monthly_stats(records: UserRecords, month: int, year: int, work_activities: Iterable[str]) -> Dict[str, Any]:
    """Totals and averages for a calendar month (1-12)."""
    expenses = agg.filter_by_month(records.expenses, month, year)
    entries = agg.filter_by_month(records.time_entries, month, year)
    days = agg.days_in_month(month, year)

    total_spending = agg.total_amount(expenses)
    split = agg.work_personal_split(entries, work_activities)
    avg_work = agg.round_half_up(split.work_minutes / days)
    work_hours = agg.round_half_up(split.work_minutes / 60)
    personal_hours = agg.round_half_up(split.personal_minutes / 60)

    return {
        'label': format_month(month, year),
        'total_spending': total_spending,
        'daily_average': total_spending / days,
        'avg_work_minutes': avg_work,
        'avg_work_duration': format_minutes(avg_work),
        'work_hours': work_hours,
        'personal_hours': personal_hours,
        'work_ratio_label': f"Work vs Personal: {work_hours}h : {personal_hours}h",
    }


def monthly_breakdowns(records: UserRecords, month: int, year: int) -> Dict[str, Any]:
    """Chart data for a month: categories, activity hours and daily spend."""
    expenses = agg.filter_by_month(records.expenses, month, year)
    entries = agg.filter_by_month(records.time_entries, month, year)
    activity_hours = {
        activity: round(minutes / 60, 1)
        for activity, minutes in agg.minutes_by_activity(entries).items()
    }
    return {
        'categories': agg.amount_by_category(expenses),
        'activity_hours': activity_hours,
        'daily': agg.daily_totals(expenses, month, year),
    }


def analytics_insights(records: UserRecords, work_activities: Iterable[str]) -> Dict[str, Any]:
    """All-time analytics: top categories, payment modes, productivity."""
    work_activities = tuple(work_activities)
    split = agg.work_personal_split(records.time_entries, work_activities)
    avg_daily = agg.round_half_up(split.work_minutes / DAYS_FOR_DAILY_AVERAGE)
    return {
        'top_categories': category_breakdown(records.expenses),
        'payment_modes': agg.amount_by_payment_mode(records.expenses),
        'work_minutes': split.work_minutes,
        'work_duration': format_minutes(split.work_minutes),
        'productivity_rate': agg.productivity_rate(records.time_entries, work_activities),
        'avg_daily_work': format_minutes(avg_daily),
    }


def weekly_comparison(expenses: Iterable[Expense], today: date) -> pd.DataFrame:
    """Spend for the last seven days with short weekday labels."""
    totals = agg.rolling_daily_totals(expenses, today, 7)
    return pd.DataFrame({
        'Date': list(totals.keys()),
        'Day': [date.fromisoformat(d).strftime('%a') for d in totals],
        'Amount': list(totals.values()),
    })


@dataclass
class ProTrackContext:
    """Explicit application context handed to the view layer."""
    store: RecordStore
    user_id: str
    today: date = field(default_factory=date.today)
    work_activities: Tuple[str, ...] = field(default_factory=get_work_activities)

    def snapshot(self) -> UserRecords:
        return UserRecords(
            expenses=self.store.list_expenses(self.user_id),
            time_entries=self.store.list_time_entries(self.user_id),
            budget=self.store.get_budget(self.user_id),
        )

    def dashboard(self, records: Optional[UserRecords] = None) -> Dict[str, Any]:
        records = records if records is not None else self.snapshot()
        return {
            'stats': dashboard_stats(records, self.today, self.work_activities),
            'top_expenses': today_top_expenses(records, self.today),
            'activities': activity_breakdown(agg.filter_by_date(records.time_entries, self.today.isoformat())),
            'budget': budget_summary(records, self.today),
        }

    def monthly(self, month: int, year: int, records: Optional[UserRecords] = None) -> Dict[str, Any]:
        records = records if records is not None else self.snapshot()
        view = monthly_stats(records, month, year, self.work_activities)
        view.update(monthly_breakdowns(records, month, year))
        return view

    def analytics(self, records: Optional[UserRecords] = None) -> Dict[str, Any]:
        records = records if records is not None else self.snapshot()
        view = analytics_insights(records, self.work_activities)
        view['weekly'] = weekly_comparison(records.expenses, self.today)
        return view

    def total_minutes_for_date(self, day: str, exclude_id: Optional[str] = None) -> int:
        """Minutes already tracked on ``day``, optionally ignoring one entry."""
        entries = [
            e for e in agg.filter_by_date(self.store.list_time_entries(self.user_id), day)
            if not exclude_id or e.id != exclude_id
        ]
        return agg.total_minutes(entries)
