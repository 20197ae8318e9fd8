from datetime import date

import pytest

from protrack import dashboard as views
from protrack.budget import BudgetStatus
from protrack.records import Expense, TimeEntry
from protrack.store import SQLiteRecordStore

TODAY = date(2024, 6, 15)
WORK = ('Office Work', 'Meetings', 'Learning')


@pytest.fixture
def ctx(tmp_path):
    store = SQLiteRecordStore(tmp_path / 'protrack.db')
    for expense in [
        Expense('e1', 'u1', '2024-06-15', 'Food', 300, 'UPI'),
        Expense('e2', 'u1', '2024-06-15', 'Travel', 100, 'Cash'),
        Expense('e3', 'u1', '2024-06-14', 'Food', 200, 'Cash'),
        Expense('e4', 'u1', '2024-06-01', 'Rent', 1000, 'Net Banking'),
        Expense('e5', 'u1', '2024-05-20', 'Food', 500, 'Card'),
        Expense('x1', 'other', '2024-06-15', 'Food', 9999, 'Cash'),
    ]:
        store.save_expense(expense)
    for entry in [
        TimeEntry('t1', 'u1', '2024-06-15', 'Office Work', '09:00', '15:00', 6, 0),
        TimeEntry('t2', 'u1', '2024-06-15', 'Breaks', '15:00', '17:00', 2, 0),
        TimeEntry('t3', 'u1', '2024-06-15', 'Sleep', '23:00', '07:00', 8, 0),
        TimeEntry('t4', 'u1', '2024-06-14', 'Meetings', '10:00', '12:00', 2, 0),
    ]:
        store.save_time_entry(entry)
    store.save_budget('u1', 2000)
    return views.ProTrackContext(store=store, user_id='u1', today=TODAY, work_activities=WORK)


def test_change_label():
    assert views.change_label(12.34) == '+12.3% from yesterday'
    assert views.change_label(-5) == '-5.0% from yesterday'
    assert views.change_label(0) == 'Same as yesterday'


def test_snapshot_is_scoped_to_user(ctx):
    records = ctx.snapshot()

    assert len(records.expenses) == 5
    assert len(records.time_entries) == 4
    assert records.budget == 2000


def test_dashboard_stats(ctx):
    stats = ctx.dashboard()['stats']

    assert stats['today_expense'] == 400
    assert stats['yesterday_expense'] == 200
    assert stats['expense_change'] == 100
    assert stats['expense_change_label'] == '+100.0% from yesterday'
    assert stats['month_expense'] == 1600
    assert stats['today_minutes'] == 960
    assert stats['today_duration'] == '16h'
    assert stats['remaining_duration'] == '8h'
    # 360 of 960 minutes is 37.5 percent.
    assert stats['productivity'] == 38


def test_dashboard_sections(ctx):
    data = ctx.dashboard()

    assert [e.id for e in data['top_expenses']] == ['e1', 'e2']
    activities = data['activities']
    assert activities['Activity'].tolist() == ['Sleep', 'Office Work', 'Breaks']
    assert activities['Percent'].tolist() == [50.0, 37.5, 12.5]
    assert activities['Duration'].tolist() == ['8h', '6h', '2h']

    budget = data['budget']
    assert budget['status'] is BudgetStatus.OK
    assert budget['balance'] == 400
    assert budget['percentage_label'] == '80.0% used'
    assert budget['progress_width'] == 80


def test_dashboard_for_new_user(tmp_path):
    ctx = views.ProTrackContext(store=SQLiteRecordStore(tmp_path / 'empty.db'), user_id='new', today=TODAY)
    data = ctx.dashboard()

    assert data['stats']['today_expense'] == 0
    assert data['stats']['expense_change_label'] == 'Same as yesterday'
    assert data['stats']['remaining_minutes'] == 1440
    assert data['stats']['productivity'] == 0
    assert data['top_expenses'] == []
    assert data['activities'].empty
    assert data['budget']['status'] is BudgetStatus.NO_BUDGET


def test_monthly_view(ctx):
    data = ctx.monthly(6, 2024)

    assert data['label'] == 'June 2024'
    assert data['total_spending'] == 1600
    assert data['daily_average'] == pytest.approx(1600 / 30)
    assert data['avg_work_minutes'] == 16
    assert data['avg_work_duration'] == '16m'
    assert data['work_hours'] == 8
    assert data['personal_hours'] == 2
    assert data['work_ratio_label'] == 'Work vs Personal: 8h : 2h'
    assert data['categories'] == {'Food': 500, 'Travel': 100, 'Rent': 1000}
    assert data['activity_hours']['Sleep'] == 8.0
    assert len(data['daily']) == 30
    assert data['daily']['2024-06-15'] == 400


def test_monthly_view_for_empty_month(ctx):
    data = ctx.monthly(2, 2024)

    assert data['total_spending'] == 0
    assert data['daily_average'] == 0
    assert data['avg_work_duration'] == '0m'
    assert data['categories'] == {}
    assert len(data['daily']) == 29


def test_analytics_view(ctx):
    data = ctx.analytics()

    top = data['top_categories']
    assert top['Category'].tolist() == ['Food', 'Rent', 'Travel']
    assert top['Percent'].tolist()[0] == 47.6
    assert data['payment_modes']['Cash'] == 300
    assert data['work_duration'] == '8h'
    assert data['productivity_rate'] == 44.4
    assert data['avg_daily_work'] == '16m'

    weekly = data['weekly']
    assert len(weekly) == 7
    assert weekly['Date'].iloc[-1] == '2024-06-15'
    assert weekly['Day'].iloc[-1] == 'Sat'
    assert weekly['Amount'].tolist()[-2:] == [200, 400]


def test_expense_list_view(ctx):
    view = views.expense_list_view(ctx.snapshot().expenses, category='Food', order='amount-desc')

    assert [e.amount for e in view['items']] == [500, 300, 200]
    assert view['total'] == 1000
    assert view['count'] == 3


def test_time_list_view_month_filter(ctx):
    entries = ctx.snapshot().time_entries
    view = views.time_list_view(entries, TODAY, month_key='2024-06')

    assert view['count'] == 4
    assert view['month_minutes'] == 1080
    assert view['day_summary']['date'] == '2024-06-15'
    assert view['day_summary']['tracked'] == '16h'
    assert view['day_summary']['progress'] == pytest.approx(66.7)


def test_time_list_view_day_filter(ctx):
    entries = ctx.snapshot().time_entries
    view = views.time_list_view(entries, TODAY, day='2024-06-14', month_key='2024-06')

    assert [e.id for e in view['items']] == ['t4']
    assert view['month_minutes'] is None
    assert view['day_summary']['tracked_minutes'] == 120
    assert view['day_summary']['remaining'] == '22h'


def test_total_minutes_for_date(ctx):
    assert ctx.total_minutes_for_date('2024-06-15') == 960
    assert ctx.total_minutes_for_date('2024-06-15', exclude_id='t3') == 480
    assert ctx.total_minutes_for_date('2024-01-01') == 0


def test_views_reuse_a_snapshot(ctx):
    records = ctx.snapshot()
    records.expenses.append(Expense('new', 'u1', '2024-06-15', 'Food', 50, 'Cash'))

    assert ctx.dashboard(records)['stats']['today_expense'] == 450
    assert ctx.dashboard()['stats']['today_expense'] == 400
