import pytest

from protrack.records import (
    Expense,
    InvalidTimeRangeError,
    RawTimeEntry,
    build_time_entry,
    expense_from_dict,
    normalize_time_entry,
    time_entry_from_dict,
)


def test_expense_from_store_document():
    expense = expense_from_dict({
        '_id': 'abc',
        'userId': 'u1',
        'date': '2024-06-01',
        'category': 'Food',
        'amount': '250.5',
        'paymentMode': 'UPI',
        'notes': None,
    })

    assert expense == Expense('abc', 'u1', '2024-06-01', 'Food', 250.5, 'UPI', '')


def test_expense_from_snake_case_row():
    expense = expense_from_dict({
        'id': 'e1', 'user_id': 'u1', 'date': '2024-06-01', 'category': 'Rent',
        'amount': None, 'payment_mode': 'Card',
    })

    assert expense.id == 'e1'
    assert expense.amount == 0.0
    assert expense.payment_mode == 'Card'


def test_normalize_recomputes_missing_duration():
    raw = RawTimeEntry('t1', 'u1', '2024-06-01', 'Office Work', '09:00', '17:30')
    entry = normalize_time_entry(raw)

    assert (entry.hours, entry.minutes) == (8, 30)
    assert entry.total_minutes == 510
    assert entry.duration == '8h 30m'


def test_normalize_recomputes_when_only_one_field_is_missing():
    raw = RawTimeEntry('t1', 'u1', '2024-06-01', 'Sleep', '23:00', '07:00', hours=3, minutes=None)

    assert (normalize_time_entry(raw).hours, normalize_time_entry(raw).minutes) == (8, 0)


def test_normalize_without_range_is_zero():
    raw = RawTimeEntry('t1', 'u1', '2024-06-01', 'Breaks', 'soon', '')
    entry = normalize_time_entry(raw)

    assert (entry.hours, entry.minutes) == (0, 0)


def test_normalize_keeps_stored_values_and_folds_minutes():
    raw = RawTimeEntry('t1', 'u1', '2024-06-01', 'Meetings', '09:00', '10:00', hours=1, minutes=75)
    entry = normalize_time_entry(raw)

    assert (entry.hours, entry.minutes) == (2, 15)


def test_time_entry_from_legacy_document():
    entry = time_entry_from_dict({
        '_id': 'x', 'userId': 'u1', 'date': '2024-06-02', 'activity': 'Learning',
        'startTime': '08:00 PM', 'endTime': '09:15 PM',
    })

    assert entry.start_time == '08:00 PM'
    assert (entry.hours, entry.minutes) == (1, 15)
    assert entry.to_dict()['duration'] == '1h 15m'


def test_build_time_entry_normalizes_clock_format():
    entry = build_time_entry(
        user_id='u1', date='2024-06-01', activity='Office Work',
        start_time='09:00 AM', end_time='01:30 PM',
    )

    assert entry.start_time == '09:00'
    assert entry.end_time == '13:30'
    assert (entry.hours, entry.minutes) == (4, 30)
    assert entry.id == ''


def test_build_time_entry_over_midnight():
    entry = build_time_entry(
        user_id='u1', date='2024-06-01', activity='Sleep',
        start_time='23:00', end_time='07:00', entry_id='keep',
    )

    assert entry.total_minutes == 480
    assert entry.id == 'keep'


@pytest.mark.parametrize('start, end', [('', '10:00'), ('09:00', None), ('nine', '10:00'), ('09:00', '10:00 XX')])
def test_build_time_entry_rejects_bad_input(start, end):
    with pytest.raises(InvalidTimeRangeError):
        build_time_entry(user_id='u1', date='2024-06-01', activity='Other', start_time=start, end_time=end)


def test_invalid_range_is_a_value_error():
    assert issubclass(InvalidTimeRangeError, ValueError)
