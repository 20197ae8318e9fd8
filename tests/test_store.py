import logging
import sqlite3

import pytest

from protrack.records import Expense, TimeEntry
from protrack.store import SQLiteRecordStore


@pytest.fixture
def store(tmp_path):
    s = SQLiteRecordStore(tmp_path / 'protrack.db')
    s.init_db()
    return s


def _expense(id='', user='u1', day='2024-06-01', amount=100.0):
    return Expense(id, user, day, 'Food', amount, 'Cash', 'lunch')


def test_save_assigns_id_and_lists_by_user(store):
    saved = store.save_expense(_expense())
    store.save_expense(_expense(user='u2'))

    assert saved.id
    expenses = store.list_expenses('u1')
    assert expenses == [saved]
    assert store.list_expenses('nobody') == []


def test_expenses_are_listed_newest_first(store):
    store.save_expense(_expense(day='2024-06-01'))
    store.save_expense(_expense(day='2024-06-03'))
    store.save_expense(_expense(day='2024-06-02'))

    assert [e.date for e in store.list_expenses('u1')] == ['2024-06-03', '2024-06-02', '2024-06-01']


def test_save_with_existing_id_updates_in_place(store):
    store.save_expense(_expense(id='e1', amount=100))
    store.save_expense(_expense(id='e1', amount=250))

    expenses = store.list_expenses('u1')
    assert len(expenses) == 1
    assert expenses[0].amount == 250


def test_delete_expense(store):
    saved = store.save_expense(_expense())
    store.delete_expense(saved.id)
    store.delete_expense('missing')

    assert store.list_expenses('u1') == []


def test_time_entries_round_trip(store):
    entry = TimeEntry('', 'u1', '2024-06-01', 'Sleep', '23:00', '07:00', 8, 0, 'night')
    saved = store.save_time_entry(entry)

    listed = store.list_time_entries('u1')
    assert listed == [saved]
    assert listed[0].duration == '8h'

    store.delete_time_entry(saved.id)
    assert store.list_time_entries('u1') == []


def test_legacy_rows_without_duration_are_normalized(store):
    with store.connect() as conn:
        conn.execute(
            "INSERT INTO time_entries (id, user_id, date, activity, start_time, end_time) "
            "VALUES ('old', 'u1', '2024-06-01', 'Office Work', '09:00', '12:30')"
        )
        conn.commit()

    entry = store.list_time_entries('u1')[0]
    assert (entry.hours, entry.minutes) == (3, 30)


def test_budget_defaults_to_zero_and_upserts(store):
    assert store.get_budget('u1') == 0.0

    store.save_budget('u1', 5000)
    store.save_budget('u1', 7500)

    assert store.get_budget('u1') == 7500.0
    assert store.get_budget('u2') == 0.0


def test_negative_budget_is_rejected(store):
    with pytest.raises(ValueError):
        store.save_budget('u1', -1)


def test_schema_is_created_lazily(tmp_path):
    store = SQLiteRecordStore(tmp_path / 'nested' / 'lazy.db')

    assert store.list_expenses('u1') == []
    assert store.save_expense(_expense()).id


def test_reads_fail_soft(store, caplog):
    with store.connect() as conn:
        conn.execute('DROP TABLE expenses')
        conn.execute('DROP TABLE budgets')
        conn.commit()

    with caplog.at_level(logging.ERROR, logger='protrack.store'):
        assert store.list_expenses('u1') == []
        assert store.get_budget('u1') == 0.0
    assert 'read failed' in caplog.text


def test_writes_propagate_errors(store):
    with store.connect() as conn:
        conn.execute('DROP TABLE expenses')
        conn.commit()

    with pytest.raises(sqlite3.Error):
        store.save_expense(_expense())
