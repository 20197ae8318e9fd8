"""Record persistence for expenses, time entries and budgets.

:class:`RecordStore` is the interface the rest of the package depends on;
:class:`SQLiteRecordStore` implements it on a local SQLite file.  Reads
fail soft: a database error is logged and an empty result returned, so
the dashboards still render (with zero totals).  Writes are upserts keyed
by record id, i.e. the last write wins.
"""

from __future__ import annotations

import logging
import sqlite3
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from .config import DB_PATH
from .records import Expense, TimeEntry, expense_from_dict, time_entry_from_dict

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS expenses (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    date TEXT NOT NULL,
    category TEXT NOT NULL,
    amount REAL NOT NULL,
    payment_mode TEXT,
    notes TEXT
);

CREATE TABLE IF NOT EXISTS time_entries (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    date TEXT NOT NULL,
    activity TEXT NOT NULL,
    start_time TEXT,
    end_time TEXT,
    hours INTEGER,
    minutes INTEGER,
    duration TEXT,
    notes TEXT
);

CREATE TABLE IF NOT EXISTS budgets (
    user_id TEXT PRIMARY KEY,
    amount REAL NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS ix_expenses_user_date ON expenses (user_id, date);
CREATE INDEX IF NOT EXISTS ix_time_user_date ON time_entries (user_id, date);
"""


class RecordStore(ABC):
    """Persistence operations the application needs, keyed by user."""

    @abstractmethod
    def list_expenses(self, user_id: str) -> List[Expense]:
        ...

    @abstractmethod
    def list_time_entries(self, user_id: str) -> List[TimeEntry]:
        ...

    @abstractmethod
    def get_budget(self, user_id: str) -> float:
        ...

    @abstractmethod
    def save_expense(self, expense: Expense) -> Expense:
        ...

    @abstractmethod
    def delete_expense(self, expense_id: str) -> None:
        ...

    @abstractmethod
    def save_time_entry(self, entry: TimeEntry) -> TimeEntry:
        ...

    @abstractmethod
    def delete_time_entry(self, entry_id: str) -> None:
        ...

    @abstractmethod
    def save_budget(self, user_id: str, amount: float) -> float:
        ...


def new_record_id() -> str:
    return uuid.uuid4().hex


class SQLiteRecordStore(RecordStore):
    """:class:`RecordStore` backed by a SQLite database file."""

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        self.db_path = Path(db_path) if db_path is not None else DB_PATH
        self._initialized = False

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def init_db(self) -> None:
        with self.connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()
        self._initialized = True
        logger.debug("Initialized record store at %s", self.db_path)

    def _ensure_schema(self) -> None:
        if not self._initialized:
            self.init_db()

    def _fetch(self, sql: str, params: tuple) -> List[Dict[str, Any]]:
        try:
            self._ensure_schema()
            with self.connect() as conn:
                rows = conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            logger.error("Record store read failed: %s", exc)
            return []
        return [dict(row) for row in rows]

    # --- Expenses ---

    def list_expenses(self, user_id: str) -> List[Expense]:
        rows = self._fetch(
            "SELECT * FROM expenses WHERE user_id = ? ORDER BY date DESC, rowid",
            (user_id,),
        )
        return [expense_from_dict(row) for row in rows]

    def save_expense(self, expense: Expense) -> Expense:
        saved = expense if expense.id else replace(expense, id=new_record_id())
        self._ensure_schema()
        with self.connect() as conn:
            conn.execute(
                """
                INSERT INTO expenses (id, user_id, date, category, amount, payment_mode, notes)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    user_id = excluded.user_id,
                    date = excluded.date,
                    category = excluded.category,
                    amount = excluded.amount,
                    payment_mode = excluded.payment_mode,
                    notes = excluded.notes
                """,
                (saved.id, saved.user_id, saved.date, saved.category, saved.amount,
                 saved.payment_mode, saved.notes),
            )
            conn.commit()
        logger.info("Saved expense %s for user %s", saved.id, saved.user_id)
        return saved

    def delete_expense(self, expense_id: str) -> None:
        self._ensure_schema()
        with self.connect() as conn:
            conn.execute("DELETE FROM expenses WHERE id = ?", (expense_id,))
            conn.commit()
        logger.info("Deleted expense %s", expense_id)

    # --- Time entries ---

    def list_time_entries(self, user_id: str) -> List[TimeEntry]:
        rows = self._fetch(
            "SELECT * FROM time_entries WHERE user_id = ? ORDER BY date DESC, rowid",
            (user_id,),
        )
        return [time_entry_from_dict(row) for row in rows]

    def save_time_entry(self, entry: TimeEntry) -> TimeEntry:
        saved = entry if entry.id else replace(entry, id=new_record_id())
        self._ensure_schema()
        with self.connect() as conn:
            conn.execute(
                """
                INSERT INTO time_entries
                    (id, user_id, date, activity, start_time, end_time, hours, minutes, duration, notes)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    user_id = excluded.user_id,
                    date = excluded.date,
                    activity = excluded.activity,
                    start_time = excluded.start_time,
                    end_time = excluded.end_time,
                    hours = excluded.hours,
                    minutes = excluded.minutes,
                    duration = excluded.duration,
                    notes = excluded.notes
                """,
                (saved.id, saved.user_id, saved.date, saved.activity, saved.start_time,
                 saved.end_time, saved.hours, saved.minutes, saved.duration, saved.notes),
            )
            conn.commit()
        logger.info("Saved time entry %s for user %s", saved.id, saved.user_id)
        return saved

    def delete_time_entry(self, entry_id: str) -> None:
        self._ensure_schema()
        with self.connect() as conn:
            conn.execute("DELETE FROM time_entries WHERE id = ?", (entry_id,))
            conn.commit()
        logger.info("Deleted time entry %s", entry_id)

    # --- Budget ---

    def get_budget(self, user_id: str) -> float:
        rows = self._fetch("SELECT amount FROM budgets WHERE user_id = ?", (user_id,))
        if not rows or rows[0]['amount'] is None:
            return 0.0
        return float(rows[0]['amount'])

    def save_budget(self, user_id: str, amount: float) -> float:
        """Set the user's monthly budget.

        Raises:
            ValueError: If ``amount`` is negative
        """
        amount = float(amount)
        if amount < 0:
            raise ValueError("Budget amount must be non-negative")
        self._ensure_schema()
        with self.connect() as conn:
            conn.execute(
                """
                INSERT INTO budgets (user_id, amount) VALUES (?, ?)
                ON CONFLICT(user_id) DO UPDATE SET amount = excluded.amount
                """,
                (user_id, amount),
            )
            conn.commit()
        logger.info("Saved budget %.2f for user %s", amount, user_id)
        return amount
