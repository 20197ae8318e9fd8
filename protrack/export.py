"""CSV export of expenses and time entries.

The format is what the download button has always produced:
a header row of field names, every field wrapped in double quotes, rows
separated by ``\\n`` and a UTF-8 byte-order mark in front.  Embedded
quotes are not escaped; values containing ``"`` therefore produce a
malformed field.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .aggregation import today_iso
from .common.file_operations import ensure_directory, safe_filename
from .config import EXPORT_DIR
from .records import Expense, TimeEntry

logger = logging.getLogger(__name__)

BOM = '\ufeff'


def expense_export_rows(expenses: Iterable[Expense]) -> List[Dict[str, Any]]:
    return [
        {
            'Date': e.date,
            'Category': e.category,
            'Amount': e.amount,
            'Payment Mode': e.payment_mode,
            'Notes': e.notes or '',
        }
        for e in expenses
    ]


def time_entry_export_rows(entries: Iterable[TimeEntry]) -> List[Dict[str, Any]]:
    return [
        {
            'Date': e.date,
            'Activity': e.activity,
            'Hours': e.hours,
            'Minutes': e.minutes,
            'Notes': e.notes or '',
        }
        for e in entries
    ]


def _cell(value: Any) -> str:
    if value is None or value == '':
        return '""'
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f'"{value}"'


def to_csv_text(rows: List[Dict[str, Any]]) -> str:
    """Render rows as quoted CSV, headers taken from the first row.

    Returns an empty string when there are no rows.
    """
    if not rows:
        return ''
    headers = list(rows[0].keys())
    lines = [','.join(headers)]
    lines.extend(','.join(_cell(row.get(header)) for header in headers) for row in rows)
    return '\n'.join(lines)


def to_csv_bytes(rows: List[Dict[str, Any]]) -> bytes:
    """UTF-8 encoded CSV with a byte-order mark, for downloads."""
    return (BOM + to_csv_text(rows)).encode('utf-8')


def export_filename(name: str, today: Optional[str] = None) -> str:
    """``<name>_<YYYY-MM-DD>.csv`` using the local date by default."""
    return f"{safe_filename(name)}_{today or today_iso()}.csv"


def write_csv(
    rows: List[Dict[str, Any]],
    name: str,
    directory: Optional[Path] = None,
    today: Optional[date] = None,
) -> Optional[Path]:
    """Write an export file and return its path.

    Nothing is written when ``rows`` is empty; a warning is logged and
    ``None`` returned instead.
    """
    if not rows:
        logger.warning("No data to export for %s", name)
        return None
    target_dir = ensure_directory(Path(directory) if directory is not None else EXPORT_DIR)
    target = target_dir / export_filename(name, today.isoformat() if today else None)
    target.write_bytes(to_csv_bytes(rows))
    logger.info("Exported %d rows to %s", len(rows), target)
    return target
