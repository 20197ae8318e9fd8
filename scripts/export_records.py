#!/usr/bin/env python3
"""Export a user's expenses or time entries to CSV."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from protrack.aggregation import EXPENSE_COLUMNS, TIME_ENTRY_COLUMNS, records_frame
from protrack.config import EXPORT_DIR, configure_logging
from protrack.export import expense_export_rows, time_entry_export_rows, write_csv
from protrack.store import SQLiteRecordStore

logger = logging.getLogger(__name__)


def main(user: str, kind: str = 'expenses', db: Optional[str] = None, out_dir: Optional[str] = None,
         preview: int = 0) -> Optional[Path]:
    store = SQLiteRecordStore(db)
    if kind == 'expenses':
        records = store.list_expenses(user)
        rows = expense_export_rows(records)
        columns = EXPENSE_COLUMNS
    else:
        records = store.list_time_entries(user)
        rows = time_entry_export_rows(records)
        columns = TIME_ENTRY_COLUMNS

    if preview:
        print(records_frame(records, columns).head(preview).to_string(index=False))

    target = write_csv(rows, kind, Path(out_dir) if out_dir else EXPORT_DIR)
    if target is None:
        print(f"No {kind} found for {user}.")
    else:
        print(f"Wrote {len(rows)} rows to {target}")
    return target


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Export ProTrack records to CSV.')
    parser.add_argument('--user', required=True, help='User whose records to export')
    parser.add_argument('--kind', choices=['expenses', 'time_entries'], default='expenses')
    parser.add_argument('--db', default=None, help='Path to the SQLite database')
    parser.add_argument('--out-dir', default=None, help='Directory for the CSV file')
    parser.add_argument('--preview', type=int, default=0, help='Print the first N records before exporting')
    parser.add_argument('--log-level', default=None, help='Logging level, e.g. DEBUG')
    args = parser.parse_args()
    configure_logging(args.log_level)
    main(user=args.user, kind=args.kind, db=args.db, out_dir=args.out_dir, preview=args.preview)
