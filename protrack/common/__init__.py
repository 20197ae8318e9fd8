"""Shared formatting and file helpers.

This module provides the currency/date formatting and filename utilities
used by the export code, the budget messages and the Streamlit views.
"""

from .formatting import format_currency, format_date, format_month
from .file_operations import ensure_directory, safe_filename

__all__ = [
    'format_currency',
    'format_date',
    'format_month',
    'ensure_directory',
    'safe_filename',
]
