"""Formatting utilities for currency and date display."""

from __future__ import annotations

from datetime import date
from typing import Optional, Union

from ..config import CURRENCY_SYMBOL


def format_currency(amount: Union[float, int], include_sign: bool = True, symbol: Optional[str] = None) -> str:
    """Format a currency amount with grouping and at most two decimals.

    Trailing zero decimals are dropped, so whole amounts show no fraction.

    Args:
        amount: The amount to format
        include_sign: Whether to prefix the currency symbol
        symbol: Currency symbol; defaults to ``PROTRACK_CURRENCY_SYMBOL``

    Returns:
        Formatted currency string (e.g. "₹1,234.5" or "1,234.5")

    Example:
        >>> format_currency(1234.5, symbol='₹')
        '₹1,234.5'
        >>> format_currency(1200, include_sign=False)
        '1,200'
    """
    formatted = f"{float(amount or 0):,.2f}"
    if '.' in formatted:
        formatted = formatted.rstrip('0').rstrip('.')
    if formatted == '-0':
        formatted = '0'
    if not include_sign:
        return formatted
    return f"{CURRENCY_SYMBOL if symbol is None else symbol}{formatted}"


def format_date(value: str) -> str:
    """Render ``YYYY-MM-DD`` as e.g. ``1 Jun 2024``; other input is returned as-is."""
    try:
        parsed = date.fromisoformat(value)
    except (TypeError, ValueError):
        return value or ''
    return f"{parsed.day} {parsed.strftime('%b %Y')}"


def format_month(month: int, year: int) -> str:
    """Render a calendar month (1-12) as e.g. ``June 2024``."""
    return date(year, month, 1).strftime('%B %Y')
