"""Expense categories, activities and payment modes.

Values outside the fixed enumerations are accepted as free text.  They
share the "Other" icon and colour and are selected by the "Other" filter.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple

OTHER = 'Other'

EXPENSE_CATEGORIES: Tuple[str, ...] = (
    'Food', 'Travel', 'Rent', 'Bills', 'Shopping', 'Entertainment', 'Medical', OTHER,
)
ACTIVITIES: Tuple[str, ...] = (
    'Office Work', 'Commute', 'Meetings', 'Breaks', 'Personal Time', 'Sleep', 'Learning', OTHER,
)
PAYMENT_MODES: Tuple[str, ...] = ('Cash', 'UPI', 'Card', 'Net Banking', OTHER)

STANDARD_CATEGORIES = frozenset(c for c in EXPENSE_CATEGORIES if c != OTHER)
STANDARD_ACTIVITIES = frozenset(a for a in ACTIVITIES if a != OTHER)

CATEGORY_ICONS: Dict[str, str] = {
    'Food': '🍔',
    'Travel': '🚗',
    'Rent': '🏠',
    'Bills': '📄',
    'Shopping': '🛍️',
    'Entertainment': '🎬',
    'Medical': '💊',
    OTHER: '📦',
}

CATEGORY_COLORS: Dict[str, str] = {
    'Food': '#f093fb',
    'Travel': '#4facfe',
    'Rent': '#fa709a',
    'Bills': '#fee140',
    'Shopping': '#667eea',
    'Entertainment': '#764ba2',
    'Medical': '#f5576c',
    OTHER: '#a0aec0',
}

ACTIVITY_ICONS: Dict[str, str] = {
    'Office Work': '💼',
    'Commute': '🚌',
    'Meetings': '👥',
    'Breaks': '☕',
    'Personal Time': '🏃',
    'Sleep': '😴',
    'Learning': '📚',
    OTHER: '📌',
}

ACTIVITY_COLORS: Dict[str, str] = {
    'Office Work': '#667eea',
    'Commute': '#f093fb',
    'Meetings': '#4facfe',
    'Breaks': '#43e97b',
    'Personal Time': '#fa709a',
    'Sleep': '#fee140',
    'Learning': '#764ba2',
    OTHER: '#a0aec0',
}


def category_icon(category: Optional[str]) -> str:
    return CATEGORY_ICONS.get(category or '', CATEGORY_ICONS[OTHER])


def category_color(category: Optional[str]) -> str:
    return CATEGORY_COLORS.get(category or '', CATEGORY_COLORS[OTHER])


def activity_icon(activity: Optional[str]) -> str:
    return ACTIVITY_ICONS.get(activity or '', ACTIVITY_ICONS[OTHER])


def activity_color(activity: Optional[str]) -> str:
    return ACTIVITY_COLORS.get(activity or '', ACTIVITY_COLORS[OTHER])


def resolve_choice(selected: str, custom_text: str = '') -> str:
    """Value to store for a form selection; "Other" takes the custom text."""
    if selected == OTHER and custom_text.strip():
        return custom_text.strip()
    return selected


def matches_selection(
    value: Optional[str],
    selection: Optional[str],
    standard: Iterable[str],
    custom_text: str = '',
) -> bool:
    """Whether ``value`` passes a category/activity filter.

    Args:
        value: The record's category or activity
        selection: Selected filter value; empty selects everything
        standard: The enumeration without "Other"
        custom_text: Free text typed alongside an "Other" selection

    Example:
        >>> matches_selection('Gym', 'Other', STANDARD_CATEGORIES)
        True
        >>> matches_selection('Gym fees', 'Other', STANDARD_CATEGORIES, 'GYM')
        True
        >>> matches_selection('Food', 'Other', STANDARD_CATEGORIES)
        False
    """
    if not selection:
        return True
    value = value or ''
    if selection == OTHER:
        needle = custom_text.strip().lower()
        if needle:
            return needle in value.lower()
        return value not in set(standard)
    return value == selection
