"""File operation utilities for safe filename handling and path management."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


def safe_filename(name: str, default: str = 'export', max_length: Optional[int] = None) -> str:
    """Create a safe filename stem from a user-provided name.

    Keeps alphanumeric characters, underscores and hyphens, turns spaces
    into underscores and collapses repeated underscores.

    Example:
        >>> safe_filename("time entries!")
        'time_entries'
        >>> safe_filename("", default="expenses")
        'expenses'
    """
    if not name:
        return default

    cleaned = ''.join(c for c in name if c.isalnum() or c in {' ', '_', '-'})
    cleaned = cleaned.strip().replace(' ', '_')

    while '__' in cleaned:
        cleaned = cleaned.replace('__', '_')

    if max_length is not None and len(cleaned) > max_length:
        cleaned = cleaned[:max_length]

    cleaned = cleaned.rstrip('_')

    return cleaned if cleaned else default


def ensure_directory(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary.

    Raises:
        OSError: If the directory cannot be created
    """
    path.mkdir(parents=True, exist_ok=True)
    return path
