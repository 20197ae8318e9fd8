"""Configuration management for ProTrack.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Tuple

# Base project root - assumes this file is in protrack/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("PROTRACK_DATA_DIR", _PROJECT_ROOT / "data"))
EXPORT_DIR = Path(os.getenv("PROTRACK_EXPORT_DIR", DATA_DIR / "exports"))

# Database
DB_PATH = Path(
    os.getenv("PROTRACK_DB_PATH", DATA_DIR / "protrack.db")
).resolve()

LOG_LEVEL = os.getenv("PROTRACK_LOG_LEVEL", "INFO").upper()
CURRENCY_SYMBOL = os.getenv("PROTRACK_CURRENCY_SYMBOL", "₹")

DEFAULT_WORK_ACTIVITIES: Tuple[str, ...] = ("Office Work", "Meetings", "Learning")


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, EXPORT_DIR]:
        directory.mkdir(parents=True, exist_ok=True)


def get_work_activities() -> Tuple[str, ...]:
    """Activities counted as work for productivity scores.

    ``PROTRACK_WORK_ACTIVITIES`` takes a comma separated list; blank
    items are ignored and an empty value falls back to the defaults.
    """
    raw = os.getenv("PROTRACK_WORK_ACTIVITIES", "")
    activities = tuple(item.strip() for item in raw.split(",") if item.strip())
    return activities or DEFAULT_WORK_ACTIVITIES


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for scripts and the Streamlit app."""
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

