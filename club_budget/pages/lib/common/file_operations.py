"""Filename and directory helpers shared by storage and the exporters."""

from __future__ import annotations

import re
from datetime import date
from pathlib import Path
from typing import Optional

EXPORT_PREFIX = 'rec-club-budget'

_UNSAFE = re.compile(r'[^\w\s-]')
_SEPARATORS = re.compile(r'[\s_]+')


def safe_filename(name: str, default: str = 'file', max_length: Optional[int] = None) -> str:
    """Turn free text (an event name, a font URL stem) into a filename.

    Args:
        name: Text to sanitize
        default: Returned when nothing usable is left
        max_length: Optional cap on the result length

    Returns:
        Name made of letters, digits, hyphens and single underscores

    Example:
        >>> safe_filename("Year End Dinner!")
        'Year_End_Dinner'
        >>> safe_filename("", default="report")
        'report'
    """
    cleaned = _SEPARATORS.sub('_', _UNSAFE.sub('', name or '').strip())
    if max_length is not None:
        cleaned = cleaned[:max_length]
    return cleaned.strip('_') or default


def export_filename(extension: str, day: Optional[date] = None, prefix: str = EXPORT_PREFIX) -> str:
    """Dated download name, e.g. ``rec-club-budget-2025-03-09.csv``."""
    return f"{prefix}-{(day or date.today()).isoformat()}.{extension.lstrip('.')}"


def ensure_directory(path: Path) -> Path:
    """Create ``path`` (and parents) if missing and return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path
