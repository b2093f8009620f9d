"""Common utilities shared across all page files.

This module provides formatting and file operation utilities that are used
by multiple pages and by the exporters.
"""

from .formatting import format_currency, format_variance
from .file_operations import ensure_directory, export_filename, safe_filename

__all__ = [
    'format_currency',
    'format_variance',
    'ensure_directory',
    'export_filename',
    'safe_filename',
]
