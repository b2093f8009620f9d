"""Task board widgets used by the Task Board page.

This module provides the Streamlit rendering for a board: the header with
budget strip, the add-task form, and the status columns with their cards.
"""

from .widgets import (
    CONFIRM_DELETE_KEY,
    EDIT_BUFFER_KEY,
    render_add_task_form,
    render_board_columns,
    render_board_header,
)

__all__ = [
    'CONFIRM_DELETE_KEY',
    'EDIT_BUFFER_KEY',
    'render_add_task_form',
    'render_board_columns',
    'render_board_header',
]
