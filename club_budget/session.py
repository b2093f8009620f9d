"""Streamlit session-state container for the planner.

The current :class:`AppState` lives in ``st.session_state`` for the lifetime of
a browser session. It is loaded from disk on first access; every committed
change replaces it in memory first and is then written to disk. A failed
write is logged and reported but never rolls the in-memory change back.

Task-board navigation (which board is open, and the board to return to after
following a task link) is kept here too.
"""

from __future__ import annotations

from typing import Optional

import streamlit as st

from .logging_config import get_logger
from .state import AppState, reset_state
from .storage import BudgetStorage

logger = get_logger(__name__)

STATE_KEY = 'club_budget_state'
STORAGE_KEY = 'club_budget_storage'
SAVE_ERROR_KEY = 'club_budget_save_error'

# Task board navigation
SELECTED_EVENT_KEY = 'board_event_id'
CENTRAL_BOARD_KEY = 'board_is_central'
RETURN_TO_KEY = 'board_return_to'


def get_storage() -> BudgetStorage:
    storage = st.session_state.get(STORAGE_KEY)
    if storage is None:
        storage = BudgetStorage()
        st.session_state[STORAGE_KEY] = storage
    return storage


def get_state() -> AppState:
    """Return the session's state, loading it from disk on first use."""
    state = st.session_state.get(STATE_KEY)
    if state is None:
        state = get_storage().load()
        st.session_state[STATE_KEY] = state
        logger.info(
            "Planner state loaded",
            extra={'events': len(state.events), 'income_sources': len(state.income_sources)},
        )
    return state


def commit(new_state: AppState) -> AppState:
    """Make ``new_state`` current and persist it.

    Unchanged states are not rewritten.
    """
    if st.session_state.get(STATE_KEY) == new_state:
        return new_state
    st.session_state[STATE_KEY] = new_state
    try:
        get_storage().save(new_state)
    except OSError as exc:
        logger.error("Failed to persist planner state: %s", exc)
        st.session_state[SAVE_ERROR_KEY] = str(exc)
    else:
        st.session_state.pop(SAVE_ERROR_KEY, None)
    return new_state


def last_save_error() -> Optional[str]:
    return st.session_state.get(SAVE_ERROR_KEY)


def reset_all() -> AppState:
    """Delete the stored files and commit the zeroed state."""
    current = get_state()
    try:
        get_storage().clear()
    except OSError as exc:
        logger.error("Failed to clear stored state: %s", exc)
    logger.info("Planner data reset")
    return commit(reset_state(current))


def replace_all(new_state: AppState) -> AppState:
    """Swap in an imported state and drop any board navigation."""
    close_board()
    logger.info("Planner state replaced from import", extra={'events': len(new_state.events)})
    return commit(new_state)


# ----- Task board navigation -----


def open_board(event_id: Optional[str], central: bool = False) -> None:
    st.session_state[SELECTED_EVENT_KEY] = None if central else event_id
    st.session_state[CENTRAL_BOARD_KEY] = central
    st.session_state[RETURN_TO_KEY] = None


def follow_link(target_event_id: str) -> None:
    """Jump from the open board to a linked event's board, remembering the origin."""
    origin = 'central' if st.session_state.get(CENTRAL_BOARD_KEY) else st.session_state.get(SELECTED_EVENT_KEY)
    st.session_state[SELECTED_EVENT_KEY] = target_event_id
    st.session_state[CENTRAL_BOARD_KEY] = False
    st.session_state[RETURN_TO_KEY] = origin


def return_to_origin() -> None:
    origin = st.session_state.get(RETURN_TO_KEY)
    if origin is None:
        return
    if origin == 'central':
        open_board(None, central=True)
    else:
        open_board(origin)


def close_board() -> None:
    for key in (SELECTED_EVENT_KEY, CENTRAL_BOARD_KEY, RETURN_TO_KEY):
        st.session_state.pop(key, None)


def current_board() -> tuple:
    """Return ``(event_id, is_central, return_to)`` for the open board."""
    return (
        st.session_state.get(SELECTED_EVENT_KEY),
        bool(st.session_state.get(CENTRAL_BOARD_KEY, False)),
        st.session_state.get(RETURN_TO_KEY),
    )


def rerun() -> None:
    """Trigger a Streamlit rerun across Streamlit versions."""
    rerun_fn = getattr(st, 'rerun', None)
    if rerun_fn is None:
        rerun_fn = getattr(st, 'experimental_rerun')
    rerun_fn()
