"""Shared sidebar components for the multi-page planner.

Every page calls :func:`render_shared_sidebar` first. It sets up logging and
the data directories, shows the headline balance, offers the free-text quick
add and the reset button, and returns the current state.
"""

from __future__ import annotations

import streamlit as st

from . import config
from . import session
from .budget_parser import parse_budget_input
from .calculations import summarize
from .logging_config import setup_logging
from .pages.lib.common.formatting import format_currency
from .state import AppState, add_parsed_event


def render_shared_sidebar() -> AppState:
    """Render shared sidebar elements available on all pages.

    Returns:
        The current planner state (after any sidebar action)
    """
    setup_logging()
    config.ensure_data_directories()
    state = session.get_state()

    st.sidebar.title("🏸 Rec Club Budget")
    st.sidebar.caption(config.PLANNING_LABEL)

    summary = summarize(state.events, state.income_sources, state.carry_over, state.badminton_config)
    st.sidebar.metric("Projected Balance", format_currency(summary.projected_balance))

    save_error = session.last_save_error()
    if save_error:
        st.sidebar.warning(f"Changes are not being saved: {save_error}")

    _render_quick_add()
    _render_reset()
    return session.get_state()


def _render_quick_add() -> None:
    st.sidebar.subheader("✨ Quick Add")
    if config.get_api_key() is None:
        st.sidebar.caption("Set OPENAI_API_KEY to add events from a sentence.")
        return
    with st.sidebar.form("quick_add_form", clear_on_submit=True):
        text = st.text_input("Describe an event", placeholder="Team dinner in March, around 800")
        submitted = st.form_submit_button("Add with AI")
    if not submitted or not text.strip():
        return
    with st.sidebar.status("Reading your text...", expanded=False):
        candidate = parse_budget_input(text)
    if candidate is None:
        st.sidebar.error("Could not understand that. Try including a name, month and amount.")
        return
    session.commit(add_parsed_event(session.get_state(), candidate))
    st.sidebar.success(f"Added {candidate.name} ({candidate.month.value}, {format_currency(candidate.amount)})")


def _render_reset() -> None:
    st.sidebar.subheader("🗄️ Data")
    if st.sidebar.button("🗑️ Reset to Empty", help="Clear events and boards, zero income and carry-over"):
        st.session_state.confirm_reset = True

    if st.session_state.get('confirm_reset', False):
        st.sidebar.warning("⚠️ This sets all values to zero and empties all lists. It cannot be undone.")
        col1, col2 = st.sidebar.columns(2)
        with col1:
            if st.button("✅ Confirm", key="confirm_reset_btn"):
                session.reset_all()
                st.session_state.confirm_reset = False
                session.rerun()
        with col2:
            if st.button("❌ Cancel", key="cancel_reset_btn"):
                st.session_state.confirm_reset = False
                session.rerun()
