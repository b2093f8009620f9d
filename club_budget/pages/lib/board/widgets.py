"""Streamlit widgets for the task board page.

A board is rendered as three status columns. Each card can be moved to another
column, deleted (after confirmation), have its checklist ticked, or be opened
for editing. While a card is being edited its pending changes live in a
:class:`TaskEditBuffer` kept in session state; Save commits the buffer in one
step and Cancel throws it away.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

import streamlit as st

from .... import session
from ....models import EventExpense, EventTask, TaskStatus
from ....pages.config import get_config_value
from ....state import AppState, board_tasks, replace_board_tasks
from ....task_board import (
    STATUS_ORDER,
    TaskEditBuffer,
    add_task,
    allocated_budget,
    begin_edit,
    checklist_progress,
    delete_task,
    edit_task,
    find_task,
    is_over_allocated,
    linkable_events,
    move_task,
    remaining_budget,
    resolve_linked_event,
    tasks_by_status,
    toggle_checklist_item,
)
from ..common.formatting import format_currency

EDIT_BUFFER_KEY = 'board_edit_buffer'
CONFIRM_DELETE_KEY = 'board_confirm_delete'


def _status_label(status: TaskStatus) -> str:
    labels: Dict[str, str] = get_config_value('planner', 'ui', 'status_labels', default={})
    icons: Dict[str, str] = get_config_value('planner', 'ui', 'status_icons', default={})
    return f"{icons.get(status.value, '')} {labels.get(status.value, status.value)}".strip()


def _save_tasks(state: AppState, event_id: Optional[str], central: bool, tasks: Sequence[EventTask]) -> None:
    session.commit(replace_board_tasks(state, event_id, tasks, central=central))


# ============================================================================
# Header and budget strip
# ============================================================================


def render_board_header(
    state: AppState,
    event: Optional[EventExpense],
    central: bool,
    return_to: Optional[str],
) -> None:
    """Render the title row, the back/return buttons and the budget strip."""
    tasks = board_tasks(state, event.id if event else None, central=central)

    nav_cols = st.columns([1, 3])
    with nav_cols[0]:
        if st.button("⬅️ Close board", key="board_close"):
            session.close_board()
            session.rerun()
    if return_to is not None:
        origin_name = "Central Board" if return_to == 'central' else getattr(state.find_event(return_to), 'name', None)
        if origin_name:
            with nav_cols[1]:
                if st.button(f"↩️ Return to {origin_name}", key="board_return"):
                    session.return_to_origin()
                    session.rerun()

    if central:
        st.header("📋 Central Board")
        st.caption("Club-wide tasks that are not tied to one event")
        cols = st.columns(2)
        cols[0].metric("Tasks", len(tasks))
        cols[1].metric("Allocated", format_currency(allocated_budget(tasks)))
        return

    st.header(f"📋 {event.name}")
    st.caption(f"{event.month.value} · {event.type.value} · Task Board & Budget Planner")
    remaining = remaining_budget(event, tasks)
    cols = st.columns(3)
    cols[0].metric("Event Budget", format_currency(event.amount))
    cols[1].metric("Allocated", format_currency(allocated_budget(tasks)))
    cols[2].metric("Remaining", format_currency(remaining))
    if is_over_allocated(event, tasks):
        st.error(f"Tasks are over-allocated by {format_currency(-remaining)}")


# ============================================================================
# Adding tasks
# ============================================================================


def render_add_task_form(state: AppState, event_id: Optional[str], central: bool) -> None:
    with st.form("board_add_task", clear_on_submit=True):
        st.markdown("**➕ New Task**")
        title = st.text_input("Task title", placeholder="Book venue")
        description = st.text_input("Description (optional)")
        cols = st.columns(2)
        assignee = cols[0].text_input("Assignee", placeholder="Team")
        budget = cols[1].text_input("Budget", placeholder="0")
        submitted = st.form_submit_button("Add Task")
    if submitted:
        tasks = board_tasks(state, event_id, central=central)
        updated = add_task(tasks, title, description, assignee, budget)
        if updated == tasks:
            st.warning("A task needs a title.")
            return
        _save_tasks(state, event_id, central, updated)
        session.rerun()


# ============================================================================
# Columns and cards
# ============================================================================


def render_board_columns(state: AppState, event_id: Optional[str], central: bool) -> None:
    tasks = board_tasks(state, event_id, central=central)
    columns = tasks_by_status(tasks)
    buffer: Optional[TaskEditBuffer] = st.session_state.get(EDIT_BUFFER_KEY)

    for column, status in zip(st.columns(len(STATUS_ORDER)), STATUS_ORDER):
        with column:
            st.subheader(f"{_status_label(status)} ({len(columns[status])})")
            if not columns[status]:
                st.caption("Nothing here yet")
            for task in columns[status]:
                with st.container(border=True):
                    if buffer is not None and buffer.task_id == task.id:
                        _render_edit_form(state, event_id, central, buffer)
                    else:
                        _render_task_card(state, event_id, central, task)


def _render_task_card(state: AppState, event_id: Optional[str], central: bool, task: EventTask) -> None:
    tasks = board_tasks(state, event_id, central=central)
    st.markdown(f"**{task.title}**")
    if task.description:
        st.caption(task.description)
    st.caption(f"👤 {task.assignee} · {format_currency(task.budget)}")

    linked = resolve_linked_event(task, state.events)
    if linked is not None:
        if st.button(f"🔗 Linked: {linked.name}", key=f"link_{task.id}"):
            session.follow_link(linked.id)
            session.rerun()

    if task.checklist:
        done, total = checklist_progress(task)
        st.progress(done / total, text=f"{done}/{total} done")
        for item in task.checklist:
            checked = st.checkbox(item.text, value=item.completed, key=f"chk_{task.id}_{item.id}")
            if checked != item.completed:
                _save_tasks(state, event_id, central, toggle_checklist_item(tasks, task.id, item.id))
                session.rerun()

    targets = [status for status in STATUS_ORDER if status != task.status]
    move_cols = st.columns(len(targets))
    for move_col, target in zip(move_cols, targets):
        if move_col.button(f"→ {_status_label(target)}", key=f"move_{task.id}_{target.value}"):
            _save_tasks(state, event_id, central, move_task(tasks, task.id, target))
            session.rerun()

    action_cols = st.columns(2)
    if action_cols[0].button("✏️ Edit", key=f"edit_{task.id}"):
        st.session_state[EDIT_BUFFER_KEY] = begin_edit(task)
        session.rerun()
    if action_cols[1].button("🗑️ Delete", key=f"delete_{task.id}"):
        st.session_state[CONFIRM_DELETE_KEY] = task.id

    if st.session_state.get(CONFIRM_DELETE_KEY) == task.id:
        st.warning("Are you sure you want to delete this task?")
        confirm_cols = st.columns(2)
        if confirm_cols[0].button("✅ Confirm", key=f"confirm_delete_{task.id}"):
            st.session_state.pop(CONFIRM_DELETE_KEY, None)
            _save_tasks(state, event_id, central, delete_task(tasks, task.id))
            session.rerun()
        if confirm_cols[1].button("❌ Cancel", key=f"cancel_delete_{task.id}"):
            st.session_state.pop(CONFIRM_DELETE_KEY, None)
            session.rerun()


def _render_edit_form(state: AppState, event_id: Optional[str], central: bool, buffer: TaskEditBuffer) -> None:
    """Edit widgets for one card; checklist changes stay in the buffer until Save."""
    key = buffer.task_id
    title = st.text_input("Title", value=buffer.title, key=f"edit_title_{key}")
    description = st.text_area("Description", value=buffer.description, key=f"edit_desc_{key}")
    cols = st.columns(2)
    assignee = cols[0].text_input("Assignee", value=buffer.assignee, key=f"edit_assignee_{key}")
    budget_text = cols[1].text_input("Budget", value=buffer.budget_text, key=f"edit_budget_{key}")

    candidates = linkable_events(state.events, exclude_id=event_id)
    options: Dict[str, Any] = {'': "No link"}
    options.update({event.id: f"{event.name} ({event.month.value})" for event in candidates})
    current_link = buffer.linked_event_id if buffer.linked_event_id in options else ''
    linked_event_id = st.selectbox(
        "Link to event",
        options=list(options),
        index=list(options).index(current_link),
        format_func=options.get,
        key=f"edit_link_{key}",
    )

    st.markdown("**Checklist**")
    for item in buffer.checklist:
        item_cols = st.columns([1, 6, 1])
        if item_cols[0].checkbox(" ", value=item.completed, key=f"edit_chk_{key}_{item.id}",
                                 label_visibility="collapsed") != item.completed:
            st.session_state[EDIT_BUFFER_KEY] = buffer.toggle_checklist_item(item.id)
            session.rerun()
        text = item_cols[1].text_input(" ", value=item.text, key=f"edit_item_{key}_{item.id}",
                                       label_visibility="collapsed")
        if text != item.text:
            buffer = buffer.edit_checklist_item_text(item.id, text)
            st.session_state[EDIT_BUFFER_KEY] = buffer
        if item_cols[2].button("✖", key=f"edit_remove_{key}_{item.id}"):
            st.session_state[EDIT_BUFFER_KEY] = buffer.remove_checklist_item(item.id)
            session.rerun()

    new_item_cols = st.columns([5, 1])
    new_item = new_item_cols[0].text_input("New checklist item", key=f"edit_new_item_{key}")
    if new_item_cols[1].button("Add", key=f"edit_add_item_{key}"):
        st.session_state[EDIT_BUFFER_KEY] = buffer.add_checklist_item(new_item)
        session.rerun()

    save_col, cancel_col = st.columns(2)
    if save_col.button("💾 Save", key=f"edit_save_{key}"):
        staged = TaskEditBuffer(
            task_id=buffer.task_id,
            title=title.strip() or buffer.title,
            description=description.strip(),
            assignee=assignee.strip() or buffer.assignee,
            budget_text=budget_text,
            checklist=buffer.checklist,
            linked_event_id=linked_event_id or None,
        )
        tasks = board_tasks(state, event_id, central=central)
        if find_task(tasks, buffer.task_id) is not None:
            _save_tasks(state, event_id, central, edit_task(tasks, buffer.task_id, staged))
        st.session_state.pop(EDIT_BUFFER_KEY, None)
        session.rerun()
    if cancel_col.button("Cancel", key=f"edit_cancel_{key}"):
        st.session_state.pop(EDIT_BUFFER_KEY, None)
        session.rerun()
