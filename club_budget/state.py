"""Application state and the transitions that produce new states.

``AppState`` is immutable. Every function below takes the current state and
returns the next one; unknown ids return the state unchanged so callers can
compare states with ``==`` to detect whether anything happened.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Optional, Sequence, Tuple, Union

from .models import (
    BUDGET_PENDING_NOTE,
    DEFAULT_EVENT_TYPE,
    ZERO,
    BadmintonConfig,
    EventExpense,
    EventTask,
    EventType,
    IncomeCategory,
    IncomeSource,
    IncomeSubCategory,
    Month,
    MonthSettings,
    MONTH_ORDER,
    Number,
    empty_badminton_config,
    initial_carry_over,
    new_event,
    new_income_source,
    new_session,
    parse_amount,
    seed_income_sources,
    to_decimal,
)

EDITABLE_EVENT_FIELDS = {'name', 'month', 'amount', 'actual_amount', 'type', 'notes', 'is_recurring', 'tasks'}
SESSION_FIELDS = ('rate', 'courts', 'hours')


@dataclass(frozen=True)
class AppState:
    events: Tuple[EventExpense, ...] = ()
    income_sources: Tuple[IncomeSource, ...] = ()
    carry_over: Decimal = ZERO
    badminton_config: BadmintonConfig = field(default_factory=empty_badminton_config)
    central_tasks: Tuple[EventTask, ...] = ()

    def find_event(self, event_id: Optional[str]) -> Optional[EventExpense]:
        return next((event for event in self.events if event.id == event_id), None)

    def find_source(self, source_id: str) -> Optional[IncomeSource]:
        return next((source for source in self.income_sources if source.id == source_id), None)

    def all_tasks(self) -> Tuple[EventTask, ...]:
        tasks = tuple(task for event in self.events for task in event.tasks)
        return tasks + self.central_tasks


def initial_state() -> AppState:
    """State of a fresh install: seeded sponsors, nothing planned."""
    return AppState(
        events=(),
        income_sources=seed_income_sources(),
        carry_over=initial_carry_over(),
        badminton_config=empty_badminton_config(),
        central_tasks=(),
    )


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


def add_event(
    state: AppState,
    name: str,
    month: Union[Month, str],
    amount: Optional[Number] = None,
    event_type: Union[EventType, str] = DEFAULT_EVENT_TYPE,
) -> AppState:
    if not name or not name.strip():
        return state
    event = new_event(name, month, amount, event_type)
    return replace(state, events=state.events + (event,))


def add_parsed_event(state: AppState, candidate: Any) -> AppState:
    """Add an event from a budget-text parser candidate."""
    return add_event(state, candidate.name, candidate.month, candidate.amount, candidate.type)


def update_event(state: AppState, event_id: str, **changes: Any) -> AppState:
    """Apply field changes to one event.

    Setting a positive planned amount on an event noted as "Budget Pending"
    clears that note.
    """
    unknown = set(changes) - EDITABLE_EVENT_FIELDS
    if unknown:
        raise ValueError(f"Unknown event fields: {sorted(unknown)}")
    event = state.find_event(event_id)
    if event is None:
        return state
    if 'amount' in changes:
        changes['amount'] = parse_amount(changes['amount'])
    if 'actual_amount' in changes and changes['actual_amount'] is not None:
        changes['actual_amount'] = parse_amount(changes['actual_amount'])
    if 'month' in changes:
        changes['month'] = Month(changes['month'])
    if 'type' in changes:
        changes['type'] = EventType(changes['type'])
    updated = replace(event, **changes)
    if changes.get('amount', ZERO) > 0 and event.notes == BUDGET_PENDING_NOTE:
        updated = replace(updated, notes=None)
    return replace(state, events=tuple(updated if e.id == event_id else e for e in state.events))


def delete_event(state: AppState, event_id: str) -> AppState:
    """Remove an event. Central tasks linking to it keep their now-dangling id."""
    return replace(state, events=tuple(e for e in state.events if e.id != event_id))


# ---------------------------------------------------------------------------
# Task boards
# ---------------------------------------------------------------------------


def board_tasks(state: AppState, event_id: Optional[str], central: bool = False) -> Tuple[EventTask, ...]:
    if central:
        return state.central_tasks
    event = state.find_event(event_id)
    return event.tasks if event is not None else ()


def replace_board_tasks(
    state: AppState,
    event_id: Optional[str],
    tasks: Sequence[EventTask],
    central: bool = False,
) -> AppState:
    if central:
        return replace(state, central_tasks=tuple(tasks))
    if state.find_event(event_id) is None:
        return state
    return update_event(state, event_id, tasks=tuple(tasks))


# ---------------------------------------------------------------------------
# Income
# ---------------------------------------------------------------------------


def add_income_source(state: AppState) -> AppState:
    return replace(state, income_sources=state.income_sources + (new_income_source(),))


def delete_income_source(state: AppState, source_id: str) -> AppState:
    return replace(state, income_sources=tuple(s for s in state.income_sources if s.id != source_id))


def update_income_details(
    state: AppState,
    source_id: str,
    name: Optional[str] = None,
    category: Union[IncomeCategory, str, None] = None,
    sub_category: Union[IncomeSubCategory, str, None] = None,
) -> AppState:
    source = state.find_source(source_id)
    if source is None:
        return state
    updated = replace(
        source,
        name=name if name is not None else source.name,
        category=IncomeCategory(category) if category is not None else source.category,
        sub_category=IncomeSubCategory(sub_category) if sub_category is not None else source.sub_category,
    )
    return replace(
        state,
        income_sources=tuple(updated if s.id == source_id else s for s in state.income_sources),
    )


def update_income_amount(state: AppState, source_id: str, month: Union[Month, str], amount: Number) -> AppState:
    source = state.find_source(source_id)
    if source is None:
        return state
    amounts = dict(source.monthly_amounts)
    amounts[Month(month)] = parse_amount(amount)
    updated = replace(source, monthly_amounts=amounts)
    return replace(
        state,
        income_sources=tuple(updated if s.id == source_id else s for s in state.income_sources),
    )


def set_carry_over(state: AppState, amount: Number) -> AppState:
    return replace(state, carry_over=parse_amount(amount))


# ---------------------------------------------------------------------------
# Badminton
# ---------------------------------------------------------------------------


def toggle_month(state: AppState, month: Union[Month, str]) -> AppState:
    """Flip selection for a month; its sessions are kept either way."""
    settings = state.badminton_config.settings_for(month)
    config = state.badminton_config.with_month(month, replace(settings, is_selected=not settings.is_selected))
    return replace(state, badminton_config=config)


def add_session(state: AppState, month: Union[Month, str]) -> AppState:
    settings = state.badminton_config.settings_for(month)
    updated = replace(settings, sessions=settings.sessions + (new_session(),))
    return replace(state, badminton_config=state.badminton_config.with_month(month, updated))


def remove_session(state: AppState, month: Union[Month, str], session_id: str) -> AppState:
    settings = state.badminton_config.settings_for(month)
    updated = replace(settings, sessions=tuple(s for s in settings.sessions if s.id != session_id))
    return replace(state, badminton_config=state.badminton_config.with_month(month, updated))


def update_session(
    state: AppState,
    month: Union[Month, str],
    session_id: str,
    field_name: str,
    value: Number,
) -> AppState:
    if field_name not in SESSION_FIELDS:
        raise ValueError(f"Unknown session field: {field_name}")
    settings = state.badminton_config.settings_for(month)
    if not any(s.id == session_id for s in settings.sessions):
        return state
    new_value = parse_amount(value)
    updated = replace(
        settings,
        sessions=tuple(
            replace(s, **{field_name: new_value}) if s.id == session_id else s
            for s in settings.sessions
        ),
    )
    return replace(state, badminton_config=state.badminton_config.with_month(month, updated))


def bulk_apply_sessions(state: AppState, rate: Number, courts: Number, hours: Number, count: int) -> AppState:
    """Overwrite every month with ``count`` identical sessions and select it."""
    months = {
        month: MonthSettings(
            is_selected=True,
            sessions=tuple(new_session(rate, courts, hours) for _ in range(max(0, int(count)))),
        )
        for month in MONTH_ORDER
    }
    return replace(state, badminton_config=BadmintonConfig(months=months))


# ---------------------------------------------------------------------------
# Reset
# ---------------------------------------------------------------------------


def reset_state(state: AppState) -> AppState:
    """Clear events and boards, zero income (rows kept), fresh badminton config."""
    zeroed = tuple(replace(source, monthly_amounts={}) for source in state.income_sources)
    return AppState(
        events=(),
        income_sources=zeroed,
        carry_over=to_decimal(0),
        badminton_config=empty_badminton_config(),
        central_tasks=(),
    )


__all__ = [
    'AppState',
    'initial_state',
    'add_event',
    'add_parsed_event',
    'update_event',
    'delete_event',
    'board_tasks',
    'replace_board_tasks',
    'add_income_source',
    'delete_income_source',
    'update_income_details',
    'update_income_amount',
    'set_carry_over',
    'toggle_month',
    'add_session',
    'remove_session',
    'update_session',
    'bulk_apply_sessions',
    'reset_state',
]
