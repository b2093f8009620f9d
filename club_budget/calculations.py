"""Budget aggregation and summary tables.

All functions here are pure reductions over the planner collections. They
never raise on well-typed input (empty collections included) and never
consult task links. Amounts stay Decimal; rounding happens only when values
are formatted for display.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from .models import (
    MONTH_ORDER,
    ZERO,
    BadmintonConfig,
    EventExpense,
    IncomeSource,
    Month,
    MonthSettings,
    Session,
)


@dataclass(frozen=True)
class VarianceSummary:
    """Savings vs. overspend across events that have a recorded actual."""

    savings_total: Decimal = ZERO
    savings_count: int = 0
    overspend_total: Decimal = ZERO
    overspend_count: int = 0
    total_planned_for_completed: Decimal = ZERO
    total_actual_for_completed: Decimal = ZERO

    @property
    def net_variance(self) -> Decimal:
        return self.savings_total - self.overspend_total


@dataclass(frozen=True)
class BudgetSummary:
    carry_over: Decimal
    yearly_income: Decimal
    total_budget: Decimal
    recurring_cost: Decimal
    total_planned_expense: Decimal
    grand_total_planned: Decimal
    total_actual_expense: Decimal
    projected_balance: Decimal
    actual_balance: Decimal
    variance: VarianceSummary


# ---------------------------------------------------------------------------
# Income
# ---------------------------------------------------------------------------


def source_total(source: IncomeSource) -> Decimal:
    return sum(source.monthly_amounts.values(), ZERO)


def yearly_income(sources: Iterable[IncomeSource]) -> Decimal:
    """Sum every month amount of every income source."""
    return sum((source_total(source) for source in sources), ZERO)


def total_budget(carry_over: Decimal, income: Decimal) -> Decimal:
    return carry_over + income


def income_by_month(sources: Iterable[IncomeSource]) -> Dict[Month, Decimal]:
    totals = {month: ZERO for month in MONTH_ORDER}
    for source in sources:
        for month in MONTH_ORDER:
            totals[month] += source.monthly_amounts[month]
    return totals


# ---------------------------------------------------------------------------
# Recurring activity (badminton)
# ---------------------------------------------------------------------------


def session_cost(session: Session) -> Decimal:
    return session.rate * session.courts * session.hours


def month_session_cost(settings: MonthSettings) -> Decimal:
    """Cost of a month's sessions whether or not the month is selected."""
    return sum((session_cost(s) for s in settings.sessions), ZERO)


def recurring_cost_by_month(config: BadmintonConfig) -> Dict[Month, Decimal]:
    """Per-month cost; unselected months are 0 even when sessions are stored."""
    return {
        month: month_session_cost(config.months[month]) if config.months[month].is_selected else ZERO
        for month in MONTH_ORDER
    }


def recurring_activity_cost(config: BadmintonConfig) -> Decimal:
    return sum(recurring_cost_by_month(config).values(), ZERO)


def active_month_count(config: BadmintonConfig) -> int:
    return sum(1 for settings in config.months.values() if settings.is_selected)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


def total_planned_expense(events: Iterable[EventExpense]) -> Decimal:
    return sum((event.amount for event in events), ZERO)


def total_actual_expense(events: Iterable[EventExpense]) -> Decimal:
    return sum((event.actual_amount or ZERO for event in events), ZERO)


def grand_total_planned(events: Iterable[EventExpense], config: BadmintonConfig) -> Decimal:
    return total_planned_expense(events) + recurring_activity_cost(config)


def projected_balance(budget: Decimal, planned: Decimal) -> Decimal:
    return budget - planned


def actual_balance(budget: Decimal, actual: Decimal) -> Decimal:
    return budget - actual


def event_variance(event: EventExpense) -> Optional[Decimal]:
    """Planned minus actual; positive means savings.

    Events without an actual, or with an actual of 0, have no variance: a zero
    actual means "nothing recorded yet", not "fully saved".
    """
    if event.actual_amount is None or event.actual_amount <= 0:
        return None
    return event.amount - event.actual_amount


def per_event_variance(events: Iterable[EventExpense]) -> VarianceSummary:
    savings_total = overspend_total = ZERO
    savings_count = overspend_count = 0
    planned_completed = actual_completed = ZERO

    for event in events:
        variance = event_variance(event)
        if variance is None:
            continue
        planned_completed += event.amount
        actual_completed += event.actual_amount
        if variance > 0:
            savings_total += variance
            savings_count += 1
        elif variance < 0:
            overspend_total += -variance
            overspend_count += 1

    return VarianceSummary(
        savings_total=savings_total,
        savings_count=savings_count,
        overspend_total=overspend_total,
        overspend_count=overspend_count,
        total_planned_for_completed=planned_completed,
        total_actual_for_completed=actual_completed,
    )


def summarize(
    events: Sequence[EventExpense],
    sources: Sequence[IncomeSource],
    carry_over: Decimal,
    config: BadmintonConfig,
) -> BudgetSummary:
    """Compute every headline figure shown on the dashboard and in exports."""
    income = yearly_income(sources)
    budget = total_budget(carry_over, income)
    recurring = recurring_activity_cost(config)
    planned = total_planned_expense(events)
    grand_planned = planned + recurring
    actual = total_actual_expense(events)
    return BudgetSummary(
        carry_over=carry_over,
        yearly_income=income,
        total_budget=budget,
        recurring_cost=recurring,
        total_planned_expense=planned,
        grand_total_planned=grand_planned,
        total_actual_expense=actual,
        projected_balance=projected_balance(budget, grand_planned),
        actual_balance=actual_balance(budget, actual),
        variance=per_event_variance(events),
    )


# ---------------------------------------------------------------------------
# Tables for display and export
# ---------------------------------------------------------------------------


def events_by_month(events: Iterable[EventExpense]) -> Dict[Month, List[EventExpense]]:
    """Group events by month, keeping insertion order inside a month."""
    grouped: Dict[Month, List[EventExpense]] = {month: [] for month in MONTH_ORDER}
    for event in events:
        grouped[event.month].append(event)
    return grouped


def income_dataframe(sources: Sequence[IncomeSource]) -> pd.DataFrame:
    """One row per source, one column per month plus an annual total.

    Values are Decimal (object dtype) so exports keep exact amounts.
    """
    columns = ['Source', 'Category', 'Sub Category'] + [m.value for m in MONTH_ORDER] + ['Annual Total']
    rows = []
    for source in sources:
        row = {
            'Source': source.name,
            'Category': source.category.value,
            'Sub Category': source.sub_category.value,
        }
        row.update({month.value: source.monthly_amounts[month] for month in MONTH_ORDER})
        row['Annual Total'] = source_total(source)
        rows.append(row)
    return pd.DataFrame(rows, columns=columns)


def expense_ledger_dataframe(events: Sequence[EventExpense], config: BadmintonConfig) -> pd.DataFrame:
    """Combined ledger of badminton lines and events, ordered by month.

    Within a month the badminton line (when that month is selected) comes first,
    followed by that month's events in their stored order. Badminton lines have
    no actual or variance.
    """
    columns = ['Month', 'Item', 'Type', 'Planned', 'Actual', 'Variance', 'Notes']
    grouped = events_by_month(events)
    rows = []
    for month in MONTH_ORDER:
        settings = config.months[month]
        if settings.is_selected:
            rows.append({
                'Month': month.value,
                'Item': f"Badminton ({len(settings.sessions)} sessions)",
                'Type': 'Recurring',
                'Planned': month_session_cost(settings),
                'Actual': None,
                'Variance': None,
                'Notes': '',
            })
        for event in grouped[month]:
            rows.append({
                'Month': month.value,
                'Item': event.name,
                'Type': event.type.value,
                'Planned': event.amount,
                'Actual': event.actual_amount,
                'Variance': event_variance(event),
                'Notes': event.notes or '',
            })
    return pd.DataFrame(rows, columns=columns)


def monthly_overview_dataframe(
    events: Sequence[EventExpense],
    sources: Sequence[IncomeSource],
    config: BadmintonConfig,
) -> pd.DataFrame:
    """Per-month income vs. planned and actual spend, as floats for charting."""
    income = income_by_month(sources)
    recurring = recurring_cost_by_month(config)
    grouped = events_by_month(events)
    rows = []
    for month in MONTH_ORDER:
        month_events = grouped[month]
        planned_events = total_planned_expense(month_events)
        rows.append({
            'Month': month.value,
            'Income': float(income[month]),
            'Planned Events': float(planned_events),
            'Recurring': float(recurring[month]),
            'Planned Total': float(planned_events + recurring[month]),
            'Actual': float(total_actual_expense(month_events)),
        })
    overview = pd.DataFrame(rows)
    overview['Cumulative Net'] = (overview['Income'] - overview['Planned Total']).cumsum()
    return overview
