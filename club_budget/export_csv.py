"""CSV export of the budget plan.

The file is a single flat CSV made of titled sections separated by blank
rows: summary metrics, income sources, the combined expense ledger, and every
task with its checklist rendered inline. The csv module's minimal quoting
wraps fields containing commas, quotes or newlines and doubles inner quotes.
"""

from __future__ import annotations

import csv
import io
from decimal import Decimal
from pathlib import Path
from typing import Any, List, Optional, Sequence

from .calculations import (
    expense_ledger_dataframe,
    income_dataframe,
    summarize,
)
from .logging_config import get_logger
from .models import MONTH_ORDER, EventTask
from .pages.lib.common.file_operations import EXPORT_PREFIX, export_filename
from .state import AppState
from .task_board import checklist_markers

logger = get_logger(__name__)

TASK_HEADERS = ['Board', 'Event Month', 'Task', 'Description', 'Assignee', 'Budget', 'Status', 'Linked Event', 'Checklist']


def _serialize_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value != value:  # NaN from pandas
        return ""
    if isinstance(value, Decimal):
        return f"{value:.2f}"
    return str(value)


def _summary_rows(state: AppState) -> List[List[str]]:
    summary = summarize(state.events, state.income_sources, state.carry_over, state.badminton_config)
    variance = summary.variance
    metrics = [
        ('Carry Over', summary.carry_over),
        ('Yearly Income', summary.yearly_income),
        ('Total Budget', summary.total_budget),
        ('Planned Events', summary.total_planned_expense),
        ('Badminton (Selected Months)', summary.recurring_cost),
        ('Grand Total Planned', summary.grand_total_planned),
        ('Actual Spent', summary.total_actual_expense),
        ('Projected Balance', summary.projected_balance),
        ('Actual Balance', summary.actual_balance),
        ('Savings', variance.savings_total),
        ('Savings Events', variance.savings_count),
        ('Overspend', variance.overspend_total),
        ('Overspend Events', variance.overspend_count),
    ]
    return [['Metric', 'Value']] + [[name, _serialize_value(value)] for name, value in metrics]


def _frame_rows(frame) -> List[List[str]]:
    rows = [list(frame.columns)]
    for record in frame.itertuples(index=False, name=None):
        rows.append([_serialize_value(value) for value in record])
    return rows


def _task_row(board: str, month: str, task: EventTask, state: AppState) -> List[str]:
    linked = state.find_event(task.linked_event_id) if task.linked_event_id else None
    return [
        board,
        month,
        task.title,
        task.description,
        task.assignee,
        _serialize_value(task.budget),
        task.status.value,
        linked.name if linked is not None else '',
        checklist_markers(task),
    ]


def _task_rows(state: AppState) -> List[List[str]]:
    rows = [list(TASK_HEADERS)]
    ordered_events = sorted(state.events, key=lambda e: MONTH_ORDER.index(e.month))
    for event in ordered_events:
        for task in event.tasks:
            rows.append(_task_row(event.name, event.month.value, task, state))
    for task in state.central_tasks:
        rows.append(_task_row('Central Board', '', task, state))
    return rows


def _write_section(writer, title: str, rows: Sequence[Sequence[str]]) -> None:
    writer.writerow([title])
    writer.writerows(rows)
    writer.writerow([])


def build_csv(state: AppState) -> str:
    """Render the full plan as CSV text."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator='\n')
    _write_section(writer, 'Summary', _summary_rows(state))
    _write_section(writer, 'Income Sources', _frame_rows(income_dataframe(state.income_sources)))
    _write_section(
        writer,
        'Expense Ledger',
        _frame_rows(expense_ledger_dataframe(state.events, state.badminton_config)),
    )
    _write_section(writer, 'Task Details', _task_rows(state))
    return buffer.getvalue()


def write_csv(state: AppState, output_path: Path) -> Path:
    """Write the plan CSV to ``output_path`` and return the path written."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    # Use newline='' for csv on Windows
    with output_path.open("w", newline="", encoding="utf-8") as fh:
        fh.write(build_csv(state))
    logger.info("CSV exported", extra={'path': str(output_path)})
    return output_path


def csv_filename(prefix: Optional[str] = None) -> str:
    return export_filename('csv', prefix=prefix or EXPORT_PREFIX)
