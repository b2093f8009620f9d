import csv
import io
from dataclasses import replace

from club_budget.export_csv import TASK_HEADERS, build_csv, csv_filename, write_csv
from club_budget.models import Month
from club_budget.state import (
    add_event,
    add_session,
    board_tasks,
    initial_state,
    replace_board_tasks,
    toggle_month,
    update_event,
)
from club_budget.task_board import add_task, begin_edit, edit_task, toggle_checklist_item


def _sections(text):
    """Split the CSV back into {title: rows} using the blank separator rows."""
    sections = {}
    current = None
    for row in csv.reader(io.StringIO(text)):
        if not row:
            current = None
            continue
        if current is None:
            current = row[0]
            sections[current] = []
        else:
            sections[current].append(row)
    return sections


def _state_with_tasks():
    state = add_event(initial_state(), 'Dinner, "Gala" night', Month.DEC, '1500')
    state = add_event(state, 'Spring Trip', Month.MAR, '400')
    dinner_id = state.events[0].id
    state = update_event(state, dinner_id, notes='Line one\nline two')

    tasks = add_task(board_tasks(state, dinner_id), 'Venue', 'Ballroom, level 3', budget='900')
    buffer = begin_edit(tasks[0]).add_checklist_item('Deposit').add_checklist_item('Menu')
    tasks = edit_task(tasks, tasks[0].id, buffer)
    tasks = toggle_checklist_item(tasks, tasks[0].id, tasks[0].checklist[0].id)
    state = replace_board_tasks(state, dinner_id, tasks)

    central = add_task((), 'Banner')
    central = edit_task(central, central[0].id, replace(begin_edit(central[0]), linked_event_id=dinner_id))
    state = replace_board_tasks(state, None, central, central=True)
    return toggle_month(add_session(state, Month.MAR), Month.MAR)


def test_sections_are_present_in_order():
    text = build_csv(_state_with_tasks())
    assert list(_sections(text)) == ['Summary', 'Income Sources', 'Expense Ledger', 'Task Details']


def test_fields_with_commas_quotes_and_newlines_are_quoted():
    text = build_csv(_state_with_tasks())
    assert '"Dinner, ""Gala"" night"' in text
    assert '"Line one\nline two"' in text

    ledger = _sections(text)['Expense Ledger']
    names = [row[1] for row in ledger[1:]]
    assert 'Dinner, "Gala" night' in names


def test_expense_ledger_follows_month_order():
    ledger = _sections(build_csv(_state_with_tasks()))['Expense Ledger']
    assert ledger[0][:3] == ['Month', 'Item', 'Type']
    assert [row[0] for row in ledger[1:]] == ['Mar', 'Mar', 'Dec']
    assert ledger[1][2] == 'Recurring'
    assert ledger[1][3] == '30.00'


def test_task_rows_include_checklist_markers_and_central_tasks():
    tasks = _sections(build_csv(_state_with_tasks()))['Task Details']
    assert tasks[0] == TASK_HEADERS
    venue, banner = tasks[1], tasks[2]
    assert venue[0] == 'Dinner, "Gala" night'
    assert venue[-1] == '[x] Deposit; [ ] Menu'
    assert banner[0] == 'Central Board'
    assert banner[TASK_HEADERS.index('Linked Event')] == 'Dinner, "Gala" night'


def test_summary_reports_totals():
    summary = dict(_sections(build_csv(_state_with_tasks()))['Summary'][1:])
    assert summary['Planned Events'] == '1900.00'
    assert summary['Badminton (Selected Months)'] == '30.00'
    assert summary['Grand Total Planned'] == '1930.00'


def test_income_section_has_one_row_per_source():
    rows = _sections(build_csv(initial_state()))['Income Sources']
    assert rows[0][-1] == 'Annual Total'
    assert len(rows) == 1 + 6


def test_write_csv(tmp_path):
    target = write_csv(initial_state(), tmp_path / 'out' / csv_filename())
    assert target.exists()
    assert target.name.startswith('rec-club-budget-')
    assert target.read_text(encoding='utf-8').startswith('Summary')
