import json
from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from club_budget.models import Month, TaskStatus
from club_budget.state import (
    add_event,
    add_session,
    board_tasks,
    initial_state,
    replace_board_tasks,
    set_carry_over,
    toggle_month,
    update_event,
    update_income_amount,
)
from club_budget.storage import (
    BudgetStorage,
    SnapshotValidationError,
    export_snapshot,
    import_snapshot,
    is_legacy_badminton_config,
    snapshot_dict,
    snapshot_filename,
)
from club_budget.task_board import add_task, begin_edit, edit_task, set_status


def _populated_state():
    state = initial_state()
    state = update_income_amount(state, state.income_sources[0].id, Month.JAN, '100')
    state = update_income_amount(state, state.income_sources[0].id, Month.JAN_NEXT, '12.5')
    state = set_carry_over(state, '50')
    state = add_event(state, 'Year End Dinner', Month.DEC, '1200')
    state = add_event(state, 'Hiking, "Day" Trip', Month.MAY, '300')
    dinner_id = state.events[0].id
    trip_id = state.events[1].id
    state = update_event(state, trip_id, actual_amount='275.5', notes='Paid\nin cash', is_recurring=False)

    tasks = add_task(board_tasks(state, dinner_id), 'Venue', 'Hotel ballroom', 'Aina', '800')
    buffer = begin_edit(tasks[0]).add_checklist_item('Deposit').add_checklist_item('Menu')
    tasks = edit_task(tasks, tasks[0].id, buffer)
    tasks = set_status(tasks, tasks[0].id, TaskStatus.IN_PROGRESS)
    state = replace_board_tasks(state, dinner_id, tasks)

    central = add_task((), 'Club banner', budget='60')
    central = edit_task(central, central[0].id, replace(begin_edit(central[0]), linked_event_id=trip_id))
    state = replace_board_tasks(state, None, central, central=True)

    state = add_session(add_session(state, Month.MAR), Month.MAR)
    return toggle_month(state, Month.MAR)


def test_snapshot_round_trip_preserves_state():
    state = _populated_state()
    restored = import_snapshot(export_snapshot(state))
    assert restored == state


def test_snapshot_round_trip_ignores_timestamp():
    state = _populated_state()
    first = snapshot_dict(state, now=datetime(2025, 1, 1, tzinfo=timezone.utc))
    second = snapshot_dict(import_snapshot(json.dumps(first)), now=datetime(2025, 6, 1, tzinfo=timezone.utc))
    first.pop('lastUpdated')
    second.pop('lastUpdated')
    assert first == second


def test_snapshot_uses_camel_case_and_omits_missing_actual():
    data = json.loads(export_snapshot(_populated_state()))
    assert set(data) >= {'events', 'incomeSources', 'carryOver', 'badmintonConfig', 'lastUpdated'}
    dinner = data['events'][0]
    assert 'actualAmount' not in dinner
    assert dinner['tasks'][0]['status'] == 'InProgress'
    assert data['incomeSources'][0]['monthlyAmounts']['Jan (Next Year)'] == 12.5


def test_snapshot_filename():
    assert snapshot_filename(date(2025, 3, 9)) == 'rec-club-budget-2025-03-09.json'


def test_import_missing_carry_over_is_rejected():
    current = _populated_state()
    stamp = datetime(2025, 1, 1, tzinfo=timezone.utc)
    before = export_snapshot(current, now=stamp)
    data = json.loads(before)
    del data['carryOver']

    with pytest.raises(SnapshotValidationError, match='carryOver'):
        import_snapshot(json.dumps(data))
    assert export_snapshot(current, now=stamp) == before


@pytest.mark.parametrize('payload', ['{not json', '[]', '{"events": []}'])
def test_import_rejects_malformed_payloads(payload):
    with pytest.raises(SnapshotValidationError):
        import_snapshot(payload)


def test_import_rejects_non_numeric_carry_over():
    data = json.loads(export_snapshot(initial_state()))
    data['carryOver'] = '100'
    with pytest.raises(SnapshotValidationError, match='carryOver'):
        import_snapshot(json.dumps(data))


def test_import_rejects_malformed_records():
    data = json.loads(export_snapshot(initial_state()))
    data['events'] = [{'name': 'No id'}]
    with pytest.raises(SnapshotValidationError, match='Malformed record'):
        import_snapshot(json.dumps(data))


def test_import_without_central_tasks_gives_empty_board():
    data = json.loads(export_snapshot(_populated_state()))
    del data['centralTasks']
    assert import_snapshot(json.dumps(data)).central_tasks == ()


def test_legacy_badminton_config_is_reset_on_import():
    data = json.loads(export_snapshot(initial_state()))
    data['badmintonConfig'] = {'months': {'Jan': {'isSelected': True, 'rate': 7.5, 'courts': 2}}}
    assert is_legacy_badminton_config(data['badmintonConfig'])

    state = import_snapshot(json.dumps(data))
    assert all(not s.is_selected and s.sessions == () for s in state.badminton_config.months.values())


def test_storage_save_and_load(tmp_path):
    storage = BudgetStorage(tmp_path)
    state = _populated_state()
    storage.save(state)

    assert (tmp_path / 'events.json').exists()
    assert BudgetStorage(tmp_path).load() == state


def test_storage_defaults_when_empty(tmp_path):
    state = BudgetStorage(tmp_path).load()
    assert state == initial_state()


def test_corrupt_collection_falls_back_to_default(tmp_path):
    storage = BudgetStorage(tmp_path)
    storage.save(_populated_state())
    (tmp_path / 'events.json').write_text('{broken', encoding='utf-8')

    loaded = storage.load()
    assert loaded.events == ()
    assert loaded.carry_over == Decimal('50')


def test_legacy_badminton_file_is_reset(tmp_path):
    (tmp_path / 'badminton.json').write_text(
        json.dumps({'months': {'Jan': {'isSelected': True}}}), encoding='utf-8'
    )
    loaded = BudgetStorage(tmp_path).load()
    assert not loaded.badminton_config.settings_for(Month.JAN).is_selected


def test_clear_removes_files(tmp_path):
    storage = BudgetStorage(tmp_path)
    storage.save(_populated_state())
    storage.clear()
    assert list(tmp_path.glob('*.json')) == []
    assert storage.load() == initial_state()


@pytest.mark.parametrize('literal', ['NaN', 'Infinity', '-Infinity'])
def test_import_rejects_non_finite_carry_over(literal):
    text = export_snapshot(initial_state()).replace('"carryOver": 0', f'"carryOver": {literal}')
    with pytest.raises(SnapshotValidationError, match='carryOver|Malformed record'):
        import_snapshot(text)


def test_import_rejects_non_finite_actual_amount():
    data = json.loads(export_snapshot(add_event(initial_state(), 'Dinner', Month.DEC, '100')))
    data['events'][0]['actualAmount'] = float('nan')
    with pytest.raises(SnapshotValidationError, match='Malformed record'):
        import_snapshot(json.dumps(data))


@pytest.mark.parametrize('path, value', [
    (('events', 0, 'amount'), -500),
    (('events', 0, 'actualAmount'), -20),
    (('events', 0, 'tasks', 0, 'budget'), -1),
    (('incomeSources', 0, 'monthlyAmounts', 'Jan'), -100),
    (('badmintonConfig', 'months', 'Mar', 'sessions', 0, 'rate'), -7.5),
    (('carryOver',), -50),
])
def test_import_rejects_negative_money(path, value):
    data = json.loads(export_snapshot(_populated_state()))
    target = data
    for key in path[:-1]:
        target = target[key]
    target[path[-1]] = value
    with pytest.raises(SnapshotValidationError):
        import_snapshot(json.dumps(data))


def test_rejected_import_keeps_app_usable():
    good = _populated_state()
    data = json.loads(export_snapshot(good))
    data['carryOver'] = float('inf')
    with pytest.raises(SnapshotValidationError):
        import_snapshot(json.dumps(data))
    assert import_snapshot(export_snapshot(good)) == good


def test_non_finite_file_falls_back_to_default(tmp_path):
    (tmp_path / 'carry_over.json').write_text('NaN', encoding='utf-8')
    assert BudgetStorage(tmp_path).load().carry_over == Decimal('0')


def test_many_digit_amount_survives_round_trip(tmp_path):
    state = update_income_amount(initial_state(), '1', Month.FEB, '0.12345678901234567')
    state = set_carry_over(state, '98765432109.87')

    restored = import_snapshot(export_snapshot(state))
    assert restored == state
    assert restored.income_sources[0].monthly_amounts[Month.FEB] == Decimal('0.12')
    assert restored.carry_over == Decimal('98765432109.87')

    storage = BudgetStorage(tmp_path)
    storage.save(state)
    assert storage.load() == state


def test_stored_decimals_are_read_without_float_drift():
    text = export_snapshot(initial_state()).replace('"carryOver": 0', '"carryOver": 12345678901234567.89')
    assert import_snapshot(text).carry_over == Decimal('12345678901234567.89')
