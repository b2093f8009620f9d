from decimal import Decimal
from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from club_budget import config, session
from club_budget.models import Month
from club_budget.state import add_event, initial_state
from club_budget.storage import BudgetStorage

PAGE_PATH = Path(__file__).resolve().parents[1] / 'club_budget' / 'pages' / '1_📅_Events.py'


@pytest.fixture
def events_page(tmp_path, monkeypatch):
    for name in ('DATA_DIR', 'STATE_DIR', 'EXPORTS_DIR', 'LOG_DIR', 'FONT_CACHE_DIR'):
        monkeypatch.setattr(config, name, tmp_path / name.lower())
    monkeypatch.delenv('OPENAI_API_KEY', raising=False)

    state = add_event(initial_state(), 'Dinner', Month.MAR, '100')
    storage = BudgetStorage(tmp_path / 'state')
    app = AppTest.from_file(str(PAGE_PATH), default_timeout=10)
    app.session_state[session.STORAGE_KEY] = storage
    app.session_state[session.STATE_KEY] = state
    app.run()
    assert not app.exception
    return app, state.events[0].id, storage


def _event(app):
    return app.session_state[session.STATE_KEY].events[0]


def test_unparseable_actual_settles_as_zero(events_page):
    app, event_id, storage = events_page
    app.text_input(key=f'evt_actual_{event_id}').input('abc').run()

    assert not app.exception
    assert _event(app).actual_amount == Decimal('0')
    assert storage.load().events[0].actual_amount == Decimal('0')


def test_exponent_actual_is_stored_once(events_page):
    app, event_id, _ = events_page
    app.text_input(key=f'evt_actual_{event_id}').input('1e2').run()

    assert not app.exception
    assert _event(app).actual_amount == Decimal('100')


def test_trailing_whitespace_in_name_is_a_no_op(events_page):
    app, event_id, storage = events_page
    app.text_input(key=f'evt_name_{event_id}').input('Dinner ').run()

    assert not app.exception
    assert _event(app).name == 'Dinner'
    assert not (storage.state_dir / 'events.json').exists()


def test_actual_amount_edit_is_saved(events_page):
    app, event_id, storage = events_page
    app.text_input(key=f'evt_actual_{event_id}').input('50').run()

    assert not app.exception
    assert _event(app).actual_amount == Decimal('50')
    assert storage.load().events[0].actual_amount == Decimal('50')
