import types
from decimal import Decimal

from club_budget import session
from club_budget.models import Month
from club_budget.state import add_event, initial_state, set_carry_over
from club_budget.storage import BudgetStorage


class RecordingStorage:
    def __init__(self, state=None, error=None):
        self.state = state or initial_state()
        self.error = error
        self.saved = []
        self.cleared = False

    def load(self):
        return self.state

    def save(self, state):
        if self.error is not None:
            raise self.error
        self.saved.append(state)

    def clear(self):
        self.cleared = True


def _use_session(monkeypatch, storage):
    dummy_state = {session.STORAGE_KEY: storage}
    monkeypatch.setattr(session, 'st', types.SimpleNamespace(session_state=dummy_state))
    return dummy_state


def test_state_is_loaded_once(monkeypatch):
    storage = RecordingStorage(set_carry_over(initial_state(), 10))
    dummy_state = _use_session(monkeypatch, storage)

    first = session.get_state()
    storage.state = initial_state()
    assert session.get_state() is first
    assert dummy_state[session.STATE_KEY].carry_over == Decimal('10')


def test_commit_updates_memory_and_saves(monkeypatch):
    storage = RecordingStorage()
    dummy_state = _use_session(monkeypatch, storage)

    new_state = add_event(session.get_state(), 'Dinner', Month.DEC, '100')
    session.commit(new_state)
    assert dummy_state[session.STATE_KEY] == new_state
    assert storage.saved == [new_state]

    session.commit(new_state)
    assert len(storage.saved) == 1


def test_failed_save_keeps_change_in_memory(monkeypatch):
    storage = RecordingStorage(error=OSError('disk full'))
    dummy_state = _use_session(monkeypatch, storage)

    new_state = set_carry_over(session.get_state(), 5)
    session.commit(new_state)
    assert dummy_state[session.STATE_KEY] == new_state
    assert 'disk full' in session.last_save_error()


def test_reset_all_clears_storage(monkeypatch):
    storage = RecordingStorage(add_event(initial_state(), 'Trip', Month.MAY, '50'))
    _use_session(monkeypatch, storage)

    reset = session.reset_all()
    assert storage.cleared
    assert reset.events == ()
    assert storage.saved[-1] == reset


def test_board_navigation_follow_and_return(monkeypatch):
    dummy_state = _use_session(monkeypatch, RecordingStorage())

    session.open_board(None, central=True)
    assert session.current_board() == (None, True, None)

    session.follow_link('evt-1')
    assert session.current_board() == ('evt-1', False, 'central')

    session.return_to_origin()
    assert session.current_board() == (None, True, None)

    session.open_board('evt-2')
    session.follow_link('evt-3')
    session.return_to_origin()
    assert session.current_board() == ('evt-2', False, None)

    session.close_board()
    assert session.SELECTED_EVENT_KEY not in dummy_state


def test_commit_persists_to_disk(monkeypatch, tmp_path):
    storage = BudgetStorage(tmp_path)
    _use_session(monkeypatch, storage)

    new_state = add_event(session.get_state(), 'Dinner', Month.DEC, '100')
    session.commit(new_state)
    assert storage.load() == new_state


def test_rerun_prefers_streamlit_rerun(monkeypatch):
    called = {}
    monkeypatch.setattr(session, 'st', types.SimpleNamespace(rerun=lambda: called.setdefault('method', 'rerun')))
    session.rerun()
    assert called['method'] == 'rerun'
