import requests

from club_budget import reports
from club_budget.models import Month
from club_budget.state import add_event, board_tasks, initial_state, replace_board_tasks
from club_budget.task_board import add_task


def _state_with_event():
    return add_event(initial_state(), 'Year End Dinner', Month.DEC, '1200')


def test_pdf_without_tasks_has_three_pages():
    result = reports.build_pdf(_state_with_event(), font_url='')
    assert result.content.startswith(b'%PDF')
    assert result.page_count == 3
    assert result.warnings == ()


def test_pdf_adds_task_page_when_tasks_exist():
    state = _state_with_event()
    event_id = state.events[0].id
    state = replace_board_tasks(state, event_id, add_task(board_tasks(state, event_id), 'Venue', budget='500'))
    assert reports.build_pdf(state, font_url='').page_count == 4


def test_central_task_alone_adds_task_page():
    state = replace_board_tasks(initial_state(), None, add_task((), 'Banner'), central=True)
    assert reports.build_pdf(state, font_url='').page_count == 4


def test_long_tables_continue_on_extra_pages():
    state = initial_state()
    for index in range(reports.ROWS_PER_PAGE + 1):
        state = add_event(state, f'Event {index}', Month.JAN, '10')
    assert reports.build_pdf(state, font_url='').page_count == 4


def test_font_download_failure_falls_back_with_warning(monkeypatch, tmp_path):
    def failing_get(*args, **kwargs):
        raise requests.ConnectionError('offline')

    monkeypatch.setattr(reports.requests, 'get', failing_get)
    monkeypatch.setattr(reports.config, 'FONT_CACHE_DIR', tmp_path)

    family, warning = reports.fetch_report_font('https://example.invalid/Club-Font.ttf')
    assert family is None
    assert 'default font' in warning

    result = reports.build_pdf(initial_state(), font_url='https://example.invalid/Club-Font.ttf')
    assert result.content.startswith(b'%PDF')
    assert len(result.warnings) == 1


def test_empty_font_url_skips_download(monkeypatch):
    def unexpected_get(*args, **kwargs):
        raise AssertionError('font should not be fetched')

    monkeypatch.setattr(reports.requests, 'get', unexpected_get)
    assert reports.fetch_report_font('') == (None, None)


def test_write_pdf(tmp_path):
    target = tmp_path / 'reports' / 'plan.pdf'
    result = reports.write_pdf(initial_state(), target, font_url='')
    assert target.read_bytes() == result.content
