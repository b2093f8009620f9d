from decimal import Decimal

import pytest

from club_budget.models import (
    MONTH_KEYS,
    EventExpense,
    EventTask,
    Month,
    TaskStatus,
    decimal_to_json,
    new_event,
    new_session,
    parse_amount,
    seed_income_sources,
    to_decimal,
)


def test_month_order_has_thirteen_buckets():
    assert MONTH_KEYS[0] == 'Jan'
    assert MONTH_KEYS[-1] == 'Jan (Next Year)'
    assert len(MONTH_KEYS) == 13


@pytest.mark.parametrize('text, expected', [
    ('12.50', Decimal('12.50')),
    (' 7 ', Decimal('7')),
    ('abc', Decimal('0')),
    ('-5', Decimal('0')),
    ('', Decimal('0')),
    (None, Decimal('0')),
    ('nan', Decimal('0')),
    (7.5, Decimal('7.5')),
])
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


@pytest.mark.parametrize('value', [True, None, float('nan'), float('inf'), 'Infinity', Decimal('NaN')])
def test_to_decimal_rejects_non_numbers(value):
    with pytest.raises(ValueError):
        to_decimal(value)


def test_parse_amount_rounds_to_cents():
    assert str(parse_amount('0.12345678901234567')) == '0.12'
    assert parse_amount('1e2') == Decimal('100')
    assert parse_amount('1e40') == Decimal('0')


def test_stored_money_rejects_negative_values():
    with pytest.raises(ValueError, match='amount'):
        EventExpense.from_dict({'id': 'e1', 'name': 'Trip', 'month': 'May', 'amount': -1})
    with pytest.raises(ValueError):
        EventTask.from_dict({'id': 't1', 'title': 'Venue', 'budget': float('inf')})


def test_decimal_to_json_prefers_integers():
    assert decimal_to_json(Decimal('1200.00')) == 1200
    assert isinstance(decimal_to_json(Decimal('1200.00')), int)
    assert decimal_to_json(Decimal('7.5')) == 7.5


def test_task_from_dict_fills_defaults():
    task = EventTask.from_dict({'id': 't1', 'title': 'Venue', 'linkedEventId': ''})
    assert task.assignee == 'Team'
    assert task.status == TaskStatus.TODO
    assert task.budget == Decimal('0')
    assert task.linked_event_id is None
    assert task.to_dict()['linkedEventId'] == ''


def test_event_from_dict_keeps_optional_fields():
    event = EventExpense.from_dict({
        'id': 'e1', 'name': 'Trip', 'month': 'May', 'amount': 300,
        'actualAmount': 0, 'type': 'Trip', 'isRecurring': True,
    })
    assert event.actual_amount == Decimal('0')
    assert event.has_actual
    assert event.is_recurring is True
    assert event.to_dict()['actualAmount'] == 0


def test_new_event_and_session_defaults():
    event = new_event('  Dinner ', Month.DEC)
    assert event.name == 'Dinner'
    assert event.amount == Decimal('0')
    assert event.actual_amount is None
    session = new_session()
    assert (session.rate, session.courts, session.hours) == (Decimal('7.5'), Decimal('2'), Decimal('2'))


def test_seed_income_sources():
    sources = seed_income_sources()
    assert [s.id for s in sources] == ['1', '2', '3', '4', '5', '6']
    assert all(sum(s.monthly_amounts.values()) == 0 for s in sources)
