from decimal import Decimal
import types

from club_budget import budget_parser
from club_budget.budget_parser import EventCandidateSchema, parse_budget_input
from club_budget.models import EventType, Month
from club_budget.pages.config import get_config_value


class FakeModel:
    """Stands in for a LangChain chat model with structured output."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.messages = None

    def with_structured_output(self, schema):
        assert schema is EventCandidateSchema
        return self

    def invoke(self, messages):
        self.messages = messages
        if self.error is not None:
            raise self.error
        return self.result


def test_parses_structured_response():
    model = FakeModel(EventCandidateSchema(name='Team Dinner', amount=800, month='Mar', type='Dinner'))
    candidate = parse_budget_input('Team dinner in March, about 800', model=model)

    assert candidate.name == 'Team Dinner'
    assert candidate.amount == Decimal('800')
    assert candidate.month == Month.MAR
    assert candidate.type == EventType.DINNER
    assert 'Team dinner in March' in model.messages[-1].content


def test_unknown_month_and_type_fall_back():
    model = FakeModel({'name': 'Bowling', 'amount': -20, 'month': 'TBD', 'type': 'Party'})
    candidate = parse_budget_input('bowling night', model=model)

    assert candidate.month == Month.JAN
    assert candidate.type == EventType.EVENT
    assert candidate.amount == Decimal('0')


def test_model_error_returns_none():
    model = FakeModel(error=RuntimeError('rate limited'))
    assert parse_budget_input('anything', model=model) is None


def test_empty_response_or_name_returns_none():
    assert parse_budget_input('anything', model=FakeModel(None)) is None
    assert parse_budget_input('anything', model=FakeModel({'name': ' ', 'month': 'Jan'})) is None


def test_blank_input_never_calls_model():
    model = FakeModel(error=AssertionError('should not be called'))
    assert parse_budget_input('   ', model=model) is None
    assert model.messages is None


def test_missing_api_key_returns_none(monkeypatch):
    monkeypatch.setattr(budget_parser.config, 'get_api_key', lambda: None)

    def unexpected_model(*args, **kwargs):
        raise AssertionError('model should not be built without a key')

    monkeypatch.setattr(budget_parser, 'get_model', unexpected_model)
    assert parse_budget_input('Trip in May for 500') is None


def test_default_model_is_built_when_key_present(monkeypatch):
    monkeypatch.setattr(budget_parser.config, 'get_api_key', lambda: 'test-key')
    fake = FakeModel(types.MappingProxyType({'name': 'Trip', 'amount': 500, 'month': 'May', 'type': 'Trip'}))
    monkeypatch.setattr(budget_parser, 'get_model', lambda: fake)

    candidate = parse_budget_input('Trip in May for 500')
    assert candidate.month == Month.MAY
    assert candidate.type == EventType.TRIP


def test_model_construction_failure_returns_none(monkeypatch):
    monkeypatch.setattr(budget_parser.config, 'get_api_key', lambda: 'test-key')

    def broken_model():
        raise ImportError('langchain_openai is not installed')

    monkeypatch.setattr(budget_parser, 'get_model', broken_model)
    assert parse_budget_input('Trip in May for 500') is None


def test_default_event_type_comes_from_config():
    candidate = budget_parser.candidate_from_response({'name': 'Quiz', 'month': 'Apr'})
    assert candidate.type == EventType(get_config_value('planner', 'constants', 'default_event_type'))
