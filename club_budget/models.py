"""Domain model for the club budget planner.

Entities are frozen dataclasses and collections are tuples, so every change
produces a new value. Money is held as :class:`decimal.Decimal`.

Each entity has exactly one factory (``new_*``) that owns its defaults; the
``from_dict``/``to_dict`` pairs speak the camelCase snapshot format used by the
JSON export.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .pages.config.defaults import get_planner_config

ZERO = Decimal("0")
CENTS = Decimal("0.01")

Number = Union[Decimal, int, float, str]


class Month(str, Enum):
    JAN = "Jan"
    FEB = "Feb"
    MAR = "Mar"
    APR = "Apr"
    MAY = "May"
    JUN = "Jun"
    JUL = "Jul"
    AUG = "Aug"
    SEP = "Sep"
    OCT = "Oct"
    NOV = "Nov"
    DEC = "Dec"
    JAN_NEXT = "Jan (Next Year)"


MONTH_ORDER: Tuple[Month, ...] = tuple(Month)
MONTH_KEYS: Tuple[str, ...] = tuple(m.value for m in MONTH_ORDER)


class IncomeCategory(str, Enum):
    COMPANY = "Company"
    STAFF = "Staff"


class IncomeSubCategory(str, Enum):
    TRADING = "Trading"
    TECH = "Tech"
    AUTOMATION = "Automation"


class EventType(str, Enum):
    EVENT = "Event"
    BIRTHDAY = "Birthday"
    TRIP = "Trip"
    DINNER = "Dinner"
    SPORT = "Sport"


class TaskStatus(str, Enum):
    TODO = "Todo"
    IN_PROGRESS = "InProgress"
    DONE = "Done"


_CONSTANTS = get_planner_config()['constants']
_SESSION_TEMPLATE = get_planner_config()['session_template']

DEFAULT_ASSIGNEE: str = _CONSTANTS['default_assignee']
DEFAULT_EVENT_TYPE = EventType(_CONSTANTS['default_event_type'])
BUDGET_PENDING_NOTE: str = _CONSTANTS['budget_pending_note']


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:10]}"


def to_decimal(value: Any) -> Decimal:
    """Convert a stored numeric value to Decimal.

    Floats go through ``str`` so ``7.5`` becomes ``Decimal('7.5')`` rather than
    its binary expansion. Booleans, non-numeric and non-finite values (NaN,
    Infinity) raise ``ValueError``.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        number = value
    else:
        raw = str(value) if isinstance(value, (int, float)) else str(value).strip()
        try:
            number = Decimal(raw)
        except InvalidOperation as exc:
            raise ValueError(f"Not a number: {value!r}") from exc
    if not number.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return number


def to_money(value: Any) -> Decimal:
    """Decimal rounded half-up to cents.

    Raises ``ValueError`` for anything ``to_decimal`` rejects and for values
    too large to hold at cent precision.
    """
    try:
        return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"Amount out of range: {value!r}") from exc


def stored_money(data: Mapping[str, Any], key: str, default: Any = None) -> Decimal:
    """Read a non-negative money field from a stored record."""
    raw = data[key] if default is None else data.get(key, default)
    amount = to_money(raw)
    if amount < 0:
        raise ValueError(f"{key} must not be negative, got {raw!r}")
    return amount


def parse_amount(text: Any) -> Decimal:
    """Parse user-entered amount text; unparseable or negative input yields 0.

    Example:
        >>> parse_amount("12.50")
        Decimal('12.50')
        >>> parse_amount("abc")
        Decimal('0')
    """
    if text is None:
        return ZERO
    try:
        amount = to_money(text)
    except ValueError:
        return ZERO
    return amount if amount > 0 else ZERO


def decimal_to_json(value: Decimal) -> Union[int, float]:
    """Render a Decimal as a plain JSON number."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def _month(value: Union[Month, str]) -> Month:
    return value if isinstance(value, Month) else Month(value)


# ---------------------------------------------------------------------------
# Task board entities
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChecklistItem:
    id: str
    text: str
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'text': self.text, 'completed': self.completed}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ChecklistItem':
        return cls(
            id=str(data['id']),
            text=str(data.get('text', '')),
            completed=bool(data.get('completed', False)),
        )


@dataclass(frozen=True)
class EventTask:
    id: str
    title: str
    description: str = ''
    assignee: str = DEFAULT_ASSIGNEE
    budget: Decimal = ZERO
    status: TaskStatus = TaskStatus.TODO
    checklist: Tuple[ChecklistItem, ...] = ()
    linked_event_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'assignee': self.assignee,
            'budget': decimal_to_json(self.budget),
            'status': self.status.value,
            'checklist': [item.to_dict() for item in self.checklist],
            'linkedEventId': self.linked_event_id or '',
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'EventTask':
        return cls(
            id=str(data['id']),
            title=str(data['title']),
            description=str(data.get('description') or ''),
            assignee=str(data.get('assignee') or DEFAULT_ASSIGNEE),
            budget=stored_money(data, 'budget', 0),
            status=TaskStatus(data.get('status', TaskStatus.TODO.value)),
            checklist=tuple(ChecklistItem.from_dict(item) for item in data.get('checklist') or []),
            linked_event_id=data.get('linkedEventId') or None,
        )


# ---------------------------------------------------------------------------
# Events and income
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EventExpense:
    id: str
    name: str
    month: Month
    amount: Decimal = ZERO
    actual_amount: Optional[Decimal] = None
    type: EventType = DEFAULT_EVENT_TYPE
    notes: Optional[str] = None
    is_recurring: Optional[bool] = None
    tasks: Tuple[EventTask, ...] = ()

    @property
    def has_actual(self) -> bool:
        return self.actual_amount is not None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'id': self.id,
            'name': self.name,
            'month': self.month.value,
            'amount': decimal_to_json(self.amount),
            'type': self.type.value,
            'tasks': [task.to_dict() for task in self.tasks],
        }
        # Optional fields are omitted rather than written as null
        if self.actual_amount is not None:
            payload['actualAmount'] = decimal_to_json(self.actual_amount)
        if self.notes is not None:
            payload['notes'] = self.notes
        if self.is_recurring is not None:
            payload['isRecurring'] = self.is_recurring
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'EventExpense':
        actual = data.get('actualAmount')
        notes = data.get('notes')
        recurring = data.get('isRecurring')
        return cls(
            id=str(data['id']),
            name=str(data['name']),
            month=Month(data['month']),
            amount=stored_money(data, 'amount', 0),
            actual_amount=stored_money(data, 'actualAmount') if actual is not None else None,
            type=EventType(data.get('type', DEFAULT_EVENT_TYPE.value)),
            notes=str(notes) if notes is not None else None,
            is_recurring=bool(recurring) if recurring is not None else None,
            tasks=tuple(EventTask.from_dict(task) for task in data.get('tasks') or []),
        )


@dataclass(frozen=True)
class IncomeSource:
    id: str
    name: str
    category: IncomeCategory
    sub_category: IncomeSubCategory
    monthly_amounts: Mapping[Month, Decimal] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Every source carries all 13 month keys, zero-filled
        amounts = {
            month: to_decimal(self.monthly_amounts.get(month, ZERO))
            for month in MONTH_ORDER
        }
        object.__setattr__(self, 'monthly_amounts', amounts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category.value,
            'subCategory': self.sub_category.value,
            'monthlyAmounts': {
                month.value: decimal_to_json(self.monthly_amounts[month]) for month in MONTH_ORDER
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'IncomeSource':
        raw_amounts = data.get('monthlyAmounts') or {}
        amounts = {Month(key): stored_money(raw_amounts, key) for key in raw_amounts}
        return cls(
            id=str(data['id']),
            name=str(data['name']),
            category=IncomeCategory(data['category']),
            sub_category=IncomeSubCategory(data['subCategory']),
            monthly_amounts=amounts,
        )


# ---------------------------------------------------------------------------
# Badminton (recurring activity) configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Session:
    id: str
    rate: Decimal
    courts: Decimal
    hours: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'rate': decimal_to_json(self.rate),
            'courts': decimal_to_json(self.courts),
            'hours': decimal_to_json(self.hours),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Session':
        return cls(
            id=str(data['id']),
            rate=stored_money(data, 'rate'),
            courts=stored_money(data, 'courts'),
            hours=stored_money(data, 'hours'),
        )


@dataclass(frozen=True)
class MonthSettings:
    is_selected: bool = False
    sessions: Tuple[Session, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'isSelected': self.is_selected,
            'sessions': [session.to_dict() for session in self.sessions],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'MonthSettings':
        return cls(
            is_selected=bool(data.get('isSelected', False)),
            sessions=tuple(Session.from_dict(item) for item in data['sessions']),
        )


@dataclass(frozen=True)
class BadmintonConfig:
    months: Mapping[Month, MonthSettings] = field(default_factory=dict)

    def __post_init__(self) -> None:
        filled = {month: self.months.get(month, MonthSettings()) for month in MONTH_ORDER}
        object.__setattr__(self, 'months', filled)

    def settings_for(self, month: Union[Month, str]) -> MonthSettings:
        return self.months[_month(month)]

    def with_month(self, month: Union[Month, str], settings: MonthSettings) -> 'BadmintonConfig':
        months = dict(self.months)
        months[_month(month)] = settings
        return BadmintonConfig(months=months)

    def to_dict(self) -> Dict[str, Any]:
        return {'months': {month.value: self.months[month].to_dict() for month in MONTH_ORDER}}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'BadmintonConfig':
        months = data.get('months') or {}
        return cls(months={Month(key): MonthSettings.from_dict(value) for key, value in months.items()})


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def new_checklist_item(text: str) -> ChecklistItem:
    return ChecklistItem(id=new_id('cl'), text=text.strip(), completed=False)


def new_task(
    title: str,
    description: str = '',
    assignee: Optional[str] = None,
    budget: Optional[Number] = None,
) -> EventTask:
    """Create a Todo task with an empty checklist and no link."""
    return EventTask(
        id=new_id('task'),
        title=title.strip(),
        description=(description or '').strip(),
        assignee=(assignee or '').strip() or DEFAULT_ASSIGNEE,
        budget=parse_amount(budget),
        status=TaskStatus.TODO,
        checklist=(),
        linked_event_id=None,
    )


def new_event(
    name: str,
    month: Union[Month, str],
    amount: Optional[Number] = None,
    event_type: Union[EventType, str] = DEFAULT_EVENT_TYPE,
    notes: Optional[str] = None,
) -> EventExpense:
    return EventExpense(
        id=new_id('evt'),
        name=name.strip(),
        month=_month(month),
        amount=parse_amount(amount),
        actual_amount=None,
        type=event_type if isinstance(event_type, EventType) else EventType(event_type),
        notes=notes,
        tasks=(),
    )


def new_income_source(
    name: Optional[str] = None,
    category: Union[IncomeCategory, str, None] = None,
    sub_category: Union[IncomeSubCategory, str, None] = None,
    source_id: Optional[str] = None,
) -> IncomeSource:
    """Create an income source with every month zeroed."""
    return IncomeSource(
        id=source_id or new_id('inc'),
        name=name or _CONSTANTS['default_income_name'],
        category=IncomeCategory(category or _CONSTANTS['default_income_category']),
        sub_category=IncomeSubCategory(sub_category or _CONSTANTS['default_income_sub_category']),
        monthly_amounts={},
    )


def _session_value(name: str, value: Optional[Number]) -> Decimal:
    return to_money(_SESSION_TEMPLATE[name]) if value is None else parse_amount(value)


def new_session(
    rate: Optional[Number] = None,
    courts: Optional[Number] = None,
    hours: Optional[Number] = None,
) -> Session:
    return Session(
        id=new_id('sess'),
        rate=_session_value('rate', rate),
        courts=_session_value('courts', courts),
        hours=_session_value('hours', hours),
    )


def empty_badminton_config() -> BadmintonConfig:
    return BadmintonConfig(months={month: MonthSettings() for month in MONTH_ORDER})


def seed_income_sources() -> Tuple[IncomeSource, ...]:
    """The six sponsor rows a fresh install starts with."""
    return tuple(
        new_income_source(
            name=row['name'],
            category=row['category'],
            sub_category=row['subCategory'],
            source_id=row['id'],
        )
        for row in get_planner_config()['seed_income_sources']
    )


def initial_carry_over() -> Decimal:
    return to_decimal(_CONSTANTS['initial_carry_over'])


def session_template_count() -> int:
    return int(_SESSION_TEMPLATE['sessions_per_month'])


def dump_many(items: Iterable[Any]) -> List[Dict[str, Any]]:
    return [item.to_dict() for item in items]
