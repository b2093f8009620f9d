"""Free-text quick add: turn "Team dinner in March, about RM 800" into an event.

The chat model is asked for structured output matching
:class:`EventCandidateSchema`. Whatever comes back is validated here: unknown
months fall back to Jan, unknown types to Event, and negative or missing
amounts to 0. Any failure (no API key, network, malformed response) returns
None so the caller can tell the user the text could not be understood.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel, Field

from . import config
from .logging_config import get_logger
from .models import DEFAULT_EVENT_TYPE, EventType, Month, MONTH_KEYS, parse_amount

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You extract budget event details for a recreational club. "
    "Map the month to one of these exact keys: " + ", ".join(MONTH_KEYS) + ". "
    "If the month is not specified, guess from context. "
    "Pick the type from: " + ", ".join(t.value for t in EventType) + ". "
    "If the cost is unknown, use 0."
)

USER_TEMPLATE = 'Extract budget event details from the following text: "{text}"'


class EventCandidateSchema(BaseModel):
    name: str = Field(description="Name of the event or expense")
    amount: float = Field(default=0, description="Cost of the event. If unknown, use 0")
    month: str = Field(description="The month of the event")
    type: str = Field(default=DEFAULT_EVENT_TYPE.value, description="Category of the event")


@dataclass(frozen=True)
class EventCandidate:
    name: str
    amount: Decimal
    month: Month
    type: EventType


def get_model(model_name: Optional[str] = None):
    """Build the chat model used for parsing.

    Imported lazily so the rest of the app never pays for the client import.
    """
    from langchain_openai import ChatOpenAI

    return ChatOpenAI(
        model=model_name or config.PARSER_MODEL,
        api_key=config.get_api_key(),
        temperature=0,
    )


def _as_mapping(result: Any) -> Optional[Mapping[str, Any]]:
    if result is None:
        return None
    if isinstance(result, BaseModel):
        return result.model_dump()
    if isinstance(result, Mapping):
        return result
    return None


def candidate_from_response(data: Mapping[str, Any]) -> Optional[EventCandidate]:
    """Validate a raw model response into an :class:`EventCandidate`."""
    name = str(data.get('name') or '').strip()
    if not name:
        return None

    month_value = data.get('month')
    month = Month(month_value) if month_value in MONTH_KEYS else Month.JAN

    type_value = data.get('type')
    try:
        event_type = EventType(type_value)
    except ValueError:
        event_type = DEFAULT_EVENT_TYPE

    return EventCandidate(
        name=name,
        amount=parse_amount(data.get('amount')),
        month=month,
        type=event_type,
    )


def parse_budget_input(text: str, model: Any = None) -> Optional[EventCandidate]:
    """Ask the chat model to extract an event from ``text``.

    Args:
        text: Free-form description typed by the user
        model: Chat model to use; built from config when omitted

    Returns:
        The validated candidate, or None when nothing usable could be extracted
    """
    if not text or not text.strip():
        return None
    if model is None and config.get_api_key() is None:
        logger.error("Budget parser unavailable: OPENAI_API_KEY is not set")
        return None

    messages = [
        SystemMessage(content=SYSTEM_PROMPT),
        HumanMessage(content=USER_TEMPLATE.format(text=text.strip())),
    ]
    try:
        if model is None:
            model = get_model()
        result = model.with_structured_output(EventCandidateSchema).invoke(messages)
    except Exception as exc:  # any client, network or schema failure
        logger.error("Error parsing budget text: %s", exc)
        return None

    data = _as_mapping(result)
    if data is None:
        logger.warning("Budget parser returned no usable response")
        return None

    candidate = candidate_from_response(data)
    if candidate is None:
        logger.warning("Budget parser response had no event name")
    else:
        logger.info("Parsed budget text", extra={'event_month': candidate.month.value})
    return candidate
