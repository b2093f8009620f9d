"""Local persistence and JSON snapshot import/export.

Each collection is stored in its own JSON file under the state directory so
that a corrupt file only costs that one collection: it is logged and replaced
by its default. The snapshot format (``AppData``) bundles everything into a
single document for export and import.
"""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar

from . import config
from .logging_config import get_logger
from .models import (
    BadmintonConfig,
    EventExpense,
    EventTask,
    IncomeSource,
    decimal_to_json,
    dump_many,
    empty_badminton_config,
    initial_carry_over,
    seed_income_sources,
    to_money,
)
from .pages.lib.common.file_operations import ensure_directory, export_filename
from .state import AppState

logger = get_logger(__name__)

T = TypeVar('T')

COLLECTION_FILES = {
    'events': 'events.json',
    'income_sources': 'income.json',
    'carry_over': 'carry_over.json',
    'badminton_config': 'badminton.json',
    'central_tasks': 'central_tasks.json',
}

REQUIRED_SNAPSHOT_FIELDS = ('events', 'incomeSources', 'carryOver', 'badmintonConfig')


class SnapshotValidationError(ValueError):
    """Raised when an imported snapshot is unusable; nothing has been applied."""


def is_legacy_badminton_config(data: Any) -> bool:
    """True when the stored config predates per-month session lists."""
    if not isinstance(data, dict) or not isinstance(data.get('months'), dict):
        return True
    return any(
        not isinstance(entry, dict) or not isinstance(entry.get('sessions'), list)
        for entry in data['months'].values()
    )


def badminton_config_from_data(data: Any) -> BadmintonConfig:
    """Decode a stored config, discarding legacy shapes wholesale."""
    if is_legacy_badminton_config(data):
        logger.warning("Old badminton config detected, resetting to default structure.")
        return empty_badminton_config()
    return BadmintonConfig.from_dict(data)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _carry_over_from_data(data: Any) -> Decimal:
    if not _is_number(data):
        raise ValueError(f"carry-over must be a number, got {type(data).__name__}")
    amount = to_money(data)
    if amount < 0:
        raise ValueError(f"carry-over must not be negative, got {data!r}")
    return amount


class BudgetStorage:
    """Handles planner state file storage operations."""

    def __init__(self, state_dir: Optional[Path] = None):
        """Initialize planner storage.

        Args:
            state_dir: Optional custom directory for state files.
                       Defaults to STATE_DIR from config.
        """
        self.state_dir = Path(state_dir or config.STATE_DIR)

    def get_path(self, collection: str) -> Path:
        return self.state_dir / COLLECTION_FILES[collection]

    def _read(self, collection: str, decode: Callable[[Any], T], default: Callable[[], T]) -> T:
        target = self.get_path(collection)
        if not target.exists():
            return default()
        try:
            with target.open('r', encoding='utf-8') as handle:
                data = json.load(handle, parse_float=Decimal)
            return decode(data)
        except (json.JSONDecodeError, OSError, KeyError, TypeError, ValueError) as exc:
            logger.warning(
                "Could not load %s, falling back to defaults: %s",
                collection,
                exc,
                extra={'path': str(target)},
            )
            return default()

    def load(self) -> AppState:
        """Load every collection, defaulting any that are missing or unreadable."""
        return AppState(
            events=self._read(
                'events',
                lambda data: tuple(EventExpense.from_dict(item) for item in data),
                tuple,
            ),
            income_sources=self._read(
                'income_sources',
                lambda data: tuple(IncomeSource.from_dict(item) for item in data),
                seed_income_sources,
            ),
            carry_over=self._read('carry_over', _carry_over_from_data, initial_carry_over),
            badminton_config=self._read(
                'badminton_config', badminton_config_from_data, empty_badminton_config
            ),
            central_tasks=self._read(
                'central_tasks',
                lambda data: tuple(EventTask.from_dict(item) for item in data),
                tuple,
            ),
        )

    def save(self, state: AppState) -> None:
        """Write every collection to disk.

        Raises:
            OSError: If a file cannot be written
        """
        ensure_directory(self.state_dir)
        payloads = {
            'events': dump_many(state.events),
            'income_sources': dump_many(state.income_sources),
            'carry_over': decimal_to_json(state.carry_over),
            'badminton_config': state.badminton_config.to_dict(),
            'central_tasks': dump_many(state.central_tasks),
        }
        for collection, payload in payloads.items():
            target = self.get_path(collection)
            try:
                with target.open('w', encoding='utf-8') as handle:
                    json.dump(payload, handle, indent=2)
            except OSError as e:
                raise OSError(f"Failed to save {collection} to {target}: {e}") from e

    def clear(self) -> None:
        """Delete all state files; missing files are ignored."""
        for collection in COLLECTION_FILES:
            target = self.get_path(collection)
            if target.exists():
                target.unlink()


# ---------------------------------------------------------------------------
# Snapshot export / import
# ---------------------------------------------------------------------------


def snapshot_dict(state: AppState, now: Optional[datetime] = None) -> Dict[str, Any]:
    stamp = (now or datetime.now(timezone.utc)).isoformat()
    return {
        'events': dump_many(state.events),
        'incomeSources': dump_many(state.income_sources),
        'carryOver': decimal_to_json(state.carry_over),
        'badmintonConfig': state.badminton_config.to_dict(),
        'centralTasks': dump_many(state.central_tasks),
        'lastUpdated': stamp,
    }


def export_snapshot(state: AppState, now: Optional[datetime] = None) -> str:
    """Serialize the full state as pretty-printed snapshot JSON."""
    return json.dumps(snapshot_dict(state, now), indent=2, ensure_ascii=False)


def snapshot_filename(day: Optional[date] = None) -> str:
    return export_filename("json", day)


def missing_snapshot_fields(data: Mapping[str, Any]) -> List[str]:
    missing = [name for name in REQUIRED_SNAPSHOT_FIELDS if data.get(name) is None]
    carry = data.get('carryOver')
    if 'carryOver' not in missing and not _is_number(carry):
        missing.append('carryOver')
    return missing


def import_snapshot(text: str) -> AppState:
    """Decode snapshot JSON into a complete new state.

    Raises:
        SnapshotValidationError: If the JSON is malformed, a required field is
            missing, or a record cannot be decoded. The caller's state is never
            touched because the new state is only returned on success.
    """
    try:
        data = json.loads(text, parse_float=Decimal)
    except (json.JSONDecodeError, TypeError) as exc:
        logger.warning("Snapshot import failed to parse: %s", exc)
        raise SnapshotValidationError("Failed to parse JSON file.") from exc

    if not isinstance(data, dict):
        raise SnapshotValidationError("Invalid file format. Expected a JSON object.")

    missing = missing_snapshot_fields(data)
    if missing:
        logger.warning("Snapshot import rejected", extra={'missing_fields': missing})
        raise SnapshotValidationError(
            f"Invalid file format. Missing required fields: {', '.join(missing)}."
        )

    try:
        return AppState(
            events=tuple(EventExpense.from_dict(item) for item in data['events']),
            income_sources=tuple(IncomeSource.from_dict(item) for item in data['incomeSources']),
            carry_over=_carry_over_from_data(data['carryOver']),
            badminton_config=badminton_config_from_data(data['badmintonConfig']),
            central_tasks=tuple(EventTask.from_dict(item) for item in data.get('centralTasks') or []),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        logger.warning("Snapshot import contained malformed records: %s", exc)
        raise SnapshotValidationError(f"Invalid file format. Malformed record: {exc}") from exc
