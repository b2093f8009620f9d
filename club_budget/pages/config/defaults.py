"""Loader for the JSON files that hold seed data, defaults and UI labels."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

CONFIG_DIR = Path(__file__).parent

PLANNER_SECTIONS = ('constants', 'session_template', 'seed_income_sources', 'ui')


@lru_cache(maxsize=None)
def load_config(config_name: str) -> Dict[str, Any]:
    """Read ``<config_name>.json`` from this package.

    Results are cached per name, so callers must not mutate them.

    Raises:
        FileNotFoundError: If there is no such file
        json.JSONDecodeError: If the file is not valid JSON

    Example:
        >>> load_config('planner')['constants']['default_assignee']
        'Team'
    """
    config_path = CONFIG_DIR / f"{config_name}.json"
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    return json.loads(config_path.read_text(encoding='utf-8'))


def get_planner_config() -> Dict[str, Any]:
    """Planner settings, checked for every section the models read at import time."""
    planner = load_config('planner')
    missing = [section for section in PLANNER_SECTIONS if section not in planner]
    if missing:
        raise ValueError(f"planner.json is missing sections: {', '.join(missing)}")
    return planner


def get_config_value(config_name: str, *keys: str, default: Any = None) -> Any:
    """Walk ``keys`` into a config file, returning ``default`` on any gap.

    Example:
        >>> get_config_value('planner', 'session_template', 'rate')
        7.5
    """
    try:
        value: Any = load_config(config_name)
    except FileNotFoundError:
        return default
    for key in keys:
        if not isinstance(value, dict) or key not in value:
            return default
        value = value[key]
    return value
