"""Configuration management for the club budget planner.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Base project root - assumes this file is in club_budget/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

load_dotenv(_PROJECT_ROOT / ".env")

# Data directories
DATA_DIR = Path(os.getenv("CLUB_BUDGET_DATA_DIR", _PROJECT_ROOT / "data"))
STATE_DIR = DATA_DIR / "state"
EXPORTS_DIR = Path(os.getenv("CLUB_BUDGET_EXPORTS_DIR", DATA_DIR / "exports"))
LOG_DIR = Path(os.getenv("CLUB_BUDGET_LOG_DIR", DATA_DIR / "logs"))
FONT_CACHE_DIR = DATA_DIR / "fonts"

LOG_LEVEL = os.getenv("CLUB_BUDGET_LOG_LEVEL", "INFO").upper()

# Display
CURRENCY_SYMBOL = os.getenv("CLUB_BUDGET_CURRENCY", "RM")
PLANNING_LABEL = os.getenv("CLUB_BUDGET_PLANNING_LABEL", "Planning 2025-2026")

# PDF report font; an empty value disables the download
REPORT_FONT_URL = os.getenv(
    "CLUB_BUDGET_REPORT_FONT_URL",
    "https://github.com/googlefonts/roboto/raw/main/src/hinted/Roboto-Regular.ttf",
)
REPORT_FONT_TIMEOUT = float(os.getenv("CLUB_BUDGET_REPORT_FONT_TIMEOUT", "10"))

# Optional budget-text parser
PARSER_MODEL = os.getenv("CLUB_BUDGET_PARSER_MODEL", "gpt-4o-mini")


def get_api_key() -> Optional[str]:
    """Return the API key for the budget-text parser, if one is configured."""
    value = os.getenv("OPENAI_API_KEY")
    return value.strip() if value and value.strip() else None


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    for directory in [DATA_DIR, STATE_DIR, EXPORTS_DIR, LOG_DIR]:
        directory.mkdir(parents=True, exist_ok=True)
