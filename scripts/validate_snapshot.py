#!/usr/bin/env python3
"""Lightweight validator for exported budget snapshot files."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from club_budget import config
from club_budget.storage import SnapshotValidationError, import_snapshot


def validate_snapshot(path: Path) -> str:
    """Return an error message for ``path``, or an empty string when it imports cleanly."""
    try:
        import_snapshot(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        return f"unreadable: {exc}"
    except SnapshotValidationError as exc:
        return str(exc)
    return ""


def main(argv: List[str]) -> int:
    paths = [Path(arg) for arg in argv] or sorted(config.EXPORTS_DIR.glob("*.json"))
    if not paths:
        print(f"No snapshot files found in {config.EXPORTS_DIR}")
        return 1

    issues = []
    for path in paths:
        message = validate_snapshot(path)
        if message:
            issues.append((path.name, message))

    if issues:
        print("Snapshot validation failed:")
        for filename, message in issues:
            print(f"  - {filename}: {message}")
        return 1

    print(f"All {len(paths)} snapshot(s) validated successfully.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
