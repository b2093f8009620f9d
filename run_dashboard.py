#!/usr/bin/env python3
"""Direct launcher for the Rec Club Budget planner.

This script launches Streamlit with the club_budget directory as the app root,
enabling automatic page discovery from the pages/ subdirectory.
"""

import os
import subprocess
import sys
from pathlib import Path

project_root = Path(__file__).parent.resolve()
app_dir = project_root / "club_budget"

if __name__ == "__main__":
    # Streamlit discovers pages/ next to the main script
    os.chdir(app_dir)
    sys.path.insert(0, str(project_root))
    raise SystemExit(subprocess.run([sys.executable, "-m", "streamlit", "run", "Home.py"]).returncode)
