"""Top-level package for the Rec Club Budget planner.

The planner tracks a recreational club's yearly budget: sponsor income per
month, planned events with their own task boards, and the recurring
badminton court bookings. The primary modules are:

* ``models`` – the frozen domain entities and their factories
* ``calculations`` – budget totals, variance and summary tables
* ``task_board`` – task board operations and staged task edits
* ``state`` – the application state and its transitions
* ``storage`` – local JSON persistence and snapshot import/export
* ``export_csv`` / ``reports`` – CSV and PDF exports

The Streamlit app is started with:

```bash
streamlit run club_budget/Home.py
```

or through ``run_dashboard.py`` at the project root.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
