"""Plotly visualisation helpers for the club budget planner.

Each function takes one of the DataFrames (or collections) produced by
:mod:`club_budget.calculations` and returns a ``plotly.graph_objects.Figure``
ready for ``st.plotly_chart``. Empty input yields an empty figure titled
"No data to display" rather than raising.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .calculations import recurring_cost_by_month
from .models import MONTH_KEYS, BadmintonConfig, EventExpense


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def create_monthly_plan_chart(overview: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Income against planned spend for every month.

    Parameters
    ----------
    overview : pandas.DataFrame
        Output of :func:`calculations.monthly_overview_dataframe`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Grouped bars: income next to stacked event and badminton spend.
    """
    if overview.empty:
        return _empty_figure()
    fig = go.Figure()
    fig.add_trace(go.Bar(x=overview["Month"], y=overview["Income"], name="Income", offsetgroup="income"))
    fig.add_trace(go.Bar(x=overview["Month"], y=overview["Planned Events"], name="Events", offsetgroup="spend"))
    fig.add_trace(
        go.Bar(
            x=overview["Month"],
            y=overview["Recurring"],
            name="Badminton",
            offsetgroup="spend",
            base=overview["Planned Events"],
        )
    )
    fig.update_layout(
        title=title or "Monthly income vs planned spend",
        xaxis_title="Month",
        yaxis_title="Amount",
        barmode="group",
        xaxis={"categoryorder": "array", "categoryarray": list(MONTH_KEYS)},
    )
    return fig


def create_cumulative_net_chart(overview: pd.DataFrame, carry_over: float = 0.0, title: str | None = None) -> go.Figure:
    """Running balance through the year, starting from the carry-over."""
    if overview.empty:
        return _empty_figure()
    df = overview[["Month", "Cumulative Net"]].copy()
    df["Balance"] = df["Cumulative Net"] + carry_over
    fig = px.line(df, x="Month", y="Balance", markers=True)
    fig.add_hline(y=0, line_dash="dot", line_color="red")
    fig.update_layout(
        title=title or "Projected running balance",
        xaxis_title="Month",
        yaxis_title="Balance",
    )
    return fig


def create_income_source_pie(income: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Share of the yearly income contributed by each source.

    Parameters
    ----------
    income : pandas.DataFrame
        Output of :func:`calculations.income_dataframe`.
    title : str, optional
        Chart title.
    """
    if income.empty:
        return _empty_figure()
    df = pd.DataFrame({"Source": income["Source"], "Value": income["Annual Total"].astype(float)})
    df = df[df["Value"] > 0]
    if df.empty:
        return _empty_figure("No income recorded yet")
    fig = px.pie(df, names="Source", values="Value")
    fig.update_layout(title=title or "Income by source")
    return fig


def create_event_type_bar_chart(events: Sequence[EventExpense], title: str | None = None) -> go.Figure:
    """Planned amount per event type."""
    if not events:
        return _empty_figure()
    df = pd.DataFrame(
        {"Type": [event.type.value for event in events], "Planned": [float(event.amount) for event in events]}
    )
    totals = df.groupby("Type", as_index=False)["Planned"].sum()
    fig = px.bar(totals, x="Type", y="Planned")
    fig.update_layout(
        title=title or "Planned spend by event type",
        xaxis_title="Type",
        yaxis_title="Planned",
    )
    return fig


def create_recurring_cost_chart(config: BadmintonConfig, title: str | None = None) -> go.Figure:
    """Badminton cost per selected month; unselected months show as zero."""
    costs = recurring_cost_by_month(config)
    df = pd.DataFrame({"Month": [m.value for m in costs], "Cost": [float(v) for v in costs.values()]})
    if not (df["Cost"] > 0).any():
        return _empty_figure("No badminton sessions selected")
    fig = px.bar(df, x="Month", y="Cost")
    fig.update_layout(
        title=title or "Badminton cost by month",
        xaxis_title="Month",
        yaxis_title="Cost",
    )
    return fig
