"""Budget overview page for the Rec Club Budget planner.

Shows the headline figures, the savings/overspend split for events that have
an actual amount, and the monthly charts. Detailed editing lives on the pages
in ``pages/``.

To run the planner from the command line::

    streamlit run club_budget/Home.py
"""

from __future__ import annotations

import streamlit as st

from . import visualization as viz
from .calculations import income_dataframe, monthly_overview_dataframe, summarize
from .pages.lib.common.formatting import format_currency
from .shared_sidebar import render_shared_sidebar


def main() -> None:
    """Entry point for the overview page."""
    st.set_page_config(
        page_title="Rec Club Budget",
        page_icon="🏸",
        layout="wide",
        initial_sidebar_state="expanded",
    )
    state = render_shared_sidebar()
    summary = summarize(state.events, state.income_sources, state.carry_over, state.badminton_config)

    st.title("🏸 Rec Club Budget")

    # Top stats
    cols = st.columns(4)
    cols[0].metric("Total Available Budget", format_currency(summary.total_budget))
    cols[1].metric("Total Planned Expenses", format_currency(summary.grand_total_planned))
    cols[2].metric("Event Actuals (YTD)", format_currency(summary.total_actual_expense))
    cols[3].metric(
        "Projected Balance",
        format_currency(summary.projected_balance),
        delta="On track" if summary.projected_balance >= 0 else "Over budget",
        delta_color="normal" if summary.projected_balance >= 0 else "inverse",
    )

    detail_cols = st.columns(4)
    detail_cols[0].metric("Carry Over", format_currency(summary.carry_over))
    detail_cols[1].metric("Yearly Income", format_currency(summary.yearly_income))
    detail_cols[2].metric("Badminton (Selected Months)", format_currency(summary.recurring_cost))
    detail_cols[3].metric("Actual Balance", format_currency(summary.actual_balance))

    # Variance for events that have been paid
    variance = summary.variance
    st.subheader("Completed events")
    if variance.savings_count or variance.overspend_count or variance.total_actual_for_completed:
        var_cols = st.columns(3)
        var_cols[0].metric("Savings", format_currency(variance.savings_total), f"{variance.savings_count} events")
        var_cols[1].metric(
            "Overspend",
            format_currency(variance.overspend_total),
            f"-{variance.overspend_count} events",
        )
        var_cols[2].metric("Net Variance", format_currency(variance.net_variance))
    else:
        st.info("Record actual amounts on the Events page to compare them with the plan.")

    overview = monthly_overview_dataframe(state.events, state.income_sources, state.badminton_config)
    chart_cols = st.columns(2)
    with chart_cols[0]:
        st.plotly_chart(viz.create_monthly_plan_chart(overview), use_container_width=True)
    with chart_cols[1]:
        st.plotly_chart(
            viz.create_cumulative_net_chart(overview, carry_over=float(summary.carry_over)),
            use_container_width=True,
        )

    pie_cols = st.columns(2)
    with pie_cols[0]:
        st.plotly_chart(viz.create_income_source_pie(income_dataframe(state.income_sources)), use_container_width=True)
    with pie_cols[1]:
        st.plotly_chart(viz.create_event_type_bar_chart(state.events), use_container_width=True)


if __name__ == "__main__":  # pragma: no cover
    main()
