"""
sections/overview.py
--------------------
'Overview' section: headline metrics for the selected month and the
category breakdown chart.
"""

import streamlit as st

from utils.charts import category_breakdown_chart
from utils.constants import CHART_CONFIG
from utils.helpers import format_period
from utils.models import Fallback, Resolved


def render_boundary_status(boundary: Resolved | Fallback):
    """Warn when the dashboard is running on the approximate fallback boundary."""
    if boundary.is_fallback:
        st.warning(
            "The ONS boundary service could not be reached, so an approximate "
            "rectangle around Codford is being used. Incidents near the parish "
            "edge may be included or missed."
        )
    else:
        st.caption(
            f"Boundary: {boundary.feature.name} "
            f"(ONS {boundary.endpoint.vintage}, matched on {boundary.matched_on})"
        )


def render(boundary: Resolved | Fallback, period: str, summary: dict):
    st.title("Crime Overview")
    render_boundary_status(boundary)

    col1, col2, col3 = st.columns(3)
    col1.metric("Total crimes", f"{summary['total']:,}")
    col2.metric("Top category", summary["most_frequent_category"])
    col3.metric("Reporting period", format_period(period))

    st.divider()

    st.subheader("Category breakdown")
    if summary["total"] == 0:
        st.info(f"No crimes recorded in Codford for {format_period(period)}.")
        return

    st.caption(f"Total: {summary['total']:,}")
    fig = category_breakdown_chart(summary)
    st.plotly_chart(fig, use_container_width=True, config=CHART_CONFIG)
