"""
sections/monthly_report.py
--------------------------
'Activity Summary' section: the Gemini-narrated monthly report.
"""

import streamlit as st

from utils.data_loaders import load_report
from utils.helpers import format_period
from utils.models import IncidentRecord


def render(period: str, summary: dict, records: list[IncidentRecord]):
    st.title("Activity Summary")
    st.caption(
        f"Automatically generated narrative for {format_period(period)}, "
        "based on police.uk data. Check figures against the Overview page."
    )

    report = load_report(period, summary, records)
    st.markdown(report or "No analysis available.")

    st.download_button(
        "Download report (Markdown)",
        data=report,
        file_name=f"codford-crime-report-{period}.md",
        mime="text/markdown",
    )
