"""
sections/incident_log.py
------------------------
'Incident Log' section: one row per incident for the selected month
and category.
"""

import pandas as pd
import streamlit as st

from utils.constants import INCIDENT_LOG_RENAME
from utils.helpers import pluralise
from utils.summary import incident_log


def render(crimes: pd.DataFrame, category: str):
    st.title("Incident Log")
    st.caption(f"{pluralise(len(crimes), 'incident')} shown")

    if crimes.empty:
        st.info("No crimes recorded matching your selection.")
        if category != "all":
            st.caption("Choose 'All categories' in the sidebar to clear the filter.")
        return

    table = (
        incident_log(crimes)[list(INCIDENT_LOG_RENAME)]
        .rename(columns=INCIDENT_LOG_RENAME)
    )
    st.dataframe(table, use_container_width=True, hide_index=True)
