"""
sections/crime_map.py
---------------------
'Incident Map' section: parish boundary with incident markers.
"""

import pandas as pd
import streamlit as st

from utils.charts import incident_map
from utils.constants import CHART_CONFIG
from utils.helpers import pluralise
from utils.models import Fallback, Resolved


def render(boundary: Resolved | Fallback, crimes: pd.DataFrame):
    st.title("Incident Map")

    fig = incident_map(boundary.feature, crimes)
    st.plotly_chart(fig, use_container_width=True, config=CHART_CONFIG)

    located = crimes.dropna(subset=["latitude", "longitude"])
    st.caption(
        f"{pluralise(len(located), 'incident')} plotted. "
        "The map shows crime locations relative to the Codford Civil Parish "
        "boundary. Red dots are the approximate (anonymised) locations "
        "provided by police.uk, snapped to the nearest map point."
    )
