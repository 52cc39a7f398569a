import datetime as dt

import streamlit as st

from sections import crime_map, embed, incident_log, monthly_report, overview
from utils.constants import APP_TITLE, WILTSHIRE_REPORT_URL
from utils.data_loaders import load_available_dates, load_boundary, load_crimes
from utils.helpers import format_category, format_period
from utils.summary import (
    build_summary,
    crimes_to_frame,
    filter_by_category,
    unique_categories,
)

st.set_page_config(
    page_title=APP_TITLE,
    page_icon="🛡️",
    layout="wide"
)

# ── Data loading ──────────────────────────────────────────────────

boundary = load_boundary()
dates    = load_available_dates()

# ── Sidebar ───────────────────────────────────────────────────────

st.sidebar.title(APP_TITLE)
st.sidebar.caption("Codford, Wiltshire")

period = st.sidebar.selectbox(
    "Month",
    dates,
    index=0,
    format_func=format_period,
)

records  = load_crimes(period)
summary  = build_summary(records)
crimes   = crimes_to_frame(records)

category = st.sidebar.selectbox(
    "Type",
    ["all"] + unique_categories(records),
    format_func=lambda c: "All categories" if c == "all" else format_category(c),
    disabled=not records,
    key=f"category-{period}",  # reset the filter when the month changes
)
filtered = filter_by_category(crimes, category)

section = st.sidebar.radio("Navigate", [
    "Overview",
    "Activity Summary",
    "Incident Map",
    "Incident Log",
    "Embed",
])

# ── Reporting notice ──────────────────────────────────────────────

st.warning(f"""
**Help protect our community: report every incident.**
Accurate crime data is essential for effective policing in Codford. If
incidents aren't reported, they don't appear in these statistics or
influence police resource allocation.
**Emergency:** 999 | **Non-emergency:** 101 |
[Report online via Wiltshire Police]({WILTSHIRE_REPORT_URL})
""")

# ── Sections ──────────────────────────────────────────────────────

if section == "Overview":
    overview.render(boundary, period, summary)

elif section == "Activity Summary":
    monthly_report.render(period, summary, records)

elif section == "Incident Map":
    crime_map.render(boundary, filtered)

elif section == "Incident Log":
    incident_log.render(filtered, category)

elif section == "Embed":
    embed.render()

# ── Footer ────────────────────────────────────────────────────────

st.divider()
col1, col2 = st.columns(2)
with col1:
    st.markdown("**Disclaimer**")
    st.caption(f"""
    Data provided for information purposes only. This tool is not affiliated
    with Wiltshire Police or the Office for National Statistics. This report is
    generated automatically using open government data and should not be used
    for legal or emergency purposes.

    Last retrieved: {dt.date.today():%d %B %Y}
    """)
with col2:
    year = dt.date.today().year
    st.markdown("**Data sources**")
    st.caption(f"""
    Crime data: [police.uk API](https://data.police.uk/about/data/). Contains
    public sector information licensed under the Open Government Licence v3.0.

    Parish boundary: [ONS Open Geography Portal](https://geoportal.statistics.gov.uk/).
    Contains National Statistics data © Crown copyright and database right {year}.
    Contains OS data © Crown copyright and database right {year}.
    """)
