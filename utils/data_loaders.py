"""
utils/data_loaders.py
---------------------
All data loading functions for the dashboard.
Network results are wrapped in @st.cache_data / @st.cache_resource so
the ONS and police.uk APIs are only hit once per session (or per TTL).

The boundary is resolved once and never fails: a Fallback result is
surfaced as a warning by the sections, not as an error here.

Crime searches can fail. Only successful searches are cached; a failed
search shows a warning and degrades to an empty incident list so the
rest of the dashboard still renders.
"""

import requests
import streamlit as st

from utils.boundary import BoundaryResolver
from utils.helpers import format_period
from utils.models import Fallback, IncidentRecord, Resolved
from utils.police_api import PoliceApiError, PolygonQueryEncoder
from utils.report import ReportUnavailable, make_client, request_crime_report

_ONE_HOUR = 60 * 60


# ── Shared clients ────────────────────────────────────────────────

@st.cache_resource
def get_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": "codford-crime-watch"})
    return session


@st.cache_resource
def get_gemini_client():
    return make_client()


# ── Boundary & dates ──────────────────────────────────────────────

@st.cache_data(ttl=24 * _ONE_HOUR, show_spinner="Initializing geography and connection...")
def load_boundary() -> Resolved | Fallback:
    return BoundaryResolver(session=get_session()).resolve()


@st.cache_data(ttl=_ONE_HOUR)
def load_available_dates() -> list[str]:
    return PolygonQueryEncoder(session=get_session()).fetch_available_dates()


# ── Crimes ────────────────────────────────────────────────────────

@st.cache_data(ttl=_ONE_HOUR, show_spinner=False)
def _fetch_crimes(period: str) -> list[IncidentRecord]:
    feature = load_boundary().feature
    return PolygonQueryEncoder(session=get_session()).fetch_crimes_in_boundary(feature, period)


def load_crimes(period: str) -> list[IncidentRecord]:
    if not period:
        return []
    try:
        with st.spinner(f"Retrieving crime data for {format_period(period)}..."):
            return _fetch_crimes(period)
    except (PoliceApiError, requests.RequestException) as e:
        print(f"  Failed to fetch crimes for {period}: {e}")
        st.warning(
            f"Could not load crime data for {format_period(period)} from police.uk. "
            "Showing an empty incident list; try again later."
        )
        return []


# ── Report ────────────────────────────────────────────────────────

@st.cache_data(ttl=_ONE_HOUR, show_spinner="Generating activity summary...")
def _fetch_report(period: str, _summary: dict, _records: list[IncidentRecord], n_records: int) -> str:
    """
    Gemini narrative for `period`. Raises ReportUnavailable, which
    st.cache_data does not cache.

    The summary and records are excluded from the cache key (leading
    underscore); `period` and `n_records` identify the month's data.
    """
    return request_crime_report(get_gemini_client(), period, _summary, _records)


def load_report(period: str, summary: dict, records: list[IncidentRecord]) -> str:
    try:
        return _fetch_report(period, summary, records, len(records))
    except ReportUnavailable as e:
        st.info("The narrated report is temporarily unavailable; it will be retried on the next load.")
        return e.message
