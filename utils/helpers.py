"""
utils/helpers.py
----------------
Small general-purpose helper functions used across sections.
These are pure Python with no Streamlit or Plotly dependencies
so they can also be used safely inside the command-line report.

Import example:
    from utils.helpers import format_period, format_category, fmt_count
"""

import re

import pandas as pd

_PERIOD_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


# ── Formatting helpers ────────────────────────────────────────────

def format_period(period: str | None) -> str:
    """
    Format a YYYY-MM reporting period for display.

    Returns '-' for empty or missing values (None, NaN, pd.NA) and the
    input unchanged if it cannot be parsed, so callers never need a
    try/except.

    Examples:
        '2024-03' -> 'Mar 2024'
        ''        -> '-'
        nan       -> '-'
    """
    if period is None or (pd.api.types.is_scalar(period) and pd.isna(period)):
        return "-"
    if not period:
        return "-"
    parsed = pd.to_datetime(str(period)[:7], format="%Y-%m", errors="coerce")
    if pd.isna(parsed):
        return str(period)
    return parsed.strftime("%b %Y")


def format_category(slug: str | None) -> str:
    """
    Turn a police.uk category slug into a display label.

    Examples:
        'anti-social-behaviour' -> 'Anti Social Behaviour'
        'violent-crime'         -> 'Violent Crime'
    """
    if not slug:
        return "Unknown"
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), slug.replace("-", " "))


def fmt_count(value: float | int) -> str:
    """Format a number with thousands separator."""
    return f"{int(value):,}"


def pluralise(count: int, singular: str, plural: str | None = None) -> str:
    """'1 incident', '3 incidents'."""
    word = singular if count == 1 else (plural or f"{singular}s")
    return f"{count:,} {word}"


# ── Validation helpers ────────────────────────────────────────────

def is_valid_period(period: str) -> bool:
    """True for a well-formed YYYY-MM string."""
    return bool(period) and bool(_PERIOD_RE.match(period))
