"""
utils/summary.py
----------------
Aggregate statistics over one month of incidents.

All functions are pure (no Streamlit) so the command-line report can
reuse them. Counting is done in pandas on the frame produced by
crimes_to_frame().

Import example:
    from utils.summary import build_summary, crimes_to_frame
"""

import pandas as pd

from utils.helpers import format_category, format_period
from utils.models import IncidentRecord

FRAME_COLUMNS = [
    "id", "month", "category", "category_label", "street",
    "latitude", "longitude", "outcome", "outcome_date",
]

NO_OUTCOME = "Status unavailable"


def crimes_to_frame(records: list[IncidentRecord]) -> pd.DataFrame:
    """
    One row per incident with display-ready columns.

    Latitude and longitude are coerced to floats; anything unparseable
    becomes NaN rather than raising.
    """
    rows = [
        {
            "id":             r.id,
            "month":          r.month,
            "category":       r.category,
            "category_label": format_category(r.category),
            "street":         r.street_name,
            "latitude":       r.latitude,
            "longitude":      r.longitude,
            "outcome":        r.outcome.category if r.outcome and r.outcome.category else NO_OUTCOME,
            "outcome_date":   r.outcome.date if r.outcome else None,
        }
        for r in records
    ]

    df = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    df["latitude"]  = pd.to_numeric(df["latitude"],  errors="coerce")
    df["longitude"] = pd.to_numeric(df["longitude"], errors="coerce")
    return df


def build_summary(records: list[IncidentRecord]) -> dict:
    """
    Returns a dict with keys:
        total                   – number of incidents
        by_category             – DataFrame [name, value], most frequent first
        most_frequent_category  – display label, or 'None' if no incidents
    """
    labels = pd.Series(
        [format_category(r.category) for r in records], dtype="object",
    )

    # Stable sort keeps first-seen order between equal counts
    counts = labels.value_counts(sort=False)
    by_category = (
        counts.rename_axis("name")
        .reset_index(name="value")
        .sort_values("value", ascending=False, kind="stable")
        .reset_index(drop=True)
    )

    return {
        "total":                  len(records),
        "by_category":            by_category,
        "most_frequent_category": by_category["name"].iloc[0] if len(by_category) else "None",
    }


def unique_categories(records: list[IncidentRecord]) -> list[str]:
    """Sorted raw category slugs present in `records`."""
    return sorted({r.category for r in records if r.category})


def filter_by_category(df: pd.DataFrame, category: str) -> pd.DataFrame:
    """Rows for one category slug; 'all' returns the frame unchanged."""
    if category == "all":
        return df
    return df[df["category"] == category].reset_index(drop=True)


def incident_log(df: pd.DataFrame) -> pd.DataFrame:
    """Add formatted month columns for the incident log table."""
    out = df.copy()
    out["month_label"]        = out["month"].map(format_period)
    out["outcome_date_label"] = out["outcome_date"].map(format_period)
    return out
