"""
utils/charts.py
---------------
Shared chart helpers used across dashboard sections.
All functions return a Plotly figure object.

Import example:
    from utils.charts import category_breakdown_chart, incident_map
"""

import pandas as pd
import plotly.graph_objects as go

from utils.constants import (
    AXIS_DEFAULTS,
    BASE_LAYOUT,
    BOUNDARY_COLOUR,
    INCIDENT_COLOUR,
    MAP_STYLE,
    MAP_ZOOM,
)
from utils.models import GeographicFeature
from utils.police_api import InvalidGeometryError, outer_ring


# ── Layout helpers ────────────────────────────────────────────────

def apply_base_layout(fig: go.Figure, height: int = 420, **kwargs) -> go.Figure:
    """
    Give a dashboard figure the shared frame: see-through background so
    the Streamlit theme shows through, and no drag or zoom. Both the
    category bars and the incident map pass their own margins and
    hovermode as kwargs.
    """
    fig.update_layout(**{**BASE_LAYOUT, "height": height, **kwargs})
    return fig


def style_count_axis(fig: go.Figure, title: str = "") -> go.Figure:
    """Numeric x-axis of a bar chart: incident counts, integer ticks only."""
    fig.update_xaxes(**AXIS_DEFAULTS, showticklabels=True, title=title, tickformat="d")
    return fig


def style_category_axis(fig: go.Figure) -> go.Figure:
    # Bars come in largest-first; reversing keeps the largest on top
    fig.update_yaxes(**AXIS_DEFAULTS, title="", autorange="reversed")
    return fig


# ── Reusable chart builders ───────────────────────────────────────

def horizontal_bar_chart(
    df: pd.DataFrame,
    x_col: str,
    y_col: str,
    color: str = "steelblue",
    hover_template: str | None = None,
    height: int = 420,
    x_title: str = "",
) -> go.Figure:
    """
    Standard horizontal bar chart, largest bar at the top.

    Args:
        df:              Source DataFrame, sorted largest first.
        x_col:           Column for bar length (numeric).
        y_col:           Column for bar labels (categorical).
        color:           Bar colour.
        hover_template:  Custom hovertemplate string.
        height:          Chart height in pixels.
        x_title:         X-axis title.
    """
    bar_kwargs: dict = dict(
        x=df[x_col],
        y=df[y_col],
        orientation="h",
        marker=dict(color=color),
    )
    if hover_template:
        bar_kwargs["hovertemplate"] = hover_template

    fig = go.Figure()
    fig.add_trace(go.Bar(**bar_kwargs))

    fig = apply_base_layout(fig, height=height, hovermode="y")
    fig = style_count_axis(fig, title=x_title)
    fig = style_category_axis(fig)

    return fig


# ── Specific reusable figures ─────────────────────────────────────

def category_breakdown_chart(summary: dict) -> go.Figure:
    """Incidents per category for the selected month. Used on the Overview page."""
    by_category = summary["by_category"]
    height = max(260, 40 * len(by_category) + 80)

    return horizontal_bar_chart(
        df=by_category,
        x_col="value",
        y_col="name",
        hover_template="<b>%{y}</b><br>%{x} incidents<extra></extra>",
        height=height,
        x_title="Number of incidents",
    )


def boundary_outline(feature: GeographicFeature) -> pd.DataFrame:
    """
    Outer ring of the boundary as a [longitude, latitude] DataFrame.

    Returns an empty frame if the geometry has no usable ring, so the
    map can still show incidents.
    """
    try:
        ring = outer_ring(feature.geometry)
    except InvalidGeometryError:
        return pd.DataFrame(columns=["longitude", "latitude"])
    return pd.DataFrame(
        [(p[0], p[1]) for p in ring], columns=["longitude", "latitude"],
    )


def incident_map(
    feature: GeographicFeature,
    crimes: pd.DataFrame,
    height: int = 560,
) -> go.Figure:
    """
    Parish boundary outline with one marker per incident.

    Args:
        feature: Resolved boundary.
        crimes:  Output of utils.summary.crimes_to_frame(), possibly
                 filtered to one category.
        height:  Chart height in pixels.
    """
    outline = boundary_outline(feature)
    points  = crimes.dropna(subset=["latitude", "longitude"])

    fig = go.Figure()
    fig.add_trace(go.Scattermapbox(
        lon=outline["longitude"],
        lat=outline["latitude"],
        mode="lines",
        fill="toself",
        fillcolor="rgba(37,99,235,0.08)",
        line=dict(color=BOUNDARY_COLOUR, width=2),
        name=feature.name or "Boundary",
        hoverinfo="skip",
    ))
    fig.add_trace(go.Scattermapbox(
        lon=points["longitude"],
        lat=points["latitude"],
        mode="markers",
        marker=dict(size=10, color=INCIDENT_COLOUR, opacity=0.8),
        customdata=points[["category_label", "street", "outcome"]].values,
        hovertemplate=(
            "<b>%{customdata[0]}</b><br>%{customdata[1]}"
            "<br>%{customdata[2]}<extra></extra>"
        ),
        name="Incidents",
    ))

    # Centre on the boundary; fall back to the incidents
    centre_src = outline if not outline.empty else points
    centre = dict(lat=51.16, lon=-2.055)
    if not centre_src.empty:
        centre = dict(
            lat=float(centre_src["latitude"].mean()),
            lon=float(centre_src["longitude"].mean()),
        )

    fig.update_layout(
        mapbox=dict(style=MAP_STYLE, center=centre, zoom=MAP_ZOOM),
        showlegend=False,
    )
    return apply_base_layout(fig, height=height, margin=dict(l=0, r=0, t=0, b=0))
