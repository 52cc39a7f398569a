"""
utils/police_api.py
-------------------
Client for the police.uk street-level crime API.

The custom-area search takes the area as a polygon string of
"lat,lng" pairs joined by ":". PolygonQueryEncoder turns a resolved
GeographicFeature into that string and runs the search:

  1. Take the outer ring of the (first) polygon.
  2. Stride-reduce the ring to at most max_points points.
  3. Close the ring explicitly (first point == last point).
  4. Render every point as lat,lng with 5 fixed decimals (~1 m).

Known limitation: for a MultiPolygon only the first polygon's outer
ring is used. Other disjoint parts and any holes are ignored.

Errors:
    InvalidGeometryError  – no usable ring; raised before any request.
    UpstreamSearchError   – non-2xx from the search, carries the status
                            code and a short excerpt of the body.
Transport errors (requests.RequestException) propagate unchanged.
Nothing here retries; callers decide how to degrade.
"""

from __future__ import annotations

import datetime as dt
import math
import numbers
from typing import Sequence

import requests

from utils.constants import (
    ERROR_EXCERPT_CHARS,
    MAX_POLY_POINTS,
    POLICE_API_BASE,
    REQUEST_TIMEOUT,
)
from utils.models import GeographicFeature, IncidentRecord

Point = Sequence[float]  # GeoJSON order: (longitude, latitude)


# ── Errors ────────────────────────────────────────────────────────

class PoliceApiError(Exception):
    """Base class for police.uk client errors."""


class InvalidGeometryError(PoliceApiError):
    """The boundary has no usable polygon ring."""


class UpstreamSearchError(PoliceApiError):
    """The crime search returned a non-success status."""

    def __init__(self, status_code: int, excerpt: str):
        self.status_code = status_code
        self.excerpt     = excerpt
        super().__init__(f"Police API Error ({status_code}): {excerpt}")


# ── Polygon encoding ──────────────────────────────────────────────

def outer_ring(geometry: dict | None) -> list:
    """
    Return the outer ring of a Polygon, or of the first polygon of a
    MultiPolygon.

    Raises InvalidGeometryError for missing or unsupported geometry, an
    empty ring, or a point that is not a finite (lng, lat) pair.
    """
    if not geometry or not isinstance(geometry, dict):
        raise InvalidGeometryError("Boundary has no geometry.")

    geom_type = geometry.get("type")
    coords    = geometry.get("coordinates") or []

    try:
        if geom_type == "Polygon":
            ring = coords[0]
        elif geom_type == "MultiPolygon":
            ring = coords[0][0]
        else:
            raise InvalidGeometryError(f"Unsupported geometry type: {geom_type!r}")
    except (IndexError, TypeError, KeyError):
        raise InvalidGeometryError(f"Malformed {geom_type} coordinates.") from None

    if not ring:
        raise InvalidGeometryError("Boundary outer ring is empty.")
    if not isinstance(ring, (list, tuple)):
        raise InvalidGeometryError(f"Malformed {geom_type} ring.")

    for point in ring:
        if not _is_position(point):
            raise InvalidGeometryError(f"Malformed ring point: {point!r}")
    return list(ring)


def _is_position(point) -> bool:
    """A GeoJSON position: at least two finite numbers (longitude, latitude)."""
    if not isinstance(point, (list, tuple)) or len(point) < 2:
        return False
    return all(
        isinstance(v, numbers.Real) and not isinstance(v, bool) and math.isfinite(v)
        for v in point[:2]
    )


def stride_reduce(points: list, max_points: int) -> list:
    """Keep every k-th point, k = ceil(n / max_points), preserving order."""
    if len(points) <= max_points:
        return list(points)
    step = math.ceil(len(points) / max_points)
    return points[::step]


def _same_point(a: Point, b: Point) -> bool:
    return a[0] == b[0] and a[1] == b[1]


def close_ring(points: list, max_points: int | None = None) -> list:
    """
    Append the first point if the ring is open.

    When max_points is given and closing would exceed it, the last
    non-closing point is dropped first so the cap still holds.
    """
    points = list(points)
    if not points or _same_point(points[0], points[-1]):
        return points
    if max_points is not None and len(points) + 1 > max_points:
        points = points[:max_points - 1]
    points.append(points[0])
    return points


def format_poly_string(points: list) -> str:
    """(lng, lat) points -> 'lat,lng:lat,lng' with 5 fixed decimals."""
    return ":".join(
        f"{float(lat):.5f},{float(lng):.5f}" for lng, lat, *_ in points
    )


def encode_boundary(feature: GeographicFeature, max_points: int = MAX_POLY_POINTS) -> str:
    if max_points < 3:
        raise ValueError(f"max_points must be at least 3, got {max_points}")

    ring = outer_ring(feature.geometry)
    ring = stride_reduce(ring, max_points)
    ring = close_ring(ring, max_points)
    return format_poly_string(ring)


# ── Available months ──────────────────────────────────────────────

def fallback_dates(today: dt.date | None = None, months: int = 12) -> list[str]:
    """
    The last `months` reporting periods as YYYY-MM, newest first,
    starting two months before `today` (police.uk publishes with a lag).
    """
    today = today or dt.date.today()
    index = today.year * 12 + (today.month - 1) - 2

    dates = []
    for i in range(months):
        year, month0 = divmod(index - i, 12)
        dates.append(f"{year:04d}-{month0 + 1:02d}")
    return dates


# ── Client ────────────────────────────────────────────────────────

class PolygonQueryEncoder:
    """
    Encodes boundaries into police.uk polygon strings and runs the
    custom-area crime search.

    Args:
        session:    requests.Session (or compatible). Created if omitted.
        max_points: Point cap for the encoded polygon.
        base_url:   police.uk API root.
        timeout:    Per-request timeout in seconds.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        max_points: int = MAX_POLY_POINTS,
        base_url: str = POLICE_API_BASE,
        timeout: float = REQUEST_TIMEOUT,
    ):
        if max_points < 3:
            raise ValueError(f"max_points must be at least 3, got {max_points}")
        self.session    = session if session is not None else requests.Session()
        self.max_points = max_points
        self.base_url   = base_url.rstrip("/")
        self.timeout    = timeout

    def encode(self, feature: GeographicFeature) -> str:
        return encode_boundary(feature, self.max_points)

    def fetch_incidents(self, poly: str, period: str) -> list[IncidentRecord]:
        """
        Run the custom-area search for one month.

        Args:
            poly:   Encoded polygon string from encode().
            period: Reporting month as YYYY-MM.

        Returns:
            IncidentRecords in the order the API returned them. An empty
            list is a valid answer (no recorded crime that month).
        """
        if not poly:
            raise InvalidGeometryError("Empty polygon string; refusing to search.")

        response = self.session.post(
            f"{self.base_url}/crimes-street/all-crime",
            data={"poly": poly, "date": period},
            timeout=self.timeout,
        )

        if not response.ok:
            # Body is sometimes an HTML error page; keep only the start
            text    = response.text or ""
            excerpt = text[:ERROR_EXCERPT_CHARS] or f"Status {response.status_code}"
            raise UpstreamSearchError(response.status_code, excerpt)

        return [IncidentRecord.from_api(item) for item in response.json()]

    def fetch_crimes_in_boundary(
        self, feature: GeographicFeature, period: str,
    ) -> list[IncidentRecord]:
        """Encode `feature` and search it for `period`."""
        return self.fetch_incidents(self.encode(feature), period)

    def fetch_available_dates(self) -> list[str]:
        """
        Months with published street-level data, newest first.

        Falls back to fallback_dates() if the request fails or the API
        returns nothing.
        """
        try:
            response = self.session.get(
                f"{self.base_url}/crimes-street-dates",
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            print(f"  WARNING: could not fetch available dates ({e}). "
                  "Using fallback list.")
            return fallback_dates()

        dates = [
            d["date"] for d in data
            if isinstance(d, dict) and d.get("date")
        ] if isinstance(data, list) else []

        if not dates:
            print("  WARNING: police.uk returned no dates. Using fallback list.")
            return fallback_dates()
        return dates
