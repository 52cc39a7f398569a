"""
utils/boundary.py
-----------------
Resolves the Codford parish boundary from the ONS Open Geography Portal.

ONS publishes a new boundary vintage most years and regularly moves
services or changes layer IDs, so there is no single URL that can be
relied on. BoundaryResolver walks ENDPOINTS (newest vintage first) and
tries two strategies per endpoint:

  1. Match the official area code (stable across name changes).
  2. Match the exact parish name (backup if codes were reissued).

The first polygon feature found wins. Individual endpoint failures are
not errors: a transport exception, a non-2xx status, an ArcGIS error
envelope returned with HTTP 200, or an empty feature collection all
just move on to the next strategy. If nothing matches, the static
FALLBACK_BOUNDARY is returned, so resolve() never raises.

Usage:
    from utils.boundary import BoundaryResolver

    result = BoundaryResolver().resolve()
    if result.is_fallback:
        ...
"""

from __future__ import annotations

import requests

from utils.constants import (
    CODFORD_NAME,
    CODFORD_ONS_CODE,
    ENDPOINTS,
    FALLBACK_BOUNDARY,
    REQUEST_TIMEOUT,
)
from utils.models import (
    EndpointDescriptor,
    Fallback,
    GeographicFeature,
    Resolved,
)
from utils.police_api import InvalidGeometryError, outer_ring

_ACCEPT = "application/json, application/geo+json"


def build_query_params(where: str) -> dict:
    """ArcGIS REST query parameters for a single-feature GeoJSON lookup."""
    return {
        "where":          where,
        "outFields":      "*",
        "outSR":          "4326",  # WGS84 longitude/latitude
        "f":              "geojson",
        "returnGeometry": "true",
    }


def equals_clause(field_name: str, value: str) -> str:
    """
    Attribute-equality filter, e.g. PAR23CD = 'E04011682'.

    Single quotes in the value are doubled, as ArcGIS SQL expects.
    """
    escaped = value.replace("'", "''")
    return f"{field_name} = '{escaped}'"


class BoundaryResolver:
    """
    Sequential try-list over ONS boundary endpoints.

    Args:
        session:   requests.Session (or compatible) used for every query.
                   A new session is created when omitted.
        endpoints: Ordered EndpointDescriptors, preferred first.
        area_name: Exact display name used by the name-match strategy.
        fallback:  Feature returned when every endpoint fails.
        timeout:   Per-request timeout in seconds.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        endpoints: tuple[EndpointDescriptor, ...] = ENDPOINTS,
        area_name: str = CODFORD_NAME,
        fallback: GeographicFeature = FALLBACK_BOUNDARY,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.session   = session if session is not None else requests.Session()
        self.endpoints = tuple(endpoints)
        self.area_name = area_name
        self.fallback  = fallback
        self.timeout   = timeout

    def resolve(self, area_code: str = CODFORD_ONS_CODE) -> Resolved | Fallback:
        print("  Starting ONS boundary search...")

        for endpoint in self.endpoints:
            strategies = (
                ("code", equals_clause(endpoint.code_field, area_code)),
                ("name", equals_clause(endpoint.name_field, self.area_name)),
            )
            for matched_on, where in strategies:
                feature = self._query(endpoint, where)
                if feature is not None:
                    print(f"  Found boundary in {endpoint.vintage} using {matched_on}.")
                    return Resolved(feature, endpoint, matched_on)

        print("  WARNING: all ONS endpoints failed. Using fallback boundary.")
        return Fallback(self.fallback)

    def _query(self, endpoint: EndpointDescriptor, where: str) -> GeographicFeature | None:
        """Run one query. Returns the first polygon feature, or None on any failure."""
        try:
            response = self.session.get(
                endpoint.url,
                params=build_query_params(where),
                headers={"Accept": _ACCEPT},
                timeout=self.timeout,
            )
        except requests.RequestException:
            return None

        if not response.ok:
            return None

        try:
            data = response.json()
        except ValueError:
            return None

        if not isinstance(data, dict):
            return None

        # ArcGIS reports some failures as HTTP 200 with an error object
        error = data.get("error")
        if error:
            detail = error
            if isinstance(error, dict):
                detail = error.get("message") or error.get("code")
            print(f"  WARNING: ONS API returned application error ({endpoint.vintage}): {detail}")
            return None

        features = data.get("features")
        if not isinstance(features, list) or not features:
            return None

        first = features[0]
        if not isinstance(first, dict) or not isinstance(first.get("geometry"), dict):
            return None

        feature = GeographicFeature.from_geojson(first)
        if not feature.is_polygonal:
            return None

        # The ring must be usable by the crime search, not just typed Polygon
        try:
            outer_ring(feature.geometry)
        except InvalidGeometryError:
            return None
        return feature
