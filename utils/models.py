"""
utils/models.py
---------------
Plain data types shared by the boundary and police.uk services.

GeographicFeature wraps a single GeoJSON Feature. Only Polygon and
MultiPolygon geometries are meaningful here; the encoder uses the outer
ring of the first polygon and ignores any other parts or holes.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

POLYGON_TYPES = ("Polygon", "MultiPolygon")


@dataclass(frozen=True)
class EndpointDescriptor:
    """One candidate ONS boundary service and the fields to match on."""
    vintage: str
    url: str
    name_field: str
    code_field: str


@dataclass(frozen=True)
class GeographicFeature:
    geometry: dict
    properties: dict = field(default_factory=dict)

    @classmethod
    def from_geojson(cls, payload: dict) -> "GeographicFeature":
        """
        Build a feature from a raw GeoJSON Feature dict.

        The payload is deep-copied so later changes to the source dict
        cannot leak into the feature.
        """
        payload    = copy.deepcopy(payload)
        geometry   = payload.get("geometry")
        properties = payload.get("properties")
        return cls(
            geometry=geometry if isinstance(geometry, dict) else {},
            properties=properties if isinstance(properties, dict) else {},
        )

    @property
    def geometry_type(self) -> str | None:
        return self.geometry.get("type")

    @property
    def is_polygonal(self) -> bool:
        return self.geometry_type in POLYGON_TYPES

    def _first_property(self, suffix: str) -> str | None:
        # Parish fields first (PAR23NM), then any other vintage-style field
        keys = sorted(
            (k for k in self.properties if k.upper().endswith(suffix)),
            key=lambda k: not k.upper().startswith("PAR"),
        )
        return self.properties[keys[0]] if keys else None

    @property
    def name(self) -> str | None:
        """Parish name, read from whichever PARyyNM field the vintage uses."""
        return self._first_property("NM")

    @property
    def code(self) -> str | None:
        return self._first_property("CD")

    def to_geojson(self) -> dict:
        return {
            "type": "Feature",
            "properties": copy.deepcopy(self.properties),
            "geometry": copy.deepcopy(self.geometry),
        }


@dataclass(frozen=True)
class Resolved:
    """A boundary found on one of the ONS endpoints."""
    feature: GeographicFeature
    endpoint: EndpointDescriptor
    matched_on: str  # "code" or "name"

    is_fallback = False


@dataclass(frozen=True)
class Fallback:
    """The static approximate boundary, used when every endpoint failed."""
    feature: GeographicFeature

    is_fallback = True


@dataclass(frozen=True)
class Outcome:
    category: str | None
    date: str | None


@dataclass(frozen=True)
class IncidentRecord:
    """
    One police.uk street-level crime.

    Built from the API object as received: no shape validation, missing
    keys become None. Latitude and longitude stay as the strings the
    API returns.
    """
    id: int | None
    category: str | None
    month: str | None
    latitude: str | None
    longitude: str | None
    street_id: int | None
    street_name: str | None
    outcome: Outcome | None = None
    persistent_id: str | None = None
    location_type: str | None = None
    location_subtype: str | None = None
    context: str | None = None

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "IncidentRecord":
        location = payload.get("location") or {}
        street   = location.get("street") or {}
        status   = payload.get("outcome_status")

        outcome = None
        if status:
            outcome = Outcome(
                category=status.get("category"),
                date=status.get("date"),
            )

        return cls(
            id=payload.get("id"),
            category=payload.get("category"),
            month=payload.get("month"),
            latitude=location.get("latitude"),
            longitude=location.get("longitude"),
            street_id=street.get("id"),
            street_name=street.get("name"),
            outcome=outcome,
            persistent_id=payload.get("persistent_id"),
            location_type=payload.get("location_type"),
            location_subtype=payload.get("location_subtype"),
            context=payload.get("context"),
        )
