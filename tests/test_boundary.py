"""
tests/test_boundary.py
----------------------
BoundaryResolver: endpoint order, strategy order, failure detection
and the offline fallback.

Run with:
    pytest tests/test_boundary.py -v
"""

import pytest
import requests

from utils.boundary import BoundaryResolver, build_query_params, equals_clause
from utils.constants import CODFORD_ONS_CODE, ENDPOINTS, FALLBACK_BOUNDARY, FALLBACK_NAME
from utils.models import EndpointDescriptor, Fallback, Resolved

ENDPOINT_A = EndpointDescriptor("2024", "https://ons.test/a/query", "PAR24NM", "PAR24CD")
ENDPOINT_B = EndpointDescriptor("2023", "https://ons.test/b/query", "PAR23NM", "PAR23CD")


def empty_collection(fake_response):
    return fake_response(200, {"type": "FeatureCollection", "features": []})


def collection(fake_response, feature):
    return fake_response(200, {"type": "FeatureCollection", "features": [feature]})


def where_of(call):
    return call[2]["params"]["where"]


# ══════════════════════════════════════════════════════════════════
# Query construction
# ══════════════════════════════════════════════════════════════════

class TestQueryConstruction:

    def test_params(self):
        params = build_query_params("PAR23CD = 'E04011682'")
        assert params == {
            "where":          "PAR23CD = 'E04011682'",
            "outFields":      "*",
            "outSR":          "4326",
            "f":              "geojson",
            "returnGeometry": "true",
        }

    def test_equals_clause_is_exact_match(self):
        clause = equals_clause("PAR23NM", "Codford")
        assert clause == "PAR23NM = 'Codford'"
        assert "LIKE" not in clause.upper()

    def test_equals_clause_escapes_quotes(self):
        assert equals_clause("PAR23NM", "St Mary's") == "PAR23NM = 'St Mary''s'"

    def test_endpoints_newest_first(self):
        assert ENDPOINTS[0].vintage == "2024-MAY-BGC"
        assert ENDPOINTS[-1].vintage == "2021-BGC"


# ══════════════════════════════════════════════════════════════════
# Resolution order
# ══════════════════════════════════════════════════════════════════

class TestResolutionOrder:

    def test_first_code_match_wins(self, fake_session, fake_response, square_feature_payload):
        """A code hit on the first endpoint stops the search immediately."""
        session = fake_session(lambda m, u, kw: collection(fake_response, square_feature_payload))
        result = BoundaryResolver(session, endpoints=(ENDPOINT_A, ENDPOINT_B)).resolve()

        assert isinstance(result, Resolved)
        assert not result.is_fallback
        assert result.endpoint == ENDPOINT_A
        assert result.matched_on == "code"
        assert result.feature.name == "Codford"
        assert len(session.calls) == 1, "No further endpoints should be queried."
        assert where_of(session.calls[0]) == f"PAR24CD = '{CODFORD_ONS_CODE}'"

    def test_name_match_after_empty_code_match(self, fake_session, fake_response, square_feature_payload):
        def handler(method, url, kw):
            if kw["params"]["where"].startswith("PAR24NM"):
                return collection(fake_response, square_feature_payload)
            return empty_collection(fake_response)

        session = fake_session(handler)
        result = BoundaryResolver(session, endpoints=(ENDPOINT_A, ENDPOINT_B)).resolve()

        assert isinstance(result, Resolved)
        assert result.matched_on == "name"
        assert result.endpoint == ENDPOINT_A
        assert [where_of(c) for c in session.calls] == [
            f"PAR24CD = '{CODFORD_ONS_CODE}'",
            "PAR24NM = 'Codford'",
        ]

    def test_moves_to_next_endpoint(self, fake_session, fake_response, square_feature_payload):
        def handler(method, url, kw):
            if url == ENDPOINT_B.url:
                return collection(fake_response, square_feature_payload)
            return empty_collection(fake_response)

        session = fake_session(handler)
        result = BoundaryResolver(session, endpoints=(ENDPOINT_A, ENDPOINT_B)).resolve()

        assert result.endpoint == ENDPOINT_B
        assert result.matched_on == "code"
        assert [c[1] for c in session.calls] == [ENDPOINT_A.url, ENDPOINT_A.url, ENDPOINT_B.url]

    def test_uses_get_with_timeout(self, fake_session, fake_response, square_feature_payload):
        session = fake_session(lambda m, u, kw: collection(fake_response, square_feature_payload))
        BoundaryResolver(session, endpoints=(ENDPOINT_A,), timeout=3).resolve()

        method, _, kwargs = session.calls[0]
        assert method == "GET"
        assert kwargs["timeout"] == 3


# ══════════════════════════════════════════════════════════════════
# Failure detection and fallback
# ══════════════════════════════════════════════════════════════════

class TestFailures:

    @pytest.mark.parametrize("status, body, text", [
        (500, None, "Internal Server Error"),
        (404, None, "Not Found"),
        (200, {"error": {"code": 400, "message": "Invalid query"}}, None),
        (200, None, "<html>not json</html>"),
        (200, {"type": "FeatureCollection", "features": []}, None),
        (200, {"type": "FeatureCollection"}, None),
    ], ids=["500", "404", "error-envelope", "not-json", "empty", "no-features"])
    def test_failed_query_advances(self, fake_session, fake_response, square_feature_payload,
                                   status, body, text):
        def handler(method, url, kw):
            if url == ENDPOINT_B.url:
                return collection(fake_response, square_feature_payload)
            return fake_response(status, body, text)

        result = BoundaryResolver(fake_session(handler), endpoints=(ENDPOINT_A, ENDPOINT_B)).resolve()
        assert isinstance(result, Resolved)
        assert result.endpoint == ENDPOINT_B

    @pytest.mark.parametrize("first", [
        {"geometry": "corrupt"},
        {"type": "Feature", "geometry": ["not", "a", "dict"], "properties": {}},
        "not-a-feature",
        {"type": "Feature", "properties": {}},
    ], ids=["string-geometry", "list-geometry", "string-feature", "no-geometry"])
    def test_malformed_feature_advances(self, fake_session, fake_response, square_feature_payload, first):
        def handler(method, url, kw):
            if url == ENDPOINT_A.url:
                return fake_response(200, {"type": "FeatureCollection", "features": [first]})
            return collection(fake_response, square_feature_payload)

        result = BoundaryResolver(fake_session(handler), endpoints=(ENDPOINT_A, ENDPOINT_B)).resolve()
        assert isinstance(result, Resolved)
        assert result.endpoint == ENDPOINT_B

    @pytest.mark.parametrize("geometry", [
        {"type": "Polygon", "coordinates": []},
        {"type": "Polygon", "coordinates": [[]]},
        {"type": "MultiPolygon", "coordinates": [[]]},
        {"type": "Polygon", "coordinates": [[[0, 0], [1], [1, 1]]]},
        {"type": "Polygon", "coordinates": [[["a", "b"], [1, 0], [1, 1]]]},
    ], ids=["no-rings", "empty-ring", "multi-empty", "short-point", "text-point"])
    def test_unusable_polygon_advances(self, fake_session, fake_response, square_feature_payload, geometry):
        """A polygon the crime search could not encode is skipped like a miss."""
        unusable = {"type": "Feature", "properties": {"PAR24NM": "Codford"}, "geometry": geometry}

        def handler(method, url, kw):
            if url == ENDPOINT_A.url:
                return collection(fake_response, unusable)
            return collection(fake_response, square_feature_payload)

        session = fake_session(handler)
        result = BoundaryResolver(session, endpoints=(ENDPOINT_A, ENDPOINT_B)).resolve()
        assert isinstance(result, Resolved)
        assert result.endpoint == ENDPOINT_B
        assert [c[1] for c in session.calls] == [ENDPOINT_A.url, ENDPOINT_A.url, ENDPOINT_B.url]

    def test_transport_error_advances(self, fake_session, fake_response, square_feature_payload):
        def handler(method, url, kw):
            if url == ENDPOINT_A.url:
                raise requests.ConnectionError("connection refused")
            return collection(fake_response, square_feature_payload)

        result = BoundaryResolver(fake_session(handler), endpoints=(ENDPOINT_A, ENDPOINT_B)).resolve()
        assert result.endpoint == ENDPOINT_B

    def test_non_polygon_feature_is_rejected(self, fake_session, fake_response, square_feature_payload):
        point = {"type": "Feature", "properties": {}, "geometry": {"type": "Point", "coordinates": [0, 0]}}

        def handler(method, url, kw):
            if url == ENDPOINT_A.url:
                return collection(fake_response, point)
            return collection(fake_response, square_feature_payload)

        result = BoundaryResolver(fake_session(handler), endpoints=(ENDPOINT_A, ENDPOINT_B)).resolve()
        assert result.endpoint == ENDPOINT_B

    def test_all_fail_returns_fallback(self, fake_session, fake_response):
        """Every code and name query failing gives the static fallback, no exception."""
        def handler(method, url, kw):
            if url == ENDPOINT_A.url:
                raise requests.Timeout("timed out")
            return fake_response(200, {"error": {"code": 499, "message": "Token Required"}})

        session = fake_session(handler)
        result = BoundaryResolver(session, endpoints=(ENDPOINT_A, ENDPOINT_B)).resolve()

        assert isinstance(result, Fallback)
        assert result.is_fallback
        assert result.feature == FALLBACK_BOUNDARY
        assert result.feature.name == FALLBACK_NAME
        assert len(session.calls) == 4, "Both strategies on both endpoints should be tried."

    def test_no_endpoints_returns_fallback(self, fake_session):
        session = fake_session(lambda m, u, kw: pytest.fail("no request expected"))
        result = BoundaryResolver(session, endpoints=()).resolve()
        assert result.is_fallback
        assert session.calls == []


class TestFallbackBoundary:

    def test_is_closed_polygon(self):
        ring = FALLBACK_BOUNDARY.geometry["coordinates"][0]
        assert FALLBACK_BOUNDARY.geometry_type == "Polygon"
        assert ring[0] == ring[-1]

    def test_marked_offline(self):
        assert "(Offline Fallback)" in FALLBACK_BOUNDARY.name
        assert FALLBACK_BOUNDARY.code == CODFORD_ONS_CODE
