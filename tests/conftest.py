"""
tests/conftest.py
-----------------
Stub HTTP session shared by the service tests. The services take their
session through the constructor, so no test touches the network.
"""

import json

import pytest
import requests


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text=None):
        self.status_code = status_code
        self._json = json_data
        if text is None:
            text = json.dumps(json_data) if json_data is not None else ""
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """
    Records every call and answers from `handler(method, url, kwargs)`.

    The handler may return a FakeResponse or raise an exception to
    simulate a transport failure.
    """

    def __init__(self, handler):
        self.handler = handler
        self.calls = []

    def _call(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.handler(method, url, kwargs)

    def get(self, url, **kwargs):
        return self._call("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._call("POST", url, **kwargs)


@pytest.fixture
def fake_response():
    """Factory: fake_response(status_code, json_data, text) -> FakeResponse."""
    return FakeResponse


@pytest.fixture
def fake_session():
    """Factory: fake_session(handler) -> FakeSession."""
    return FakeSession


@pytest.fixture
def square_feature_payload():
    return {
        "type": "Feature",
        "properties": {"PAR24NM": "Codford", "PAR24CD": "E04011682"},
        "geometry": {
            "type": "Polygon",
            "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]],
        },
    }


def _crime_payload(crime_id, category="burglary", street="On or near High Street",
                   outcome=None, month="2024-03"):
    return {
        "category": category,
        "location_type": "Force",
        "location": {
            "latitude": "51.159",
            "longitude": "-2.051",
            "street": {"id": 1000 + crime_id, "name": street},
        },
        "context": "",
        "outcome_status": outcome,
        "persistent_id": f"pid-{crime_id}",
        "id": crime_id,
        "location_subtype": "",
        "month": month,
    }


@pytest.fixture
def crime_payload():
    """Factory: crime_payload(crime_id, category, ...) -> police.uk crime dict."""
    return _crime_payload
