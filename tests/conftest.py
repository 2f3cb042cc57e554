"""
Shared pytest fixtures for the tixbit test suite.

The network is replaced by an httpx.MockTransport: each test queues the
responses it expects and inspects the requests the client sent.
"""

from typing import Any, Callable, List, Union

import httpx
import pytest

from tixbit import TixBitClient
from tixbit.core.config import Settings

Reply = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class FakeTixBit:
    """Scripted upstream: replies are consumed in order, requests are recorded."""

    def __init__(self) -> None:
        self.replies: List[Reply] = []
        self.requests: List[httpx.Request] = []

    def queue(self, *replies: Reply) -> "FakeTixBit":
        self.replies.extend(replies)
        return self

    def json(self, body: Any, status: int = 200) -> "FakeTixBit":
        return self.queue(httpx.Response(status, json=body))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.replies:
            raise AssertionError(f"unexpected request: {request.url}")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        return reply

    @property
    def urls(self) -> List[str]:
        return [str(r.url) for r in self.requests]


@pytest.fixture
def upstream():
    """Return a fresh scripted upstream."""
    return FakeTixBit()


@pytest.fixture
def make_client(upstream):
    """
    Return a function that builds a TixBitClient wired to the scripted upstream.

    Example:
        client = make_client(api_key="secret")
    """

    def _make_client(**overrides) -> TixBitClient:
        settings = Settings(base_url=overrides.pop("base_url", "https://tixbit.com"), **overrides)
        return TixBitClient(settings, transport=httpx.MockTransport(upstream.handler))

    return _make_client


@pytest.fixture
def client(make_client):
    """Client on the default host, no API key."""
    return make_client()


@pytest.fixture
def seating_chart_payload():
    """Primary seating-chart response, relative asset URLs."""
    return {
        "success": True,
        "event_id": "provider-36PB9ZN",
        "venue_id": "2D2ZBN6G",
        "venue_name": "State Farm Arena",
        "configuration_id": "VGJBV",
        "configuration_name": "NBA - Atlanta Hawks",
        "background_image": "/api/seatmap/assets?url=bg",
        "coordinates_url": "/api/seatmap/assets?url=coords",
        "has_coordinates": True,
        "capacity": 18118,
        "venue_data": {
            "name": "State Farm Arena",
            "address": "1 Philips Dr Nw",
            "city": "Atlanta",
            "region": "GA",
            "country": "US",
            "time_zone": "America/New_York",
        },
    }


@pytest.fixture
def coordinates_payload():
    """Coordinates document with two zones."""
    return {
        "zones": [
            {
                "id": "zone-1",
                "name": "Section",
                "sections": [
                    {
                        "id": "80850",
                        "name": "204",
                        "labels": [
                            {"text": "Other", "x": 1, "y": 1},
                            {"text": "204", "x": 134.5, "y": 302.6, "size": 19.9, "angle": 0},
                        ],
                        "shape": {"path": "M127,244.8L200,300Z"},
                    },
                    {
                        "id": "80851",
                        "name": "101",
                        "labels": [{"text": "101", "x": 400, "y": 100}],
                    },
                ],
            },
            {
                "id": "zone-2",
                "name": "Floor",
                "sections": [
                    {"id": "90001", "name": "FLOOR1", "labels": []},
                ],
            },
        ]
    }
