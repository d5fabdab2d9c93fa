import asyncio

import httpx
import pytest

from shoproute.api.models import GeoPoint, Stop
from shoproute.api.routing import RoutingClient

BASE_URL = "http://osrm.test"

ORIGIN = GeoPoint(20.3488, 85.8162)
STOPS = [
    Stop(store="A", lat=20.35, long=85.82),
    Stop(store="B", lat=20.36, long=85.83),
]


def osrm_body(coordinates):
    return {
        "code": "Ok",
        "routes": [{"geometry": {"type": "LineString", "coordinates": coordinates}}],
    }


def wire_points(request):
    """(start, end) as [lng, lat] lists, read back from the request path."""
    pair = request.url.path.rsplit("/", 1)[-1]
    start, end = pair.split(";")
    return [float(v) for v in start.split(",")], [float(v) for v in end.split(",")]


def straight_line(request):
    """Fake geometry: start, midpoint, end (all lng-first)."""
    start, end = wire_points(request)
    middle = [(start[0] + end[0]) / 2, (start[1] + end[1]) / 2]
    return osrm_body([start, middle, end])


def midpoint(a, b):
    return GeoPoint((a.lat + b.lat) / 2, (a.lng + b.lng) / 2)


def make_client(handler, max_retries=0):
    return RoutingClient(
        base_url=BASE_URL,
        profile="driving",
        timeout=5,
        max_retries=max_retries,
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def line_client():
    return make_client(lambda request: httpx.Response(200, json=straight_line(request)))


@pytest.fixture
def run():
    return asyncio.run
