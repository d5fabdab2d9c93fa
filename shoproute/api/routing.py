# shoproute/api/routing.py
"""Road-routing client for a single leg.

Talks to an OSRM-compatible ``/route/v1`` endpoint. The service speaks
``lng,lat`` on the wire and in its GeoJSON geometry; everything returned from
here is latitude-first.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from shoproute.api.config import get_routing_config
from shoproute.api.models import GeoPoint, LegPath

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class RouteNotFoundError(Exception):
    """The routing service answered but had no route for the leg."""


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS
    return False


def format_wire_point(point: GeoPoint) -> str:
    """``lng,lat`` as the routing service expects it."""
    lat, lng = point
    return f"{lng},{lat}"


def decode_route_geometry(payload: Any) -> LegPath:
    """Extract ``routes[0].geometry.coordinates`` as latitude-first points.

    Raises:
        RouteNotFoundError: ``routes`` is missing or empty
        ValueError: the body does not have the expected shape
    """
    if not isinstance(payload, dict):
        raise ValueError("Routing response is not a JSON object")

    routes = payload.get("routes")
    if not routes:
        raise RouteNotFoundError(payload.get("code") or "NoRoute")

    try:
        coordinates = routes[0]["geometry"]["coordinates"]
        # [lng, lat] -> (lat, lng)
        return [GeoPoint(float(coord[1]), float(coord[0])) for coord in coordinates]
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise ValueError(f"Malformed route geometry: {exc}") from exc


class RoutingClient:
    """Fetches road-following geometry between two points.

    Failures never escape :meth:`fetch_leg_path`; they come back as ``None``
    so one bad leg cannot sink a whole route.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        profile: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        config = get_routing_config()
        self.base_url = (base_url or config["base_url"]).rstrip("/")
        self.profile = profile or config["profile"]
        self.timeout = timeout if timeout is not None else config["timeout_seconds"]
        self.max_retries = max_retries if max_retries is not None else config["max_retries"]
        self.transport = transport

    def build_url(self, start: GeoPoint, end: GeoPoint) -> str:
        return (
            f"{self.base_url}/route/v1/{self.profile}/"
            f"{format_wire_point(start)};{format_wire_point(end)}"
        )

    def session(self) -> httpx.AsyncClient:
        """A client to share across the legs of one assembly run."""
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    async def fetch_leg_path(
        self,
        start: GeoPoint,
        end: GeoPoint,
        http: Optional[httpx.AsyncClient] = None,
    ) -> Optional[LegPath]:
        """Return the road path from ``start`` to ``end`` or ``None``."""
        if http is None:
            async with self.session() as own_http:
                return await self.fetch_leg_path(start, end, own_http)

        url = self.build_url(start, end)
        try:
            payload = await self._get_json(http, url)
            path = decode_route_geometry(payload)
        except RouteNotFoundError as e:
            logger.warning(f"No route found {start} -> {end}: {e}")
            return None
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Routing request failed {start} -> {end}: {e}")
            return None

        logger.debug(f"Routed {start} -> {end} with {len(path)} points")
        return path

    async def _get_json(self, http: httpx.AsyncClient, url: str) -> Any:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=0.5, max=4),
            retry=retry_if_exception(_is_transient),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                response = await http.get(
                    url, params={"overview": "full", "geometries": "geojson"}
                )
                response.raise_for_status()
                return response.json()


__all__ = [
    "RoutingClient",
    "RouteNotFoundError",
    "decode_route_geometry",
    "format_wire_point",
]
