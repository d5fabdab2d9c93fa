# shoproute/api/services/route_service.py
"""Service layer for multi-leg route assembly."""

import asyncio
import logging
from typing import Any, List, Optional, Sequence, Tuple

from shoproute.api.config import get_routing_config
from shoproute.api.evaluation import stops_from_evaluation
from shoproute.api.legs import plan_legs
from shoproute.api.models import AssembledRoute, GeoPoint, Leg, LegPath, RouteSnapshot, Stop
from shoproute.api.routing import RoutingClient

logger = logging.getLogger(__name__)


def parse_route_request(data: Any) -> Tuple[Optional[GeoPoint], List[Stop]]:
    """Read ``origin`` plus ``stops`` (or an ``evaluation`` result) from a request body.

    A missing origin comes back as ``None``; the caller decides whether that
    means "nothing to do" or a bad request.
    """
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")

    origin = data.get("origin")
    origin = GeoPoint.from_value(origin) if origin is not None else None

    if data.get("evaluation") is not None:
        stops = stops_from_evaluation(data["evaluation"])
    else:
        raw_stops = data.get("stops") or []
        if not isinstance(raw_stops, list):
            raise ValueError("stops must be a list")
        stops = [Stop.from_dict(stop) for stop in raw_stops]

    return origin, stops


def trim_leg_boundaries(paths: Sequence[LegPath]) -> AssembledRoute:
    """Drop the shared end point of every leg except the last.

    A leg's last point is the next leg's first, so concatenating the trimmed
    paths never repeats a vertex at a boundary. The final leg keeps its end,
    the return to origin.
    """
    last = len(paths) - 1
    return [
        list(path[:-1]) if path and index < last else list(path)
        for index, path in enumerate(paths)
    ]


class RouteAssembler:
    """Routes every leg and stitches the results in leg order."""

    def __init__(
        self,
        routing_client: Optional[RoutingClient] = None,
        max_concurrent_legs: Optional[int] = None,
        sequential: Optional[bool] = None,
    ):
        config = get_routing_config()
        self.routing_client = routing_client or RoutingClient()
        self.max_concurrent_legs = (
            config["max_concurrent_legs"] if max_concurrent_legs is None else max_concurrent_legs
        )
        if self.max_concurrent_legs < 1:
            raise ValueError("max_concurrent_legs must be at least 1")
        self.sequential = config["sequential"] if sequential is None else sequential

    async def assemble(self, legs: Sequence[Leg]) -> AssembledRoute:
        """Return one path per leg, index-aligned with ``legs``.

        A leg the routing service could not handle yields an empty path; the
        other legs are unaffected.
        """
        if not legs:
            return []

        async with self.routing_client.session() as http:
            if self.sequential:
                raw = []
                for leg in legs:
                    raw.append(await self.routing_client.fetch_leg_path(leg.start, leg.end, http))
            else:
                semaphore = asyncio.Semaphore(self.max_concurrent_legs)

                async def fetch(leg: Leg) -> Optional[LegPath]:
                    async with semaphore:
                        return await self.routing_client.fetch_leg_path(leg.start, leg.end, http)

                # gather keeps argument order regardless of completion order
                raw = await asyncio.gather(*(fetch(leg) for leg in legs))

        failed = [index for index, path in enumerate(raw) if path is None]
        if failed:
            logger.warning(f"Routing failed for legs {failed} of {len(legs)}")
        else:
            logger.debug(f"Routed all {len(legs)} legs")

        return trim_leg_boundaries([path or [] for path in raw])


class RouteService:
    """Plans and assembles a route for one snapshot of inputs."""

    def __init__(self, assembler: Optional[RouteAssembler] = None):
        self.assembler = assembler or RouteAssembler()

    async def build_route(self, origin: GeoPoint, stops: Sequence[Stop]) -> AssembledRoute:
        """Route origin -> stops -> origin, one path per leg."""
        return await self.assembler.assemble(plan_legs(origin, stops))

    async def build_snapshot(
        self,
        origin: GeoPoint,
        stops: Sequence[Stop],
        generation: int = 0,
    ) -> RouteSnapshot:
        """Plan the legs, route them, and bundle everything for rendering."""
        origin = GeoPoint(*origin)
        legs: List[Leg] = plan_legs(origin, stops)
        route = await self.build_route(origin, stops)
        return RouteSnapshot(
            generation=generation,
            origin=origin,
            stops=tuple(stops),
            legs=tuple(legs),
            route=tuple(tuple(path) for path in route),
        )


__all__ = ["RouteAssembler", "RouteService", "parse_route_request", "trim_leg_boundaries"]
