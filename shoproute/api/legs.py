"""Turn an origin and an ordered shop list into the legs that need routing."""

from __future__ import annotations

from typing import List, Sequence

from shoproute.api.models import GeoPoint, Leg, Stop


def build_waypoints(origin: GeoPoint, stops: Sequence[Stop]) -> List[GeoPoint]:
    """Return ``[origin, stop0, ..., stopN-1, origin]``.

    Stop order is kept exactly as given; it was decided by the evaluation
    service.
    """
    origin = GeoPoint(*origin)
    return [origin, *(stop.point for stop in stops), origin]


def plan_legs(origin: GeoPoint, stops: Sequence[Stop]) -> List[Leg]:
    """One leg per consecutive waypoint pair.

    With no stops this degenerates to a single origin -> origin leg.
    """
    waypoints = build_waypoints(origin, stops)
    return [Leg(start, end) for start, end in zip(waypoints, waypoints[1:])]


__all__ = ["build_waypoints", "plan_legs"]
