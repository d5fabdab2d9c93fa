"""Shared data structures for shopping route planning.

Everything here is immutable so that a change in the waypoint set can be
detected with plain equality instead of identity of the containing list.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional, Tuple


class GeoPoint(NamedTuple):
    """Latitude-first coordinate pair in degrees."""

    lat: float
    lng: float

    @classmethod
    def from_value(cls, value: Any) -> "GeoPoint":
        """Accept ``[lat, lng]``, ``(lat, lng)`` or ``{"lat", "lng"}``."""
        if isinstance(value, dict):
            lng = value.get("lng", value.get("long"))
            if value.get("lat") is None or lng is None:
                raise ValueError(f"Invalid point: {value!r}")
            return cls(float(value["lat"]), float(lng))
        try:
            lat, lng = value
            return cls(float(lat), float(lng))
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid point: {value!r}") from exc


@dataclass(frozen=True)
class Stop:
    """A shop to visit, as returned by the evaluation service."""

    store: str
    lat: float
    long: float

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(self.lat, self.long)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Stop":
        try:
            return cls(
                store=str(data["store"]),
                lat=float(data["lat"]),
                long=float(data["long"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Invalid stop: {data!r}") from exc

    def to_dict(self) -> dict:
        return {"store": self.store, "lat": self.lat, "long": self.long}


@dataclass(frozen=True)
class Leg:
    """A single start -> end segment between consecutive waypoints."""

    start: GeoPoint
    end: GeoPoint


# Road geometry for one leg, in traversal order. Empty when routing failed.
LegPath = List[GeoPoint]

# One LegPath per leg, index-aligned, boundary points trimmed.
AssembledRoute = List[LegPath]


@dataclass(frozen=True)
class RouteSnapshot:
    """A fully computed route for one generation of inputs."""

    generation: int
    origin: GeoPoint
    stops: Tuple[Stop, ...]
    legs: Tuple[Leg, ...]
    route: Tuple[Tuple[GeoPoint, ...], ...] = field(default_factory=tuple)

    def to_dict(self, bounds: Optional[Dict[str, float]] = None) -> dict:
        return {
            "generation": self.generation,
            "origin": list(self.origin),
            "stops": [stop.to_dict() for stop in self.stops],
            "legs": [[list(point) for point in path] for path in self.route],
            "bounds": bounds or {},
        }
