# shoproute/api/services/map_service.py
"""Service layer for map-related operations."""

import logging
from typing import Dict, Any

from shoproute.api.models import RouteSnapshot

logger = logging.getLogger(__name__)


class MapService:
    """Shapes computed routes for the map client."""

    @staticmethod
    def calculate_bounds(snapshot: RouteSnapshot) -> Dict[str, float]:
        """Calculate bounding box for the origin, stops and route geometry.

        Args:
            snapshot: Computed route

        Returns:
            Dictionary with north, south, east, west bounds
        """
        points = [snapshot.origin]
        points.extend(stop.point for stop in snapshot.stops)
        for path in snapshot.route:
            points.extend(path)

        lats = [point.lat for point in points]
        lngs = [point.lng for point in points]

        return {
            'north': max(lats),
            'south': min(lats),
            'east': max(lngs),
            'west': min(lngs)
        }

    @staticmethod
    def format_stop_label(index: int, store: str) -> str:
        """Marker label for the ``index``-th (1-based) stop."""
        return f"{index}.) {store}"

    @staticmethod
    def build_render_payload(snapshot: RouteSnapshot) -> Dict[str, Any]:
        """Everything the map client needs to draw markers and leg lines.

        Args:
            snapshot: Computed route

        Returns:
            JSON-serialisable payload
        """
        payload = snapshot.to_dict(bounds=MapService.calculate_bounds(snapshot))
        for index, stop in enumerate(payload["stops"], 1):
            stop["label"] = MapService.format_stop_label(index, stop["store"])

        empty_legs = sum(1 for leg in payload["legs"] if not leg)
        if empty_legs:
            logger.info(f"Route generation {snapshot.generation} has {empty_legs} unrouted legs")
        return payload


# Export for use in other modules
__all__ = ['MapService']
