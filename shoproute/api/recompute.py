# shoproute/api/recompute.py
"""Re-run route assembly whenever the waypoint set changes."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Sequence, Tuple

from shoproute.api.models import GeoPoint, RouteSnapshot, Stop
from shoproute.api.services.route_service import RouteService

logger = logging.getLogger(__name__)


class RecomputeController:
    """Tracks the latest ``(origin, stops)`` input and its computed route.

    Every change of input issues a new generation number. A computation only
    publishes when its generation is still the newest one at completion, so a
    slow run for superseded inputs can never overwrite a newer route.
    In-flight requests of a superseded run are not cancelled, only ignored.
    """

    def __init__(
        self,
        route_service: Optional[RouteService] = None,
        on_publish: Optional[Callable[[RouteSnapshot], None]] = None,
    ):
        self.route_service = route_service or RouteService()
        self.on_publish = on_publish

        # Recomputations may run in Socket.IO background threads
        self.lock = threading.Lock()
        # Held across the generation check and on_publish so a superseded
        # run cannot emit after a newer one. observe() only takes self.lock.
        self.publish_lock = threading.Lock()
        self._generation = 0
        self._inputs: Optional[Tuple[Optional[GeoPoint], Tuple[Stop, ...]]] = None
        self._latest: Optional[RouteSnapshot] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def latest(self) -> Optional[RouteSnapshot]:
        """Last published route, or ``None`` if nothing was computed yet."""
        return self._latest

    def observe(self, origin: Optional[GeoPoint], stops: Optional[Sequence[Stop]]) -> Optional[int]:
        """Record new inputs and return the generation to compute, if any.

        Returns ``None`` when the inputs equal the previously observed ones, or
        when there is nothing to route (unknown origin or no stops). In the
        latter case the generation still advances so that older in-flight runs
        are discarded.
        """
        origin = GeoPoint(*origin) if origin is not None else None
        inputs = (origin, tuple(stops or ()))

        with self.lock:
            if inputs == self._inputs:
                return None
            self._inputs = inputs
            self._generation += 1
            generation = self._generation

        if origin is None or not inputs[1]:
            logger.debug(f"Generation {generation}: no origin or stops, nothing to route")
            return None

        logger.info(f"Generation {generation}: routing {len(inputs[1])} stops")
        return generation

    async def recompute(
        self,
        generation: int,
        origin: GeoPoint,
        stops: Sequence[Stop],
    ) -> Optional[RouteSnapshot]:
        """Compute the route for ``generation`` and publish it if still current."""
        snapshot = await self.route_service.build_snapshot(origin, stops, generation)

        with self.publish_lock:
            with self.lock:
                if generation != self._generation:
                    logger.debug(f"Discarding stale route generation {generation} (latest {self._generation})")
                    return None
                self._latest = snapshot

            logger.info(f"Published route generation {generation} with {len(snapshot.route)} legs")
            if self.on_publish is not None:
                self.on_publish(snapshot)
        return snapshot

    async def refresh(
        self,
        origin: Optional[GeoPoint],
        stops: Optional[Sequence[Stop]],
    ) -> Optional[RouteSnapshot]:
        """Observe the inputs and, if they changed, recompute right away."""
        generation = self.observe(origin, stops)
        if generation is None:
            return None
        return await self.recompute(generation, origin, stops)


__all__ = ["RecomputeController"]
