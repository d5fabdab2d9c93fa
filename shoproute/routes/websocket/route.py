# shoproute/routes/websocket/route.py
"""WebSocket handlers that keep the client's map route up to date."""

import asyncio
import logging
import time
from flask import request

from shoproute.api.route_sessions import get_route_session_manager
from shoproute.api.services.map_service import MapService
from shoproute.api.services.route_service import parse_route_request
from .base import BaseWebSocketHandler, NAMESPACE

logger = logging.getLogger(__name__)


class RouteHandler(BaseWebSocketHandler):
    """Handles waypoint updates and route requests."""

    def _run_recompute(self, controller, generation, origin, stops, sid):
        """Background task: compute one generation on its own event loop."""
        try:
            asyncio.run(controller.recompute(generation, origin, stops))
        except Exception as exc:
            logger.exception(f"Route computation {generation} failed for {sid}: {exc}")
            self.emit_to_client('error', {'message': str(exc), 'event': 'update_waypoints'}, room=sid)

    def register_handlers(self):
        """Register route-related event handlers."""

        @self.socketio.on("update_waypoints", namespace=NAMESPACE)
        def handle_update_waypoints(data):
            """New origin and/or stop list from the client."""
            sid = request.sid
            route_session = get_route_session_manager().get_session(sid)
            if route_session is None:
                self.emit_to_client("error", {"message": "No route session"})
                return

            try:
                origin, stops = parse_route_request(data)
            except ValueError as exc:
                self.handle_error(exc, "update_waypoints")
                return

            route_session.updates_received += 1
            controller = route_session.controller
            generation = controller.observe(origin, stops)
            self.log_event("update_waypoints", {
                "origin": origin,
                "stops": len(stops),
                "generation": generation,
            })

            if generation is None:
                self.emit_to_client("waypoints_received", {
                    "generation": controller.generation,
                    "scheduled": False,
                    "timestamp": time.time()
                })
                return

            self.socketio.start_background_task(
                self._run_recompute, controller, generation, origin, stops, sid
            )
            self.emit_to_client("waypoints_received", {
                "generation": generation,
                "scheduled": True,
                "timestamp": time.time()
            })

        @self.socketio.on("get_route", namespace=NAMESPACE)
        def handle_get_route(data=None):
            """Send the latest computed route, if any."""
            route_session = get_route_session_manager().get_session(request.sid)
            snapshot = route_session.controller.latest if route_session else None

            if snapshot is None:
                self.emit_to_client("route_pending", {"timestamp": time.time()})
                return

            try:
                self.emit_to_client("render_route", MapService.build_render_payload(snapshot))
            except Exception as exc:
                self.handle_error(exc, "get_route")

        @self.socketio.on("get_stats", namespace=NAMESPACE)
        def handle_get_stats():
            """Get route session statistics for debugging."""
            self.emit_to_client("stats", get_route_session_manager().get_stats())
