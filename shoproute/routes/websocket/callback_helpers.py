# shoproute/routes/websocket/callback_helpers.py
"""Helper functions for wiring route publication to Socket.IO events."""

import logging
import time
from typing import Callable

from shoproute.api.models import RouteSnapshot
from shoproute.api.services.map_service import MapService

logger = logging.getLogger(__name__)


def make_route_publisher(socketio, sid: str, namespace: str = "/shop/ws", on_sent=None) -> Callable[[RouteSnapshot], None]:
    """
    Build the on_publish callback for a client's RecomputeController.
    Bridges published routes → `render_route` events in the client's room.
    """
    def _on_publish(snapshot: RouteSnapshot) -> None:
        try:
            payload = MapService.build_render_payload(snapshot)
            payload["timestamp"] = time.time()
            socketio.emit("render_route", payload, room=sid, namespace=namespace)
            logger.info(f"🗺️ Emitted render_route generation {snapshot.generation} to {sid}")
            if on_sent is not None:
                on_sent(snapshot)
        except Exception as exc:
            logger.exception("Failed emitting render_route: %s", exc)

    return _on_publish
