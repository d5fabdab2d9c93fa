# shoproute/api/route_sessions.py
"""Per-client route state for connected map clients."""

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from shoproute.api.models import RouteSnapshot
from shoproute.api.recompute import RecomputeController
from shoproute.api.services.route_service import RouteService

logger = logging.getLogger(__name__)


class RouteSession:
    """One connected client and its recompute controller."""

    def __init__(
        self,
        sid: str,
        on_publish: Optional[Callable[[RouteSnapshot], None]] = None,
        route_service: Optional[RouteService] = None,
    ):
        self.sid = sid
        self.created_at = datetime.now()
        self.last_activity = datetime.now()
        self.controller = RecomputeController(route_service, on_publish=on_publish)

        # Stats
        self.updates_received = 0
        self.routes_published = 0

    def touch(self):
        self.last_activity = datetime.now()


class RouteSessionManager:
    """Manages the route sessions of all connected clients."""

    def __init__(self, route_service_factory: Optional[Callable[[], RouteService]] = None):
        self.sessions: Dict[str, RouteSession] = {}
        # Builds the RouteService of each new session; default routing when None
        self.route_service_factory = route_service_factory
        self.lock = threading.Lock()
        logger.info("RouteSessionManager initialized")

    def create_session(
        self,
        sid: str,
        on_publish: Optional[Callable[[RouteSnapshot], None]] = None,
    ) -> RouteSession:
        """Create (or reuse) the session for a Socket.IO client."""
        with self.lock:
            existing = self.sessions.get(sid)
            if existing:
                logger.info(f"Reusing route session for {sid}")
                return existing

            route_service = self.route_service_factory() if self.route_service_factory else None
            session = RouteSession(sid, on_publish, route_service)
            self.sessions[sid] = session
            logger.info(f"Created route session for {sid}")
            return session

    def get_session(self, sid: str) -> Optional[RouteSession]:
        with self.lock:
            session = self.sessions.get(sid)
            if session:
                session.touch()
            return session

    def remove_session(self, sid: str):
        """Forget a client. Its in-flight computations finish unobserved."""
        with self.lock:
            if self.sessions.pop(sid, None) is not None:
                logger.info(f"Removed route session for {sid}")

    def get_stats(self) -> Dict[str, Any]:
        with self.lock:
            return {
                "sessions": len(self.sessions),
                "updates_received": sum(s.updates_received for s in self.sessions.values()),
                "routes_published": sum(s.routes_published for s in self.sessions.values()),
            }


_route_session_manager = None


def get_route_session_manager() -> RouteSessionManager:
    """Get the global RouteSessionManager instance."""
    global _route_session_manager
    if _route_session_manager is None:
        _route_session_manager = RouteSessionManager()
    return _route_session_manager
