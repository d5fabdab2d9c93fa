# shoproute/routes/websocket/connection.py
"""WebSocket connection and disconnection handlers."""

import time
import logging
from flask_socketio import disconnect

from shoproute.api.route_sessions import get_route_session_manager
from .base import BaseWebSocketHandler, NAMESPACE
from .callback_helpers import make_route_publisher

logger = logging.getLogger(__name__)


class ConnectionHandler(BaseWebSocketHandler):
    """Handles WebSocket connection lifecycle events."""
    
    def register_handlers(self):
        """Register connection-related event handlers."""
        
        @self.socketio.on('connect', namespace=NAMESPACE)
        def handle_connect(auth=None):
            """Create the client's route session on connect."""
            client_info = self.get_client_info()
            self.log_event('connect')
            
            try:
                sid = client_info['sid']
                route_session = get_route_session_manager().create_session(sid)

                def _count_published(_snapshot):
                    route_session.routes_published += 1

                route_session.controller.on_publish = make_route_publisher(
                    self.socketio, sid, self.namespace, on_sent=_count_published
                )

                logger.info(f"🔗 Route session ready for {sid}")
                self.emit_to_client('connected', {
                    'session_id': sid,
                    'status': 'connected',
                })
                
            except Exception as e:
                logger.error(f"Connection error: {e}")
                self.handle_error(e, 'connect')
                disconnect()
        
        @self.socketio.on('disconnect', namespace=NAMESPACE)
        def handle_disconnect(reason=None):
            """Drop the client's route session."""
            client_info = self.get_client_info()
            get_route_session_manager().remove_session(client_info['sid'])
            logger.info(f"🔌 WebSocket disconnected: {client_info['sid']}")
        
        @self.socketio.on('ping', namespace=NAMESPACE)
        def handle_ping():
            """Handle ping for connection testing."""
            self.emit_to_client('pong', {'timestamp': time.time()})
