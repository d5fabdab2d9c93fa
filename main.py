"""
ShopRoute – main application entry point

* Flask app + Socket.IO serving the shopping route API.
* `async_mode="threading"`: each route computation runs its own asyncio loop
  in a Socket.IO background task.
* The Socket.IO namespace is `/shop/ws`; the map client listens there for
  `render_route` events.
"""

import os
import logging

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from dotenv import load_dotenv

# --------------------------------------------------------------------------- #
# Environment & logging
# --------------------------------------------------------------------------- #
load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

from shoproute.api.config import get_port, get_websocket_config, validate_routing_config  # noqa: E402
from shoproute.routes import create_shop_blueprint, register_websocket_handlers  # noqa: E402

# --------------------------------------------------------------------------- #
# Flask initialisation
# --------------------------------------------------------------------------- #
app = Flask(__name__)

flask_secret_key = os.getenv("FLASK_SECRET_KEY") or os.urandom(32).hex()
if "FLASK_SECRET_KEY" not in os.environ:
    logger.warning("No FLASK_SECRET_KEY found. Generated a temporary key.")
app.secret_key = flask_secret_key

# CORS for local dev / cross‑origin front‑end requests
CORS(app, origins="*", supports_credentials=True)

validate_routing_config()

# --------------------------------------------------------------------------- #
# Socket.IO
# --------------------------------------------------------------------------- #
ws_config = get_websocket_config()
socketio = SocketIO(
    app,
    cors_allowed_origins=ws_config["cors_allowed_origins"],
    async_mode="threading",
    ping_interval=ws_config["ping_interval"],
    ping_timeout=ws_config["ping_timeout"],
    logger=True,
    engineio_logger=False,
)
logger.info("Socket.IO initialised (async_mode=threading)")

# --------------------------------------------------------------------------- #
# Blueprints & WebSocket handlers
# --------------------------------------------------------------------------- #
app.register_blueprint(create_shop_blueprint())
register_websocket_handlers(socketio)


@app.route("/debug")
def debug():
    """Simple JSON health endpoint."""
    return {
        "status": "ok",
        "socketio_initialized": True,
        "endpoints": {
            "route": "/shop/api/route",
            "websocket_namespace": "/shop/ws",
        },
    }

# --------------------------------------------------------------------------- #
# Local development runner ( `python main.py` )
# --------------------------------------------------------------------------- #
if __name__ == "__main__":
    port = get_port()
    logger.info("Starting shop route app on http://localhost:%d", port)
    socketio.run(app, host="0.0.0.0", port=port, debug=False, allow_unsafe_werkzeug=True)

__all__ = ["app", "socketio"]
