# api/config.py
"""Configuration management for the shopping route API."""
import os
from dotenv import load_dotenv

load_dotenv()


def _get_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_routing_config():
    """Get road-routing service configuration."""
    return {
        # OSRM-compatible endpoint, coordinates go out as lng,lat
        "base_url": os.getenv("ROUTING_BASE_URL", "https://router.project-osrm.org").rstrip("/"),
        "profile": os.getenv("ROUTING_PROFILE", "driving"),
        "timeout_seconds": float(os.getenv("ROUTING_TIMEOUT_SECONDS", "10")),
        "max_retries": int(os.getenv("ROUTING_MAX_RETRIES", "0")),
        "max_concurrent_legs": int(os.getenv("ROUTING_MAX_CONCURRENT_LEGS", "6")),
        "sequential": _get_bool("ROUTING_SEQUENTIAL"),
    }


def get_evaluation_config():
    """Get evaluation service configuration for the frontend."""
    return {
        "url": os.getenv("EVALUATION_URL", "http://127.0.0.1:5000/api/evaluate"),
    }


def get_port():
    """Get port configuration."""
    return int(os.getenv("PORT", 3000))


def get_websocket_config():
    """Get WebSocket configuration."""
    return {
        "ping_interval": int(os.getenv("WEBSOCKET_PING_INTERVAL", "25")),
        "ping_timeout": int(os.getenv("WEBSOCKET_PING_TIMEOUT", "60")),
        "cors_allowed_origins": os.getenv("WEBSOCKET_CORS_ORIGINS", "*").split(",")
    }


def validate_routing_config(config=None):
    """Validate routing configuration is usable."""
    config = config or get_routing_config()

    if not config["base_url"].startswith(("http://", "https://")):
        raise ValueError("ROUTING_BASE_URL must be an http(s) URL")

    if config["timeout_seconds"] <= 0:
        raise ValueError("ROUTING_TIMEOUT_SECONDS must be positive")

    if config["max_retries"] < 0:
        raise ValueError("ROUTING_MAX_RETRIES cannot be negative")

    if config["max_concurrent_legs"] < 1:
        raise ValueError("ROUTING_MAX_CONCURRENT_LEGS must be at least 1")

    return True
