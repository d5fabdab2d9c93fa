# shoproute/routes/shop.py
"""Shopping route endpoints and blueprint configuration."""

import asyncio
import logging

from flask import Blueprint, jsonify, request

from shoproute.api.config import get_evaluation_config
from shoproute.api.evaluation import (
    CATEGORIES,
    SELECTION_TYPES,
    build_evaluation_payload,
)
from shoproute.api.services.map_service import MapService
from shoproute.api.services.route_service import RouteService, parse_route_request

logger = logging.getLogger(__name__)


def create_shop_blueprint(route_service=None):
    """Create and configure the shop blueprint.

    Args:
        route_service: RouteService to use, a default one when omitted

    Returns:
        Configured Flask Blueprint
    """
    route_service = route_service or RouteService()

    shop_bp = Blueprint("shop", __name__, url_prefix="/shop")

    @shop_bp.route("/api/config")
    def api_config():
        """Return evaluation settings for the frontend form."""
        return jsonify({
            "evaluation_url": get_evaluation_config()["url"],
            "categories": CATEGORIES,
            "selection_types": list(SELECTION_TYPES),
        })

    @shop_bp.route("/api/evaluation-payload", methods=["POST"])
    def api_evaluation_payload():
        """Validate the form and return the body for the evaluation call."""
        data = request.get_json(silent=True) or {}
        try:
            payload = build_evaluation_payload(
                data.get("option", "categorical"),
                items=data.get("items"),
                manual_input=data.get("manual_input", ""),
                selection_type=data.get("selectionType", "time"),
            )
        except ValueError as e:
            return jsonify({"error": str(e)}), 400
        return jsonify(payload)

    @shop_bp.route("/api/route", methods=["POST"])
    def api_route():
        """Route origin -> stops -> origin once and return the legs."""
        try:
            origin, stops = parse_route_request(request.get_json(silent=True))
            if origin is None:
                raise ValueError("origin is required")
            if not stops:
                raise ValueError("At least one stop is required")
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

        try:
            snapshot = asyncio.run(route_service.build_snapshot(origin, stops))
        except Exception as e:
            logger.exception(f"Failed to build route: {e}")
            return jsonify({"error": str(e)}), 500

        return jsonify(MapService.build_render_payload(snapshot))

    @shop_bp.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "service": "shop"})

    return shop_bp


__all__ = ['create_shop_blueprint']
