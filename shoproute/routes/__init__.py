# shoproute/routes/__init__.py
from .shop import create_shop_blueprint
from .websocket import register_websocket_handlers, NAMESPACE

__all__ = ['create_shop_blueprint', 'register_websocket_handlers', 'NAMESPACE']
