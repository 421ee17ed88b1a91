from .api import api_bp
from .cakes import cakes_bp
from .errors import register_error_handlers
from .orders import orders_bp

__all__ = ["api_bp", "cakes_bp", "orders_bp", "register_error_handlers"]
