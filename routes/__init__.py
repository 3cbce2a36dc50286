"""Routes package initializer."""

from .auth_routes import register_auth_routes
from .dashboard_routes import register_dashboard_routes
from .finance_routes import register_finance_routes
from .goods_receipt_routes import register_goods_receipt_routes
from .health_routes import register_health_routes
from .vendor_routes import register_vendor_routes
from .view_routes import register_view_routes

__all__ = [
    "register_auth_routes",
    "register_vendor_routes",
    "register_goods_receipt_routes",
    "register_finance_routes",
    "register_view_routes",
    "register_dashboard_routes",
    "register_health_routes",
]
