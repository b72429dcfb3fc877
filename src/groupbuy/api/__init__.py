"""Groupbuy domain API package."""

from groupbuy.api.errors import register_error_handlers
from groupbuy.api.routes import delivery_router, notification_router, shared_order_router
from groupbuy.api.sandbox import sandbox_router

__all__ = [
    "shared_order_router",
    "delivery_router",
    "notification_router",
    "sandbox_router",
    "register_error_handlers",
]
