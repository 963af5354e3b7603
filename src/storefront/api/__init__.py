"""Storefront HTTP API package."""

from storefront.api.errors import register_error_handlers
from storefront.api.middleware import session_cookie_middleware
from storefront.api.routes import router

__all__ = ["register_error_handlers", "router", "session_cookie_middleware"]
