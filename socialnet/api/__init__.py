"""API package exports."""

from socialnet.api.auth import router as auth_router
from socialnet.api.middleware import CorrelationIdMiddleware
from socialnet.api.routes import router

__all__ = ["auth_router", "router", "CorrelationIdMiddleware"]
