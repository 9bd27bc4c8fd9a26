"""
HTTP boundary - FastAPI router and app factory for the auth endpoints.
"""

from venue_auth.api.routes import router, current_principal, require_roles, get_auth_client
from venue_auth.api.app import create_app

__all__ = [
    "router",
    "current_principal",
    "require_roles",
    "get_auth_client",
    "create_app",
]
