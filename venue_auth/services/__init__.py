"""
Services - Orchestration over ports and adapters.
"""

from venue_auth.services.auth_service import AuthenticationService
from venue_auth.services.account_service import AccountService, validate_password
from venue_auth.services.role_service import RoleService
from venue_auth.services.rate_limiter import RateLimiter, client_identity

__all__ = [
    "AuthenticationService",
    "AccountService",
    "RoleService",
    "RateLimiter",
    "client_identity",
    "validate_password",
]
