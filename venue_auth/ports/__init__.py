"""
Ports - Interfaces for storage, tokens, rate limiting, and authorization.

Hexagonal architecture: These define WHAT we need, not HOW.
Adapters provide the HOW.
"""

from venue_auth.ports.credential_store_port import CredentialStorePort
from venue_auth.ports.token_port import TokenIssuerPort, ACCESS, REFRESH
from venue_auth.ports.rate_limit_port import RateLimitStorePort
from venue_auth.ports.policy_port import AuthorizationPort, Requirement

__all__ = [
    # Storage
    "CredentialStorePort",
    "RateLimitStorePort",
    # Tokens
    "TokenIssuerPort",
    "ACCESS",
    "REFRESH",
    # Authorization
    "AuthorizationPort",
    "Requirement",
]
