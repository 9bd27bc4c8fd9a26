"""
Adapters - Implementations of ports and leaf components.

Storage:
- MemoryCredentialStore: In-memory credential/role storage (testing)
- RedisCredentialStore: Redis-backed credential/role storage
- MemoryRateLimitStore: In-memory rate-limit counters
- RedisRateLimitStore: Redis rate-limit counters

Tokens & Secrets:
- JWTTokenIssuer: Access/refresh JWTs
- Argon2PasswordHasher: argon2id password hashing
- TOTPManager: Authenticator-app two-factor codes

Authorization:
- RBACGuard: Role/account-type route guard
"""

# Storage
from venue_auth.adapters.memory_store import MemoryCredentialStore
from venue_auth.adapters.redis_store import RedisCredentialStore
from venue_auth.adapters.rate_limit import MemoryRateLimitStore, RedisRateLimitStore

# Tokens & Secrets
from venue_auth.adapters.jwt_tokens import JWTTokenIssuer, sanitize_claims
from venue_auth.adapters.argon2_hasher import Argon2PasswordHasher
from venue_auth.adapters.totp import TOTPManager

# Authorization
from venue_auth.adapters.rbac_guard import RBACGuard

__all__ = [
    # Storage
    "MemoryCredentialStore",
    "RedisCredentialStore",
    "MemoryRateLimitStore",
    "RedisRateLimitStore",
    # Tokens & Secrets
    "JWTTokenIssuer",
    "sanitize_claims",
    "Argon2PasswordHasher",
    "TOTPManager",
    # Authorization
    "RBACGuard",
]
