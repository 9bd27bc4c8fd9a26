"""
Auth Client - High-level SDK wiring the auth core together.

Simplifies the per-request pipeline for application developers:
rate limit -> bearer authentication -> principal -> authorization.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional
from venue_auth.config import AuthSettings
from venue_auth.errors import UnauthorizedError
from venue_auth.ports.credential_store_port import CredentialStorePort
from venue_auth.ports.policy_port import AuthorizationPort, Requirement
from venue_auth.ports.rate_limit_port import RateLimitStorePort
from venue_auth.ports.token_port import TokenIssuerPort
from venue_auth.domain.principal import Principal
from venue_auth.domain.role import ResourceCategory
from venue_auth.adapters.argon2_hasher import Argon2PasswordHasher
from venue_auth.adapters.jwt_tokens import JWTTokenIssuer
from venue_auth.adapters.memory_store import MemoryCredentialStore
from venue_auth.adapters.rate_limit import MemoryRateLimitStore, RedisRateLimitStore
from venue_auth.adapters.rbac_guard import RBACGuard
from venue_auth.adapters.redis_store import RedisCredentialStore
from venue_auth.adapters.totp import TOTPManager
from venue_auth.services.account_service import AccountService
from venue_auth.services.auth_service import AuthenticationService
from venue_auth.services.rate_limiter import RateLimiter, client_identity
from venue_auth.services.role_service import RoleService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an Authorization header.

    Raises:
        UnauthorizedError: Header missing or not a Bearer credential
    """
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        raise UnauthorizedError("Missing bearer token")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthorizedError("Missing bearer token")
    return token


class AuthClient:
    """
    High-level auth client combining stores, tokens, guard, and services.

    Example:
        from venue_auth import AuthClient, AuthSettings

        client = AuthClient.from_settings(AuthSettings.from_env())

        # Per request
        await client.throttle(headers.get("x-forwarded-for"), peer)
        principal = await client.authenticate(headers.get("authorization"))
        client.authorize(principal, ["BUSINESS", "ADMIN"])
    """

    def __init__(
        self,
        store: CredentialStorePort,
        tokens: TokenIssuerPort,
        rate_limiter: RateLimiter,
        guard: Optional[AuthorizationPort] = None,
        hasher: Optional[Argon2PasswordHasher] = None,
        two_factor: Optional[TOTPManager] = None,
        app_name: str = "Venue",
        trust_forwarded: bool = True,
    ):
        """
        Initialize auth client with adapters.

        Args:
            store: Credential store (required)
            tokens: Token issuer (required)
            rate_limiter: Rate limiter (required)
            guard: Authorization guard (default RBACGuard)
            hasher: Password hasher (default argon2id)
            two_factor: TOTP manager (default 30s/6 digits)
            app_name: Issuer shown in authenticator apps
            trust_forwarded: Key throttling on X-Forwarded-For (set False unless behind a trusted proxy)
        """
        self.store = store
        self.tokens = tokens
        self.rate_limiter = rate_limiter
        self.guard = guard or RBACGuard()
        self.trust_forwarded = trust_forwarded
        hasher = hasher or Argon2PasswordHasher()

        self.auth = AuthenticationService(
            store=store,
            hasher=hasher,
            tokens=tokens,
            two_factor=two_factor or TOTPManager(),
            app_name=app_name,
        )
        self.accounts = AccountService(store=store, hasher=hasher)
        self.roles = RoleService(store=store)

    @classmethod
    def from_settings(
        cls,
        settings: AuthSettings,
        store: Optional[CredentialStorePort] = None,
        rate_limit_store: Optional[RateLimitStorePort] = None,
        **kwargs: Any,
    ) -> "AuthClient":
        """
        Build a client from settings.

        Redis-backed stores are used when settings.redis_url is set and no
        store is passed; otherwise in-memory stores.
        """
        if store is None:
            store = RedisCredentialStore(url=settings.redis_url) if settings.redis_url else MemoryCredentialStore()
        if rate_limit_store is None:
            rate_limit_store = (
                RedisRateLimitStore(url=settings.redis_url) if settings.redis_url else MemoryRateLimitStore()
            )

        return cls(
            store=store,
            tokens=JWTTokenIssuer.from_settings(settings),
            rate_limiter=RateLimiter.from_settings(settings, rate_limit_store),
            app_name=settings.app_name,
            trust_forwarded=settings.trust_forwarded,
            **kwargs,
        )

    async def throttle(self, forwarded_for: Optional[str] = None, peer: Optional[str] = None) -> int:
        """
        Count a request against its client's window.

        Returns:
            Remaining hits

        Raises:
            ThrottledError: Limit exceeded
        """
        return await self.rate_limiter.check(client_identity(forwarded_for, peer, self.trust_forwarded))

    async def authenticate(self, authorization: Optional[str]) -> Principal:
        """
        Resolve the principal for an Authorization header.

        Raises:
            UnauthorizedError: Missing header, invalid token, or unknown account
        """
        claims = self.tokens.validate_access(extract_bearer_token(authorization))
        return await self.auth.principal_from_claims(claims)

    def authorize(
        self,
        principal: Optional[Principal],
        required_roles: Optional[Iterable[Requirement]] = None,
        resource: Optional[ResourceCategory] = None,
    ) -> bool:
        """Check principal against a route's declared requirements."""
        return self.guard.authorize(principal, required_roles, resource)

    async def guard_request(
        self,
        headers: Mapping[str, str],
        peer: Optional[str] = None,
        required_roles: Optional[Iterable[Requirement]] = None,
        resource: Optional[ResourceCategory] = None,
    ) -> Principal:
        """
        Run the full pipeline for one request.

        Args:
            headers: Request headers (lower-case keys)
            peer: Direct peer address
            required_roles: Route requirement set
            resource: Route resource category

        Returns:
            Authorized principal
        """
        await self.throttle(headers.get("x-forwarded-for"), peer)
        principal = await self.authenticate(headers.get("authorization"))
        self.authorize(principal, required_roles, resource)
        return principal

    async def login(self, email: str, password: str) -> Dict[str, str]:
        """
        Credential login.

        Raises:
            UnauthorizedError: Bad credentials or unverified email
        """
        principal = await self.auth.validate_credentials(email, password)
        if principal is None:
            raise UnauthorizedError("Invalid credentials")
        return await self.auth.login(principal)
