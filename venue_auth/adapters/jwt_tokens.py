"""
JWT Token Issuer - Implements TokenIssuerPort with HS256 JWTs.
"""

import jwt
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Mapping, Optional
from venue_auth.errors import InvalidTokenError
from venue_auth.ports.token_port import TokenIssuerPort, ACCESS, REFRESH

logger = logging.getLogger(__name__)

PRIMITIVE_TYPES = (str, int, float, bool, type(None))

# Registered claims added at signing time and removed on validation
REGISTERED_CLAIMS = frozenset({"iat", "exp", "iss", "typ", "jti"})

# Never allowed in a claim set, whatever the caller passes
FORBIDDEN_CLAIMS = frozenset({
    "password",
    "password_hash",
    "passwordHash",
    "twoFactorSecret",
    "two_factor_secret",
    "resetPasswordToken",
    "resetPasswordExpires",
    "reset_token",
    "reset_token_expires",
    "verificationToken",
    "verification_token",
    "refreshToken",
    "refresh_token_hash",
    "createdAt",
    "updatedAt",
    "created_at",
    "updated_at",
    "lastLogin",
})


def sanitize_claims(claims: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Reduce a mapping to a token-safe claim set.

    Drops secrets, bookkeeping fields, registered claims, and any value that
    is not a primitive (lists and nested mappings would bloat the token and
    go stale after issuance).
    """
    sanitized = {}
    for key, value in claims.items():
        if key in FORBIDDEN_CLAIMS or key in REGISTERED_CLAIMS:
            continue
        if isinstance(value, PRIMITIVE_TYPES):
            sanitized[key] = value
    return sanitized


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JWTTokenIssuer(TokenIssuerPort):
    """
    JWT-based token issuer.

    Uses PyJWT for signing and verification. Access and refresh tokens have
    independent secrets and TTLs, and carry a "typ" claim, so a refresh token
    never validates as an access token and vice versa.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: int = 3600,
        refresh_ttl: int = 172800,
        algorithm: str = "HS256",
        issuer: str = "venue",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize JWT issuer.

        Args:
            access_secret: Access token signing secret
            refresh_secret: Refresh token signing secret
            access_ttl: Access token lifetime in seconds
            refresh_ttl: Refresh token lifetime in seconds
            algorithm: JWT algorithm (default HS256)
            issuer: Token issuer claim
            clock: Time source for iat/exp (tests)
        """
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh secrets must differ")

        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self._access_ttl = access_ttl
        self._refresh_ttl = refresh_ttl
        self._algorithm = algorithm
        self._issuer = issuer
        self._clock = clock or _utcnow

    @classmethod
    def from_settings(cls, settings) -> "JWTTokenIssuer":
        """Build from AuthSettings."""
        return cls(
            access_secret=settings.jwt_secret,
            refresh_secret=settings.jwt_refresh_secret,
            access_ttl=settings.access_ttl,
            refresh_ttl=settings.refresh_ttl,
        )

    def issue(self, claims: Mapping[str, Any], secret: str, ttl: int, token_type: str = ACCESS) -> str:
        """
        Sign a JWT.

        Args:
            claims: Claim mapping (sanitized before signing)
            secret: Signing secret
            ttl: Lifetime in seconds
            token_type: "access" or "refresh"

        Returns:
            JWT token string
        """
        now = self._clock()
        payload = sanitize_claims(claims)
        payload.update({
            "iat": now,
            "exp": now + timedelta(seconds=ttl),
            "iss": self._issuer,
            "typ": token_type,
            "jti": uuid.uuid4().hex,
        })

        return jwt.encode(payload, secret, algorithm=self._algorithm)

    def validate(self, token: str, secret: str, token_type: str = ACCESS) -> Dict[str, Any]:
        """
        Validate a JWT.

        Args:
            token: JWT token string
            secret: Secret it must be signed with
            token_type: Expected token kind

        Returns:
            Claims as passed to issue() (registered claims removed)

        Raises:
            InvalidTokenError: Bad signature, expired, malformed, or wrong kind
        """
        if not token:
            raise InvalidTokenError()

        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                options={"require": ["exp", "iat", "iss", "typ"]},
            )
        except jwt.InvalidTokenError as exc:
            # Covers expiry, signature, and decode errors alike
            logger.debug("Token rejected: %s", type(exc).__name__)
            raise InvalidTokenError() from None

        if payload.get("typ") != token_type:
            logger.debug("Token rejected: expected %s token", token_type)
            raise InvalidTokenError()

        return {k: v for k, v in payload.items() if k not in REGISTERED_CLAIMS}

    def issue_access(self, claims: Mapping[str, Any]) -> str:
        return self.issue(claims, self._access_secret, self._access_ttl, ACCESS)

    def validate_access(self, token: str) -> Dict[str, Any]:
        return self.validate(token, self._access_secret, ACCESS)

    def issue_refresh(self, claims: Mapping[str, Any]) -> str:
        return self.issue(claims, self._refresh_secret, self._refresh_ttl, REFRESH)

    def validate_refresh(self, token: str) -> Dict[str, Any]:
        return self.validate(token, self._refresh_secret, REFRESH)
