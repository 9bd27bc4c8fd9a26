"""
Token Port - Interface for signed, time-limited tokens.

Implementations:
- JWTTokenIssuer: HS256 JWTs via PyJWT
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Mapping

ACCESS = "access"
REFRESH = "refresh"


class TokenIssuerPort(ABC):
    """Port: Issue and validate access/refresh tokens."""

    @abstractmethod
    def issue(self, claims: Mapping[str, Any], secret: str, ttl: int, token_type: str = ACCESS) -> str:
        """
        Sign a token.

        Args:
            claims: Flat claim mapping (non-primitive values are dropped)
            secret: Signing secret
            ttl: Lifetime in seconds
            token_type: "access" or "refresh"

        Returns:
            Token string
        """
        pass

    @abstractmethod
    def validate(self, token: str, secret: str, token_type: str = ACCESS) -> Dict[str, Any]:
        """
        Validate a token and return its claims.

        Args:
            token: Token string
            secret: Secret it must be signed with
            token_type: Expected token kind

        Returns:
            The claims passed to issue()

        Raises:
            InvalidTokenError: Any failure, regardless of cause
        """
        pass

    @abstractmethod
    def issue_access(self, claims: Mapping[str, Any]) -> str:
        """Issue an access token with the configured secret and TTL."""
        pass

    @abstractmethod
    def validate_access(self, token: str) -> Dict[str, Any]:
        """Validate an access token."""
        pass

    @abstractmethod
    def issue_refresh(self, claims: Mapping[str, Any]) -> str:
        """Issue a refresh token with the configured secret and TTL."""
        pass

    @abstractmethod
    def validate_refresh(self, token: str) -> Dict[str, Any]:
        """Validate a refresh token."""
        pass
