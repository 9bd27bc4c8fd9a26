"""
Error taxonomy - Every failure the auth core raises.

Each error carries the HTTP status it maps to so the API boundary can
render it without a lookup table. Errors are always raised, never returned.
"""

from typing import Optional


class AuthError(Exception):
    """Base class for all auth core failures."""

    status_code: int = 500
    default_message: str = "Authentication error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Client-facing body."""
        return {"statusCode": self.status_code, "message": self.message}


class BadRequestError(AuthError):
    """Malformed input (e.g. a TOTP code that is not six digits)."""
    status_code = 400
    default_message = "Bad request"


class UnauthorizedError(AuthError):
    """Missing or invalid credentials."""
    status_code = 401
    default_message = "Unauthorized"


class InvalidTokenError(UnauthorizedError):
    """
    Token failed validation.

    Expired, tampered and malformed tokens all raise this with the same
    message so callers cannot tell the causes apart.
    """
    default_message = "Invalid or expired token"

    def __init__(self):
        super().__init__(self.default_message)


class ForbiddenError(AuthError):
    """Authenticated but not allowed."""
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(AuthError):
    """Referenced entity does not exist."""
    status_code = 404
    default_message = "Not found"


class ConflictError(AuthError):
    """Uniqueness violation reported by the store."""
    status_code = 409
    default_message = "Conflict"


class ThrottledError(AuthError):
    """Too many requests from one client within the window."""
    status_code = 429
    default_message = "Too many requests"

    def __init__(self, retry_after: int, message: Optional[str] = None):
        self.retry_after = retry_after
        super().__init__(message)


class InternalError(AuthError):
    """Unexpected store or infrastructure failure."""
    status_code = 500
    default_message = "Internal server error"
