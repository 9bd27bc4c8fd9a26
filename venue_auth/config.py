"""
Configuration - Process-wide settings loaded from the environment.

Variables:
- JWT_SECRET / JWT_REFRESH_SECRET: signing secrets (required, must differ)
- JWT_ACCESS_TTL / JWT_REFRESH_TTL: token lifetimes in seconds
- THROTTLE_TTL / THROTTLE_LIMIT: rate limit window (seconds) and max hits
- THROTTLE_TRUST_FORWARDED: key throttling on X-Forwarded-For (true/false)
- APP_NAME: issuer shown in authenticator apps
- REDIS_URL: optional, enables Redis-backed stores
- AUTH_LOG_LEVEL: logging level name
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_ACCESS_TTL = 3600         # 1 hour
DEFAULT_REFRESH_TTL = 172800      # 2 days
DEFAULT_THROTTLE_TTL = 60
DEFAULT_THROTTLE_LIMIT = 10


@dataclass(frozen=True)
class AuthSettings:
    """Settings for the auth core."""
    jwt_secret: str
    jwt_refresh_secret: str
    access_ttl: int = DEFAULT_ACCESS_TTL
    refresh_ttl: int = DEFAULT_REFRESH_TTL
    throttle_ttl: int = DEFAULT_THROTTLE_TTL
    throttle_limit: int = DEFAULT_THROTTLE_LIMIT
    trust_forwarded: bool = True
    app_name: str = "Venue"
    redis_url: Optional[str] = None
    log_level: str = "INFO"

    def __post_init__(self):
        if not self.jwt_secret or not self.jwt_refresh_secret:
            raise ValueError("JWT_SECRET and JWT_REFRESH_SECRET must be set")
        if self.jwt_secret == self.jwt_refresh_secret:
            raise ValueError("JWT_SECRET and JWT_REFRESH_SECRET must differ")
        for name in ("access_ttl", "refresh_ttl", "throttle_ttl", "throttle_limit"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AuthSettings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Validated settings

        Raises:
            ValueError: Missing secrets, non-numeric/non-positive limits, or a bad flag
        """
        env = os.environ if environ is None else environ

        def _bool(name: str, default: bool) -> bool:
            raw = env.get(name)
            if raw is None or raw == "":
                return default
            value = raw.strip().lower()
            if value in ("1", "true", "yes", "on"):
                return True
            if value in ("0", "false", "no", "off"):
                return False
            raise ValueError(f"{name} must be a boolean, got {raw!r}")

        def _int(name: str, default: int) -> int:
            raw = env.get(name)
            if raw is None or raw == "":
                return default
            try:
                return int(raw)
            except ValueError:
                raise ValueError(f"{name} must be an integer, got {raw!r}")

        return cls(
            jwt_secret=env.get("JWT_SECRET", ""),
            jwt_refresh_secret=env.get("JWT_REFRESH_SECRET", ""),
            access_ttl=_int("JWT_ACCESS_TTL", DEFAULT_ACCESS_TTL),
            refresh_ttl=_int("JWT_REFRESH_TTL", DEFAULT_REFRESH_TTL),
            throttle_ttl=_int("THROTTLE_TTL", DEFAULT_THROTTLE_TTL),
            throttle_limit=_int("THROTTLE_LIMIT", DEFAULT_THROTTLE_LIMIT),
            trust_forwarded=_bool("THROTTLE_TRUST_FORWARDED", True),
            app_name=env.get("APP_NAME", "Venue"),
            redis_url=env.get("REDIS_URL") or None,
            log_level=env.get("AUTH_LOG_LEVEL", "INFO"),
        )


def configure_logging(level: str = "INFO") -> None:
    """Install a basic handler on the venue_auth logger tree."""
    root = logging.getLogger("venue_auth")
    root.setLevel(level.upper())
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        root.addHandler(handler)
