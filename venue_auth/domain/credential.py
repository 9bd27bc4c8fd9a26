"""
Credential Record Domain Model - Authentication fields of a user account.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
from datetime import datetime, timedelta, timezone
from enum import Enum
import uuid

from venue_auth.domain.principal import AccountType

RESET_TOKEN_TTL = timedelta(hours=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class TwoFactorState(Enum):
    """Two-factor enrollment lifecycle."""
    NOT_ENROLLED = "not_enrolled"
    SECRET_GENERATED = "secret_generated"
    ENABLED = "enabled"


@dataclass
class CredentialRecord:
    """
    Credential record - persisted authentication state of one account.

    Domain rules:
    - email is globally unique (enforced by the store)
    - password_hash is set before the record is first stored
    - two_factor_secret must exist before a code can be verified
    - reset token and expiry are cleared together once consumed or expired
    - to_dict() is for storage only; never hand it to a token issuer
    """
    user_id: str
    email: str
    password_hash: str

    # Profile
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    account_type: AccountType = AccountType.USER
    is_admin: bool = False

    # Verification and recovery
    email_verified: bool = False
    verification_token: Optional[str] = None
    reset_token: Optional[str] = None
    reset_token_expires: Optional[datetime] = None

    # Two-factor
    two_factor_secret: Optional[str] = None
    two_factor_enabled: bool = False

    # Relations
    role_ids: List[str] = field(default_factory=list)
    business_ids: List[str] = field(default_factory=list)

    # Bookkeeping
    refresh_token_hash: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(
        cls,
        email: str,
        password_hash: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        account_type: AccountType = AccountType.USER,
    ) -> "CredentialRecord":
        """
        Create a new, unverified record with a fresh verification token.

        Args:
            email: Account email (normalized to lower case)
            password_hash: Digest from the password hasher
            first_name: Optional first name
            last_name: Optional last name
            account_type: USER or BUSINESS

        Returns:
            New record instance
        """
        return cls(
            user_id=str(uuid.uuid4()),
            email=normalize_email(email),
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            account_type=account_type,
            verification_token=str(uuid.uuid4()),
        )

    @property
    def two_factor_state(self) -> TwoFactorState:
        if self.two_factor_enabled:
            return TwoFactorState.ENABLED
        if self.two_factor_secret:
            return TwoFactorState.SECRET_GENERATED
        return TwoFactorState.NOT_ENROLLED

    def issue_reset_token(self, ttl: timedelta = RESET_TOKEN_TTL) -> str:
        """Generate a password-reset token valid for ttl."""
        self.reset_token = str(uuid.uuid4())
        self.reset_token_expires = _utcnow() + ttl
        self.touch()
        return self.reset_token

    def reset_token_valid(self, now: Optional[datetime] = None) -> bool:
        if not self.reset_token or not self.reset_token_expires:
            return False
        return (now or _utcnow()) < self.reset_token_expires

    def clear_reset_token(self):
        self.reset_token = None
        self.reset_token_expires = None
        self.touch()

    def touch(self):
        """Update modification timestamp."""
        self.updated_at = _utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (storage format, includes secrets)."""
        return {
            "user_id": self.user_id,
            "email": self.email,
            "password_hash": self.password_hash,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "account_type": self.account_type.value,
            "is_admin": self.is_admin,
            "email_verified": self.email_verified,
            "verification_token": self.verification_token,
            "reset_token": self.reset_token,
            "reset_token_expires": self.reset_token_expires.isoformat() if self.reset_token_expires else None,
            "two_factor_secret": self.two_factor_secret,
            "two_factor_enabled": self.two_factor_enabled,
            "role_ids": list(self.role_ids),
            "business_ids": list(self.business_ids),
            "refresh_token_hash": self.refresh_token_hash,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CredentialRecord":
        """Deserialize from dict."""
        return cls(
            user_id=data["user_id"],
            email=data["email"],
            password_hash=data["password_hash"],
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            account_type=AccountType(data.get("account_type", "USER")),
            is_admin=data.get("is_admin", False),
            email_verified=data.get("email_verified", False),
            verification_token=data.get("verification_token"),
            reset_token=data.get("reset_token"),
            reset_token_expires=_parse_dt(data.get("reset_token_expires")),
            two_factor_secret=data.get("two_factor_secret"),
            two_factor_enabled=data.get("two_factor_enabled", False),
            role_ids=list(data.get("role_ids", [])),
            business_ids=list(data.get("business_ids", [])),
            refresh_token_hash=data.get("refresh_token_hash"),
            created_at=_parse_dt(data.get("created_at")) or _utcnow(),
            updated_at=_parse_dt(data.get("updated_at")) or _utcnow(),
        )


def normalize_email(email: str) -> str:
    """Canonical form used for uniqueness and lookups."""
    return email.strip().lower()
