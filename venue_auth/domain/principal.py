"""
Principal Domain Model - The authenticated identity attached to a request.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Tuple, FrozenSet
from enum import Enum

from venue_auth.domain.role import Role


class AccountType(Enum):
    """Account types."""
    USER = "USER"
    BUSINESS = "BUSINESS"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class Principal:
    """
    Principal value - built fresh for every request.

    Domain rules:
    - never persisted
    - immutable for the lifetime of the request
    - roles come from the store, not from the token
    """
    user_id: str
    email: str
    account_type: Optional[AccountType] = AccountType.USER
    is_admin: bool = False
    roles: Optional[Tuple[Role, ...]] = ()

    # Optional fields
    first_name: Optional[str] = None
    business_ids: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def display_name(self) -> str:
        """Name used in denial messages."""
        return self.first_name or self.email

    @property
    def role_names(self) -> FrozenSet[str]:
        return frozenset(role.name for role in (self.roles or ()))

    def owns_business(self, business_id: Optional[str]) -> bool:
        """Check if the principal owns the given business."""
        return business_id is not None and business_id in self.business_ids

    def to_claims(self) -> Dict[str, Any]:
        """Minimal claim set for token issuance."""
        return {
            "id": self.user_id,
            "email": self.email,
            "firstName": self.first_name,
            "isAdmin": self.is_admin,
            "accountType": self.account_type.value if self.account_type else None,
        }

    @classmethod
    def from_claims(
        cls,
        claims: Dict[str, Any],
        roles: Optional[Tuple[Role, ...]] = (),
        business_ids: FrozenSet[str] = frozenset(),
    ) -> "Principal":
        """
        Build a principal from validated token claims.

        Args:
            claims: Claims returned by the token issuer
            roles: Roles read from the credential store
            business_ids: Businesses owned by the principal

        Raises:
            KeyError: Claims lack id or email
            ValueError: Unknown account type
        """
        account_type = claims.get("accountType")
        return cls(
            user_id=claims["id"],
            email=claims["email"],
            account_type=AccountType(account_type) if account_type else None,
            is_admin=bool(claims.get("isAdmin", False)),
            roles=tuple(roles) if roles is not None else None,
            first_name=claims.get("firstName"),
            business_ids=frozenset(business_ids),
        )
