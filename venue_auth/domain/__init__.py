"""
Domain Models - Pure business entities.

No infrastructure dependencies. Domain logic only.
"""

from venue_auth.domain.principal import Principal, AccountType
from venue_auth.domain.role import Role, ResourceCategory, PermissionAction, parse_permissions
from venue_auth.domain.credential import CredentialRecord, TwoFactorState, normalize_email

__all__ = [
    "Principal",
    "AccountType",
    "Role",
    "ResourceCategory",
    "PermissionAction",
    "parse_permissions",
    "CredentialRecord",
    "TwoFactorState",
    "normalize_email",
]
