"""
Venue Auth - Authentication & Authorization Core

Hexagonal architecture for credentials, tokens, two-factor, and RBAC
across the venue management platform.

Usage:
    from venue_auth import AuthClient, AuthSettings

    client = AuthClient.from_settings(AuthSettings.from_env())

    # Register and verify
    record = await client.accounts.register("jane@x.com", "P@ssw0rd1")
    await client.accounts.verify_email(record.verification_token)

    # Login
    tokens = await client.login("jane@x.com", "P@ssw0rd1")

    # Per request
    principal = await client.authenticate(f"Bearer {tokens['access_token']}")
    client.authorize(principal, ["BUSINESS", "ADMIN"])
"""

__version__ = "0.1.0"

from venue_auth.config import AuthSettings
from venue_auth.sdk.client import AuthClient
from venue_auth.domain.principal import Principal, AccountType
from venue_auth.domain.role import Role, ResourceCategory, PermissionAction
from venue_auth.domain.credential import CredentialRecord, TwoFactorState

__all__ = [
    "AuthClient",
    "AuthSettings",
    "Principal",
    "AccountType",
    "Role",
    "ResourceCategory",
    "PermissionAction",
    "CredentialRecord",
    "TwoFactorState",
]
