"""
Account Service - Registration, email verification, and password reset.

Delivery of verification and reset tokens (email) belongs to the caller;
this service only creates, checks, and clears them.
"""

import asyncio
import logging
import re
from typing import Dict, Optional
from venue_auth.errors import BadRequestError, NotFoundError
from venue_auth.ports.credential_store_port import CredentialStorePort
from venue_auth.domain.credential import CredentialRecord
from venue_auth.domain.principal import AccountType
from venue_auth.adapters.argon2_hasher import Argon2PasswordHasher
from venue_auth.services.store_calls import store_call

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PASSWORD_MIN = 8
PASSWORD_MAX = 32


def validate_password(password: str) -> None:
    """
    Enforce the password policy.

    8-32 characters, at least one upper-case and one lower-case letter, and
    at least one digit or special character.

    Raises:
        BadRequestError: Policy violated
    """
    if not password or not PASSWORD_MIN <= len(password) <= PASSWORD_MAX:
        raise BadRequestError(f"Password must be {PASSWORD_MIN}-{PASSWORD_MAX} characters long")
    has_upper = any(c.isupper() for c in password)
    has_lower = any(c.islower() for c in password)
    has_digit_or_special = any(c.isdigit() or not c.isalnum() for c in password)
    if not (has_upper and has_lower and has_digit_or_special):
        raise BadRequestError(
            "Password must contain at least 1 uppercase letter, 1 lowercase letter, "
            "1 number or special character"
        )


class AccountService:
    """Account lifecycle feeding the credential store."""

    def __init__(self, store: CredentialStorePort, hasher: Argon2PasswordHasher):
        self._store = store
        self._hasher = hasher

    async def _save(self, record: CredentialRecord, action: str):
        record.touch()
        if not await store_call(self._store.update_user(record), action):
            raise NotFoundError("User not found")

    async def register(
        self,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        account_type: AccountType = AccountType.USER,
    ) -> CredentialRecord:
        """
        Create an unverified account.

        Uniqueness is left to the store: two concurrent registrations for
        the same email end with exactly one ConflictError.

        Returns:
            Stored record (contains secrets; do not return it to clients)

        Raises:
            BadRequestError: Invalid email, weak password, or ADMIN account type
            ConflictError: Email already in use
        """
        if not email or not EMAIL_PATTERN.match(email.strip()):
            raise BadRequestError("Invalid email address")
        if account_type == AccountType.ADMIN:
            raise BadRequestError("Admin accounts cannot be self-registered")
        validate_password(password)

        password_hash = await asyncio.to_thread(self._hasher.hash, password)
        record = CredentialRecord.create(
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            account_type=account_type,
        )

        stored = await store_call(self._store.create_user(record), "user creation")
        logger.info("Registered user %s", stored.user_id)
        return stored

    async def verify_email(self, token: str) -> Dict[str, str]:
        """
        Consume an email-verification token.

        Raises:
            NotFoundError: Unknown token
        """
        record = await store_call(self._store.get_user_by_verification_token(token), "verification lookup") if token else None
        if record is None:
            raise NotFoundError("Invalid verification token")

        record.email_verified = True
        record.verification_token = None
        await self._save(record, "email verification")

        logger.info("Verified email for user %s", record.user_id)
        return {"message": "Email verified successfully"}

    async def request_password_reset(self, email: str) -> str:
        """
        Issue a one-hour password-reset token.

        Returns:
            The token, for the caller to deliver

        Raises:
            NotFoundError: Unknown email
        """
        record = await store_call(self._store.get_user_by_email(email), "reset lookup")
        if record is None:
            raise NotFoundError("Can not perform action at this time")

        token = record.issue_reset_token()
        await self._save(record, "reset token update")

        logger.info("Issued password reset token for user %s", record.user_id)
        return token

    async def reset_password(self, token: str, new_password: str) -> Dict[str, str]:
        """
        Consume a reset token and set a new password.

        Expired tokens are cleared when presented. A successful reset also
        drops the stored refresh token hash, logging out other sessions.

        Raises:
            NotFoundError: Unknown or expired token
            BadRequestError: New password violates the policy
        """
        record = await store_call(self._store.get_user_by_reset_token(token), "reset lookup") if token else None
        if record is None:
            raise NotFoundError("Invalid or expired reset token")

        if not record.reset_token_valid():
            record.clear_reset_token()
            await self._save(record, "expired reset token cleanup")
            raise NotFoundError("Invalid or expired reset token")

        validate_password(new_password)
        record.password_hash = await asyncio.to_thread(self._hasher.hash, new_password)
        record.refresh_token_hash = None
        record.clear_reset_token()
        await self._save(record, "password reset")

        logger.info("Password reset for user %s", record.user_id)
        return {"message": "Password reset successfully"}

    async def promote_to_admin(self, user_id: str) -> CredentialRecord:
        """
        Grant administrative privilege (operator tooling).

        Raises:
            NotFoundError: Unknown user
        """
        record = await store_call(self._store.get_user(user_id), "user lookup")
        if record is None:
            raise NotFoundError("User not found")

        record.is_admin = True
        record.account_type = AccountType.ADMIN
        await self._save(record, "admin promotion")

        logger.warning("User %s promoted to admin", user_id)
        return record

    async def add_business(self, user_id: str, business_id: str) -> None:
        """Record that user_id owns business_id."""
        record = await store_call(self._store.get_user(user_id), "user lookup")
        if record is None:
            raise NotFoundError("User not found")

        if business_id not in record.business_ids:
            record.business_ids.append(business_id)
            await self._save(record, "business ownership update")
