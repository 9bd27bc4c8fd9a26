"""
Authentication Service - Login, token refresh, and two-factor enrollment.
"""

import asyncio
import logging
import re
from typing import Any, Dict, Optional
from venue_auth.errors import (
    BadRequestError,
    InvalidTokenError,
    NotFoundError,
    UnauthorizedError,
)
from venue_auth.ports.credential_store_port import CredentialStorePort
from venue_auth.ports.token_port import TokenIssuerPort
from venue_auth.domain.credential import CredentialRecord
from venue_auth.domain.principal import Principal
from venue_auth.adapters.argon2_hasher import Argon2PasswordHasher
from venue_auth.adapters.totp import TOTPManager
from venue_auth.services.store_calls import store_call

logger = logging.getLogger(__name__)

TOTP_CODE = re.compile(r"^\d{6}$")


class AuthenticationService:
    """
    Orchestrates credential checks, token issuance, and 2FA.

    Password hashing runs in a worker thread so argon2's memory-hard work
    never blocks the event loop.
    """

    def __init__(
        self,
        store: CredentialStorePort,
        hasher: Argon2PasswordHasher,
        tokens: TokenIssuerPort,
        two_factor: TOTPManager,
        app_name: str = "Venue",
    ):
        self._store = store
        self._hasher = hasher
        self._tokens = tokens
        self._two_factor = two_factor
        self._app_name = app_name

    async def _get_record(self, user_id: str) -> CredentialRecord:
        record = await store_call(self._store.get_user(user_id), "user lookup")
        if record is None:
            raise NotFoundError("User not found")
        return record

    async def _save(self, record: CredentialRecord, action: str):
        record.touch()
        if not await store_call(self._store.update_user(record), action):
            raise NotFoundError("User not found")

    async def _principal_for(self, record: CredentialRecord) -> Principal:
        roles = await store_call(self._store.get_roles(record.role_ids), "role lookup")
        return Principal(
            user_id=record.user_id,
            email=record.email,
            account_type=record.account_type,
            is_admin=record.is_admin,
            roles=tuple(roles),
            first_name=record.first_name,
            business_ids=frozenset(record.business_ids),
        )

    async def validate_credentials(self, email: str, password: str) -> Optional[Principal]:
        """
        Check an email/password pair.

        Args:
            email: Account email
            password: Plaintext password

        Returns:
            Principal if the pair matches, None if the account is unknown or
            the password is wrong (callers cannot tell which)

        Raises:
            UnauthorizedError: Password matches but the email is unverified
        """
        record = await store_call(self._store.get_user_by_email(email), "login lookup")
        if record is None:
            logger.info("Login failed: unknown account")
            return None

        matches = await asyncio.to_thread(self._hasher.verify, record.password_hash, password)
        if not matches:
            logger.info("Login failed: bad password for user %s", record.user_id)
            return None

        # Checked after the password so unverified accounts leak nothing to guessers
        if not record.email_verified:
            logger.info("Login blocked: email not verified for user %s", record.user_id)
            raise UnauthorizedError("Please verify your email first")

        return await self._principal_for(record)

    async def login(self, principal: Principal) -> Dict[str, str]:
        """
        Issue tokens for a resolved principal.

        The refresh token's argon2 hash replaces the stored one, so only the
        latest refresh token stays usable.

        Returns:
            {"access_token": ..., "refresh_token": ...}
        """
        claims = principal.to_claims()
        access_token = self._tokens.issue_access(claims)
        refresh_token = self._tokens.issue_refresh(claims)

        record = await self._get_record(principal.user_id)
        record.refresh_token_hash = await asyncio.to_thread(self._hasher.hash, refresh_token)
        await self._save(record, "refresh token update")

        logger.info("Issued tokens for user %s", principal.user_id)
        return {"access_token": access_token, "refresh_token": refresh_token}

    async def refresh(self, refresh_token: str) -> Dict[str, str]:
        """
        Exchange a refresh token for a new token pair.

        Raises:
            InvalidTokenError: Token invalid, superseded, or account gone
        """
        claims = self._tokens.validate_refresh(refresh_token)

        record = await store_call(self._store.get_user(claims.get("id", "")), "user lookup")
        if record is None or not record.refresh_token_hash:
            raise InvalidTokenError()

        current = await asyncio.to_thread(self._hasher.verify, record.refresh_token_hash, refresh_token)
        if not current:
            logger.warning("Superseded refresh token presented for user %s", record.user_id)
            raise InvalidTokenError()

        return await self.login(await self._principal_for(record))

    async def principal_from_claims(self, claims: Dict[str, Any]) -> Principal:
        """
        Build the request principal from validated access-token claims.

        Identity fields come from the token snapshot; roles and business
        ownership are read from the store on every request.

        Raises:
            UnauthorizedError: Claims malformed or account no longer exists
        """
        user_id = claims.get("id")
        record = await store_call(self._store.get_user(user_id), "user lookup") if user_id else None
        if record is None:
            raise UnauthorizedError("You are not authorized to access this resource")

        roles = await store_call(self._store.get_roles(record.role_ids), "role lookup")
        try:
            return Principal.from_claims(claims, roles=tuple(roles), business_ids=frozenset(record.business_ids))
        except (KeyError, ValueError):
            raise UnauthorizedError("You are not authorized to access this resource")

    async def load_principal(self, user_id: str) -> Principal:
        """Build a principal straight from the stored record."""
        return await self._principal_for(await self._get_record(user_id))

    async def generate_two_factor_secret(self, user_id: str) -> Dict[str, str]:
        """
        Start (or restart) 2FA enrollment.

        A new secret replaces any previous one.

        Returns:
            {"secret": ..., "otpauth_url": ...}
        """
        record = await self._get_record(user_id)
        secret = self._two_factor.generate_secret()
        record.two_factor_secret = secret
        await self._save(record, "two-factor secret update")

        otpauth_url = self._two_factor.build_enrollment_uri(record.email, self._app_name, secret)
        logger.info("Generated two-factor secret for user %s", user_id)
        return {"secret": secret, "otpauth_url": otpauth_url}

    async def verify_two_factor_token(self, user_id: str, code: str) -> bool:
        """
        Verify a submitted TOTP code.

        Raises:
            NotFoundError: Unknown user or no secret enrolled
            BadRequestError: Code is not six digits
        """
        record = await self._get_record(user_id)
        if not record.two_factor_secret:
            raise NotFoundError("Two-factor authentication is not set up")

        code = (code or "").replace(" ", "")
        if not TOTP_CODE.match(code):
            raise BadRequestError("Invalid two-factor code")

        valid = self._two_factor.verify(code, record.two_factor_secret)
        if not valid:
            logger.info("Two-factor code rejected for user %s", user_id)
        return valid

    async def enable_two_factor(self, user_id: str) -> Dict[str, str]:
        """
        Mark 2FA enabled. Idempotent.

        Raises:
            NotFoundError: Unknown user
            BadRequestError: No secret generated yet
        """
        record = await self._get_record(user_id)
        if not record.two_factor_secret:
            raise BadRequestError("Generate a two-factor secret first")

        if not record.two_factor_enabled:
            record.two_factor_enabled = True
            await self._save(record, "two-factor enable")
            logger.info("Enabled two-factor for user %s", user_id)

        name = record.first_name or record.email
        return {"message": f"Two-factor authentication enabled for your account: {name}"}
