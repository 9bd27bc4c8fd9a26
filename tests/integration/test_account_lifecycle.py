"""
Integration tests for registration, email verification, and password reset.
"""

import asyncio
import pytest
from datetime import datetime, timedelta, timezone
from venue_auth.errors import BadRequestError, ConflictError, InvalidTokenError, NotFoundError
from venue_auth.domain.principal import AccountType
from venue_auth.services.account_service import validate_password


@pytest.mark.parametrize("password", [
    "P@ssw0rd1",
    "Abcdefg1",
    "Abcdefgh!",
    "A" + "b" * 30 + "1",
])
def test_password_policy_accepts(password):
    validate_password(password)


@pytest.mark.parametrize("password", [
    "",
    "Ab1",
    "A" + "b" * 31 + "1",
    "alllowercase1",
    "ALLUPPERCASE1",
    "NoDigitsOrSpecials",
])
def test_password_policy_rejects(password):
    with pytest.raises(BadRequestError):
        validate_password(password)


@pytest.mark.asyncio
class TestRegistration:

    async def test_register_creates_unverified_account(self, client):
        record = await client.accounts.register("Jane@X.com", "P@ssw0rd1", first_name="Jane")

        assert record.email == "jane@x.com"
        assert record.email_verified is False
        assert record.verification_token
        assert record.password_hash.startswith("$argon2id$")
        assert record.account_type == AccountType.USER

    async def test_register_business_account(self, client):
        record = await client.accounts.register("owner@x.com", "P@ssw0rd1", account_type=AccountType.BUSINESS)
        assert record.account_type == AccountType.BUSINESS

    async def test_admin_cannot_self_register(self, client):
        with pytest.raises(BadRequestError):
            await client.accounts.register("root@x.com", "P@ssw0rd1", account_type=AccountType.ADMIN)

    @pytest.mark.parametrize("email", ["", "not-an-email", "a@b", "two@@x.com"])
    async def test_invalid_email_rejected(self, client, email):
        with pytest.raises(BadRequestError):
            await client.accounts.register(email, "P@ssw0rd1")

    async def test_weak_password_rejected(self, client):
        with pytest.raises(BadRequestError):
            await client.accounts.register("jane@x.com", "weak")

    async def test_duplicate_email_conflicts(self, client):
        await client.accounts.register("jane@x.com", "P@ssw0rd1")

        with pytest.raises(ConflictError):
            await client.accounts.register("JANE@x.com", "P@ssw0rd1")

    async def test_concurrent_registrations_one_wins(self, client):
        results = await asyncio.gather(
            client.accounts.register("race@x.com", "P@ssw0rd1"),
            client.accounts.register("race@x.com", "P@ssw0rd2"),
            return_exceptions=True,
        )

        conflicts = [r for r in results if isinstance(r, ConflictError)]
        created = [r for r in results if not isinstance(r, Exception)]
        assert len(conflicts) == 1
        assert len(created) == 1


@pytest.mark.asyncio
class TestEmailVerification:

    async def test_verify_email(self, client):
        record = await client.accounts.register("jane@x.com", "P@ssw0rd1")

        result = await client.accounts.verify_email(record.verification_token)

        assert result == {"message": "Email verified successfully"}
        stored = await client.store.get_user(record.user_id)
        assert stored.email_verified is True
        assert stored.verification_token is None

    async def test_verification_token_single_use(self, client):
        record = await client.accounts.register("jane@x.com", "P@ssw0rd1")
        await client.accounts.verify_email(record.verification_token)

        with pytest.raises(NotFoundError):
            await client.accounts.verify_email(record.verification_token)

    async def test_unknown_verification_token(self, client):
        with pytest.raises(NotFoundError):
            await client.accounts.verify_email("nope")
        with pytest.raises(NotFoundError):
            await client.accounts.verify_email("")


@pytest.mark.asyncio
class TestPasswordReset:

    async def test_reset_flow(self, client, verified_user):
        token = await client.accounts.request_password_reset("jane@x.com")

        result = await client.accounts.reset_password(token, "N3wP@ssword")

        assert result == {"message": "Password reset successfully"}
        assert await client.auth.validate_credentials("jane@x.com", "P@ssw0rd1") is None
        assert await client.auth.validate_credentials("jane@x.com", "N3wP@ssword") is not None

        stored = await client.store.get_user(verified_user.user_id)
        assert stored.reset_token is None
        assert stored.reset_token_expires is None

    async def test_reset_token_expires_in_one_hour(self, client, verified_user):
        await client.accounts.request_password_reset("jane@x.com")

        stored = await client.store.get_user(verified_user.user_id)
        remaining = stored.reset_token_expires - datetime.now(timezone.utc)
        assert timedelta(minutes=59) < remaining <= timedelta(hours=1)

    async def test_reset_unknown_email(self, client):
        with pytest.raises(NotFoundError) as exc_info:
            await client.accounts.request_password_reset("nobody@x.com")
        assert exc_info.value.message == "Can not perform action at this time"

    async def test_expired_token_rejected_and_cleared(self, client, verified_user):
        token = await client.accounts.request_password_reset("jane@x.com")
        stored = await client.store.get_user(verified_user.user_id)
        stored.reset_token_expires = datetime.now(timezone.utc) - timedelta(seconds=1)
        await client.store.update_user(stored)

        with pytest.raises(NotFoundError):
            await client.accounts.reset_password(token, "N3wP@ssword")

        stored = await client.store.get_user(verified_user.user_id)
        assert stored.reset_token is None
        assert await client.store.get_user_by_reset_token(token) is None

    async def test_weak_new_password_keeps_token(self, client, verified_user):
        token = await client.accounts.request_password_reset("jane@x.com")

        with pytest.raises(BadRequestError):
            await client.accounts.reset_password(token, "weak")

        stored = await client.store.get_user(verified_user.user_id)
        assert stored.reset_token == token

    async def test_reset_revokes_refresh_token(self, client, verified_user):
        tokens = await client.login("jane@x.com", "P@ssw0rd1")
        reset = await client.accounts.request_password_reset("jane@x.com")

        await client.accounts.reset_password(reset, "N3wP@ssword")

        with pytest.raises(InvalidTokenError):
            await client.auth.refresh(tokens["refresh_token"])


@pytest.mark.asyncio
class TestAccountAdministration:

    async def test_promote_to_admin(self, client, verified_user):
        record = await client.accounts.promote_to_admin(verified_user.user_id)

        assert record.is_admin is True
        principal = await client.auth.load_principal(verified_user.user_id)
        assert principal.is_admin is True
        assert client.authorize(principal, ["AnyRole"]) is True

    async def test_add_business_is_idempotent(self, client, verified_user):
        await client.accounts.add_business(verified_user.user_id, "biz_1")
        await client.accounts.add_business(verified_user.user_id, "biz_1")

        stored = await client.store.get_user(verified_user.user_id)
        assert stored.business_ids == ["biz_1"]

    async def test_unknown_user(self, client):
        with pytest.raises(NotFoundError):
            await client.accounts.promote_to_admin("missing")
        with pytest.raises(NotFoundError):
            await client.accounts.add_business("missing", "biz_1")
