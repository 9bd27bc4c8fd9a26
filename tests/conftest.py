"""
Shared fixtures.

Hashing uses reduced argon2 costs so the suite stays fast; production
defaults are covered in test_password_hasher.py.
"""

import pytest
from venue_auth import AuthClient, AuthSettings
from venue_auth.adapters import Argon2PasswordHasher, MemoryCredentialStore, MemoryRateLimitStore

ACCESS_SECRET = "test-access-secret-key-0123456789abcdef"
REFRESH_SECRET = "test-refresh-secret-key-0123456789abcdef"


@pytest.fixture
def settings():
    return AuthSettings(
        jwt_secret=ACCESS_SECRET,
        jwt_refresh_secret=REFRESH_SECRET,
        throttle_ttl=60,
        throttle_limit=5,
        app_name="VenueTest",
    )


@pytest.fixture
def fast_hasher():
    return Argon2PasswordHasher(memory_cost=1024, time_cost=1)


@pytest.fixture
def store():
    return MemoryCredentialStore()


@pytest.fixture
def client(settings, store, fast_hasher):
    return AuthClient.from_settings(
        settings,
        store=store,
        rate_limit_store=MemoryRateLimitStore(),
        hasher=fast_hasher,
    )


@pytest.fixture
async def verified_user(client):
    """A verified USER account: jane@x.com / P@ssw0rd1."""
    record = await client.accounts.register("jane@x.com", "P@ssw0rd1", first_name="Jane")
    await client.accounts.verify_email(record.verification_token)
    return await client.store.get_user(record.user_id)
