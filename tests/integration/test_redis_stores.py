"""
Integration tests for the Redis-backed stores.

Server tests require Redis running on localhost:6379 and skip otherwise.
Write-failure tests run against an in-process fake client.
"""

import asyncio
import pytest
import redis
import redis.asyncio as aioredis
from venue_auth.errors import ConflictError, ThrottledError
from venue_auth.domain.credential import CredentialRecord
from venue_auth.domain.principal import AccountType
from venue_auth.domain.role import Role, ResourceCategory, parse_permissions
from venue_auth.adapters import RedisCredentialStore, RedisRateLimitStore
from venue_auth.services import RateLimiter

PREFIX = "test:venue:"


@pytest.fixture
def redis_url():
    """Skip unless a Redis server answers, and clean test keys afterwards."""
    url = "redis://localhost:6379/0"
    try:
        sync_client = redis.Redis.from_url(url, decode_responses=True)
        sync_client.ping()
    except redis.exceptions.ConnectionError:
        pytest.skip("Redis not available")

    yield url

    for key in sync_client.scan_iter(f"{PREFIX}*"):
        sync_client.delete(key)
    sync_client.close()


@pytest.fixture
async def redis_client(redis_url):
    client = aioredis.from_url(redis_url, decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def credential_store(redis_client):
    return RedisCredentialStore(redis_client=redis_client, prefix=f"{PREFIX}auth:")


@pytest.fixture
def throttle_store(redis_client):
    return RedisRateLimitStore(redis_client=redis_client, prefix=f"{PREFIX}throttle:")


def make_record(email="jane@x.com"):
    return CredentialRecord.create(email=email, password_hash="$argon2id$fake", first_name="Jane")


@pytest.mark.asyncio
class TestRedisCredentialStore:

    async def test_create_and_lookup(self, credential_store):
        record = make_record("Jane@X.com")
        await credential_store.create_user(record)

        by_id = await credential_store.get_user(record.user_id)
        by_email = await credential_store.get_user_by_email("jane@x.com")
        by_token = await credential_store.get_user_by_verification_token(record.verification_token)

        assert by_id.email == "jane@x.com"
        assert by_email.user_id == record.user_id
        assert by_token.user_id == record.user_id
        assert by_id.account_type == AccountType.USER

    async def test_duplicate_email_conflicts(self, credential_store):
        await credential_store.create_user(make_record())

        with pytest.raises(ConflictError):
            await credential_store.create_user(make_record("JANE@x.com"))

    async def test_concurrent_create_one_wins(self, credential_store):
        results = await asyncio.gather(
            credential_store.create_user(make_record()),
            credential_store.create_user(make_record()),
            return_exceptions=True,
        )

        assert sum(isinstance(r, ConflictError) for r in results) == 1

    async def test_token_indexes_follow_updates(self, credential_store):
        record = make_record()
        await credential_store.create_user(record)
        old_token = record.verification_token

        record.verification_token = None
        record.email_verified = True
        reset = record.issue_reset_token()
        assert await credential_store.update_user(record) is True

        assert await credential_store.get_user_by_verification_token(old_token) is None
        assert (await credential_store.get_user_by_reset_token(reset)).user_id == record.user_id

        record.clear_reset_token()
        await credential_store.update_user(record)
        assert await credential_store.get_user_by_reset_token(reset) is None

    async def test_update_missing_user(self, credential_store):
        assert await credential_store.update_user(make_record()) is False

    async def test_delete_user_frees_email(self, credential_store):
        record = make_record()
        await credential_store.create_user(record)

        assert await credential_store.delete_user(record.user_id) is True
        assert await credential_store.get_user_by_email("jane@x.com") is None
        await credential_store.create_user(make_record())

    async def test_roles(self, credential_store):
        role = Role.create("Manager", parse_permissions({"reservations": ["read"]}), business_id="biz_1")
        await credential_store.create_role(role)

        with pytest.raises(ConflictError):
            await credential_store.create_role(Role.create("manager", business_id="biz_1"))
        await credential_store.create_role(Role.create("Manager"))

        stored = await credential_store.get_role(role.role_id)
        assert stored == role
        assert stored.allows(ResourceCategory.RESERVATIONS)
        assert [r.role_id for r in await credential_store.list_roles("biz_1")] == [role.role_id]

        stored.name = "Lead"
        assert await credential_store.update_role(stored) is True
        await credential_store.create_role(Role.create("Manager", business_id="biz_1"))

        assert await credential_store.delete_role(role.role_id) is True
        assert await credential_store.get_role(role.role_id) is None
        assert await credential_store.get_roles([role.role_id]) == []


@pytest.mark.asyncio
class TestRedisRateLimitStore:

    async def test_window_counts_and_ttl(self, throttle_store):
        limiter = RateLimiter(throttle_store, ttl=30, limit=2)

        await limiter.check("203.0.113.1")
        await limiter.check("203.0.113.1")
        with pytest.raises(ThrottledError) as exc_info:
            await limiter.check("203.0.113.1")

        assert 0 < exc_info.value.retry_after <= 30
        assert await limiter.reset("203.0.113.1") is True
        assert await limiter.check("203.0.113.1") == 1

    async def test_concurrent_hits_counted(self, throttle_store):
        results = await asyncio.gather(*(throttle_store.hit("203.0.113.2", 30) for _ in range(20)))

        assert sorted(count for count, _ in results) == list(range(1, 21))


class FakeRedis:
    """Minimal in-process stand-in for redis.asyncio.Redis."""

    def __init__(self):
        self.data = {}
        self.fail_transactions = False

    async def set(self, key, value, nx=False):
        if nx and key in self.data:
            return None
        self.data[key] = value
        return True

    async def get(self, key):
        return self.data.get(key)

    async def delete(self, *keys):
        return sum(1 for key in keys if self.data.pop(key, None) is not None)

    async def smembers(self, key):
        return set(self.data.get(key, set()))

    def pipeline(self, transaction=True):
        return FakePipeline(self)


class FakePipeline:
    def __init__(self, redis):
        self._redis = redis
        self._ops = []

    def set(self, key, value):
        self._ops.append(lambda data: data.__setitem__(key, value))

    def delete(self, *keys):
        self._ops.append(lambda data: [data.pop(key, None) for key in keys])

    def sadd(self, key, member):
        self._ops.append(lambda data: data.setdefault(key, set()).add(member))

    def srem(self, key, member):
        self._ops.append(lambda data: data.get(key, set()).discard(member))

    async def execute(self):
        if self._redis.fail_transactions:
            raise ConnectionError("connection lost during EXEC")
        for op in self._ops:
            op(self._redis.data)
        return [True] * len(self._ops)


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def fake_store(fake_redis):
    return RedisCredentialStore(redis_client=fake_redis, prefix="p:")


@pytest.mark.asyncio
class TestRedisWriteFailures:
    """A failed transaction leaves no claimed index keys behind."""

    async def test_failed_create_user_releases_email(self, fake_store, fake_redis):
        fake_redis.fail_transactions = True

        with pytest.raises(ConnectionError):
            await fake_store.create_user(make_record())

        assert fake_redis.data == {}
        fake_redis.fail_transactions = False
        created = await fake_store.create_user(make_record())
        assert (await fake_store.get_user_by_email("jane@x.com")).user_id == created.user_id

    async def test_failed_email_change_keeps_old_index(self, fake_store, fake_redis):
        record = make_record()
        await fake_store.create_user(record)
        fake_redis.fail_transactions = True

        record.email = "jane.new@x.com"
        with pytest.raises(ConnectionError):
            await fake_store.update_user(record)

        fake_redis.fail_transactions = False
        assert (await fake_store.get_user_by_email("jane@x.com")).user_id == record.user_id
        assert await fake_store.get_user_by_email("jane.new@x.com") is None
        await fake_store.create_user(make_record("jane.new@x.com"))

    async def test_email_change_moves_index(self, fake_store):
        record = make_record()
        await fake_store.create_user(record)

        record.email = "jane.new@x.com"
        assert await fake_store.update_user(record) is True

        assert await fake_store.get_user_by_email("jane@x.com") is None
        assert (await fake_store.get_user_by_email("jane.new@x.com")).user_id == record.user_id

    async def test_failed_create_role_releases_name(self, fake_store, fake_redis):
        fake_redis.fail_transactions = True

        with pytest.raises(ConnectionError):
            await fake_store.create_role(Role.create("Manager", business_id="biz_1"))

        assert fake_redis.data == {}
        fake_redis.fail_transactions = False
        await fake_store.create_role(Role.create("Manager", business_id="biz_1"))

    async def test_failed_rename_keeps_old_name(self, fake_store, fake_redis):
        role = await fake_store.create_role(Role.create("Manager", business_id="biz_1"))
        fake_redis.fail_transactions = True

        role.name = "Lead"
        with pytest.raises(ConnectionError):
            await fake_store.update_role(role)

        fake_redis.fail_transactions = False
        with pytest.raises(ConflictError):
            await fake_store.create_role(Role.create("manager", business_id="biz_1"))
        await fake_store.create_role(Role.create("Lead", business_id="biz_1"))


@pytest.mark.asyncio
class TestRedisRoleScopes:

    async def test_global_scope_distinct_from_any_business_id(self, fake_store):
        await fake_store.create_role(Role.create("Manager"))

        await fake_store.create_role(Role.create("Manager", business_id="_global"))
        await fake_store.create_role(Role.create("Manager", business_id="g"))

        with pytest.raises(ConflictError):
            await fake_store.create_role(Role.create("MANAGER"))

    async def test_business_id_with_separator_does_not_collide(self, fake_store):
        await fake_store.create_role(Role.create("c", business_id="a:b"))

        await fake_store.create_role(Role.create("b:c", business_id="a"))
