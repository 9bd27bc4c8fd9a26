"""
Redis Credential Store - Redis-backed credential and role storage.
"""

import json
import logging
from typing import Optional, List, Iterable
from urllib.parse import quote
import redis.asyncio as aioredis
from venue_auth.errors import ConflictError
from venue_auth.ports.credential_store_port import CredentialStorePort
from venue_auth.domain.credential import CredentialRecord, normalize_email
from venue_auth.domain.role import Role

logger = logging.getLogger(__name__)


class RedisCredentialStore(CredentialStorePort):
    """
    Redis-backed credential storage.

    Records and roles are stored as JSON. Uniqueness is enforced with
    SET NX on index keys (email, role name per scope), so two concurrent
    writers cannot both claim the same email.

    Key layout (under prefix):
    - user:{user_id}            record JSON
    - email:{email}             user_id
    - verify:{token}            user_id
    - reset:{token}             user_id
    - role:{role_id}            role JSON
    - rolename:g:{name}         role_id of a global role
    - rolename:b:{business}:{name}  role_id of a business role
      (business id percent-quoted, so it never contains ":")
    - roles                     set of role_ids
    """

    def __init__(self, redis_client=None, url: str = "redis://localhost:6379/0", prefix: str = "venue:auth:"):
        """
        Initialize Redis credential store.

        Args:
            redis_client: redis.asyncio.Redis instance (created from url if omitted)
            url: Redis URL used when no client is given
            prefix: Key prefix
        """
        self._redis = redis_client
        self._url = url
        self._prefix = prefix

    def _get_redis(self):
        """Lazy create the Redis client."""
        if self._redis is None:
            self._redis = aioredis.from_url(self._url, decode_responses=True)
        return self._redis

    def _key(self, *parts: str) -> str:
        return self._prefix + ":".join(parts)

    def _role_name_key(self, role: Role) -> str:
        name = role.name.lower()
        if role.scope is None:
            return self._key("rolename", "g", name)
        return self._key("rolename", "b", quote(role.scope, safe=""), name)

    async def _load_user(self, user_id: Optional[str]) -> Optional[CredentialRecord]:
        if not user_id:
            return None
        data = await self._get_redis().get(self._key("user", user_id))
        if not data:
            return None
        try:
            return CredentialRecord.from_dict(json.loads(data))
        except (json.JSONDecodeError, KeyError, ValueError):
            logger.error("Corrupt credential record for user %s", user_id)
            return None

    async def create_user(self, record: CredentialRecord) -> CredentialRecord:
        """
        Store a new record in Redis.

        The email index is claimed first with SET NX; losing that race
        raises ConflictError before anything else is written. A failed
        record write releases the claim again.
        """
        redis = self._get_redis()
        record.email = normalize_email(record.email)

        claimed = await redis.set(self._key("email", record.email), record.user_id, nx=True)
        if not claimed:
            raise ConflictError("Email already in use")

        try:
            await self._write_user(record, previous=None)
        except Exception:
            await redis.delete(self._key("email", record.email))
            raise
        return record

    async def _write_user(self, record: CredentialRecord, previous: Optional[CredentialRecord]):
        redis = self._get_redis()
        pipe = redis.pipeline(transaction=True)
        pipe.set(self._key("user", record.user_id), json.dumps(record.to_dict()))
        if previous and previous.email != record.email:
            pipe.delete(self._key("email", previous.email))

        for field, index in (("verification_token", "verify"), ("reset_token", "reset")):
            old = getattr(previous, field) if previous else None
            new = getattr(record, field)
            if old and old != new:
                pipe.delete(self._key(index, old))
            if new:
                pipe.set(self._key(index, new), record.user_id)

        await pipe.execute()

    async def get_user(self, user_id: str) -> Optional[CredentialRecord]:
        return await self._load_user(user_id)

    async def get_user_by_email(self, email: str) -> Optional[CredentialRecord]:
        user_id = await self._get_redis().get(self._key("email", normalize_email(email)))
        return await self._load_user(user_id)

    async def get_user_by_verification_token(self, token: str) -> Optional[CredentialRecord]:
        user_id = await self._get_redis().get(self._key("verify", token))
        record = await self._load_user(user_id)
        if record and record.verification_token == token:
            return record
        return None

    async def get_user_by_reset_token(self, token: str) -> Optional[CredentialRecord]:
        user_id = await self._get_redis().get(self._key("reset", token))
        record = await self._load_user(user_id)
        if record and record.reset_token == token:
            return record
        return None

    async def update_user(self, record: CredentialRecord) -> bool:
        """Replace a record, moving its email index entry if needed."""
        current = await self._load_user(record.user_id)
        if not current:
            return False

        redis = self._get_redis()
        record.email = normalize_email(record.email)
        email_changed = record.email != current.email
        if email_changed:
            claimed = await redis.set(self._key("email", record.email), record.user_id, nx=True)
            if not claimed:
                raise ConflictError("Email already in use")

        # The old email index is dropped inside the same transaction
        try:
            await self._write_user(record, previous=current)
        except Exception:
            if email_changed:
                await redis.delete(self._key("email", record.email))
            raise
        return True

    async def delete_user(self, user_id: str) -> bool:
        record = await self._load_user(user_id)
        if not record:
            return False

        keys = [self._key("user", user_id), self._key("email", record.email)]
        if record.verification_token:
            keys.append(self._key("verify", record.verification_token))
        if record.reset_token:
            keys.append(self._key("reset", record.reset_token))

        await self._get_redis().delete(*keys)
        return True

    async def create_role(self, role: Role) -> Role:
        """Store a new role, claiming its name within the scope first."""
        redis = self._get_redis()

        claimed = await redis.set(self._role_name_key(role), role.role_id, nx=True)
        if not claimed:
            raise ConflictError(f"Role with name {role.name} already exists")

        pipe = redis.pipeline(transaction=True)
        pipe.set(self._key("role", role.role_id), json.dumps(role.to_dict()))
        pipe.sadd(self._key("roles"), role.role_id)
        try:
            await pipe.execute()
        except Exception:
            await redis.delete(self._role_name_key(role))
            raise
        return role

    async def get_role(self, role_id: str) -> Optional[Role]:
        data = await self._get_redis().get(self._key("role", role_id))
        if not data:
            return None
        try:
            return Role.from_dict(json.loads(data))
        except (json.JSONDecodeError, KeyError, ValueError):
            logger.error("Corrupt role %s", role_id)
            return None

    async def get_roles(self, role_ids: Iterable[str]) -> List[Role]:
        """Get several roles; IDs of deleted roles are skipped."""
        roles = []
        for role_id in role_ids:
            role = await self.get_role(role_id)
            if role:
                roles.append(role)
        return roles

    async def list_roles(self, business_id: Optional[str] = None) -> List[Role]:
        role_ids = await self._get_redis().smembers(self._key("roles"))
        roles = [
            role for role in await self.get_roles(role_ids)
            if business_id is None or role.business_id == business_id
        ]
        return sorted(roles, key=lambda r: r.name.lower())

    async def update_role(self, role: Role) -> bool:
        current = await self.get_role(role.role_id)
        if not current:
            return False

        redis = self._get_redis()
        old_key = self._role_name_key(current)
        new_key = self._role_name_key(role)
        renamed = new_key != old_key
        if renamed:
            claimed = await redis.set(new_key, role.role_id, nx=True)
            if not claimed:
                raise ConflictError(f"Role with name {role.name} already exists")

        pipe = redis.pipeline(transaction=True)
        pipe.set(self._key("role", role.role_id), json.dumps(role.to_dict()))
        if renamed:
            pipe.delete(old_key)
        try:
            await pipe.execute()
        except Exception:
            if renamed:
                await redis.delete(new_key)
            raise
        return True

    async def delete_role(self, role_id: str) -> bool:
        """
        Delete a role.

        User records keep the stale ID; get_roles() skips it.
        """
        role = await self.get_role(role_id)
        if not role:
            return False

        pipe = self._get_redis().pipeline(transaction=True)
        pipe.delete(self._key("role", role_id), self._role_name_key(role))
        pipe.srem(self._key("roles"), role_id)
        await pipe.execute()
        return True
