"""
Memory Credential Store - In-memory credential and role storage (testing only).
"""

import copy
from typing import Optional, List, Dict, Iterable, Tuple
from venue_auth.errors import ConflictError
from venue_auth.ports.credential_store_port import CredentialStorePort
from venue_auth.domain.credential import CredentialRecord, normalize_email
from venue_auth.domain.role import Role


class MemoryCredentialStore(CredentialStorePort):
    """
    In-memory credential storage.

    WARNING: Only for testing. Records are lost on restart.
    Not suitable for production or distributed deployments.

    Each write checks and mutates the indexes without awaiting in between,
    so on a single event loop it is atomic with respect to other requests.
    Records are copied in and out so callers never share state with the store.
    """

    def __init__(self):
        """Initialize in-memory storage."""
        self._users: Dict[str, CredentialRecord] = {}
        self._email_index: Dict[str, str] = {}
        self._roles: Dict[str, Role] = {}
        self._role_names: Dict[Tuple[Optional[str], str], str] = {}

    async def create_user(self, record: CredentialRecord) -> CredentialRecord:
        """Store a new record in memory."""
        email = normalize_email(record.email)
        if email in self._email_index:
            raise ConflictError("Email already in use")

        stored = copy.deepcopy(record)
        stored.email = email
        self._users[stored.user_id] = stored
        self._email_index[email] = stored.user_id
        return copy.deepcopy(stored)

    async def get_user(self, user_id: str) -> Optional[CredentialRecord]:
        record = self._users.get(user_id)
        return copy.deepcopy(record) if record else None

    async def get_user_by_email(self, email: str) -> Optional[CredentialRecord]:
        user_id = self._email_index.get(normalize_email(email))
        if not user_id:
            return None
        return await self.get_user(user_id)

    async def get_user_by_verification_token(self, token: str) -> Optional[CredentialRecord]:
        return self._find_user(lambda r: r.verification_token == token)

    async def get_user_by_reset_token(self, token: str) -> Optional[CredentialRecord]:
        return self._find_user(lambda r: r.reset_token == token)

    def _find_user(self, predicate) -> Optional[CredentialRecord]:
        for record in self._users.values():
            if predicate(record):
                return copy.deepcopy(record)
        return None

    async def update_user(self, record: CredentialRecord) -> bool:
        """Replace a record, moving its email index entry if needed."""
        current = self._users.get(record.user_id)
        if not current:
            return False

        email = normalize_email(record.email)
        if email != current.email:
            if email in self._email_index:
                raise ConflictError("Email already in use")
            del self._email_index[current.email]
            self._email_index[email] = record.user_id

        stored = copy.deepcopy(record)
        stored.email = email
        self._users[record.user_id] = stored
        return True

    async def delete_user(self, user_id: str) -> bool:
        record = self._users.pop(user_id, None)
        if not record:
            return False

        self._email_index.pop(record.email, None)
        return True

    async def create_role(self, role: Role) -> Role:
        """Store a new role in memory."""
        name_key = (role.scope, role.name.lower())
        if name_key in self._role_names:
            raise ConflictError(f"Role with name {role.name} already exists")

        self._roles[role.role_id] = copy.deepcopy(role)
        self._role_names[name_key] = role.role_id
        return copy.deepcopy(role)

    async def get_role(self, role_id: str) -> Optional[Role]:
        role = self._roles.get(role_id)
        return copy.deepcopy(role) if role else None

    async def get_roles(self, role_ids: Iterable[str]) -> List[Role]:
        return [
            copy.deepcopy(self._roles[role_id])
            for role_id in role_ids
            if role_id in self._roles
        ]

    async def list_roles(self, business_id: Optional[str] = None) -> List[Role]:
        roles = [
            copy.deepcopy(role) for role in self._roles.values()
            if business_id is None or role.business_id == business_id
        ]
        return sorted(roles, key=lambda r: r.name.lower())

    async def update_role(self, role: Role) -> bool:
        """Replace a role, moving its name index entry if needed."""
        current = self._roles.get(role.role_id)
        if not current:
            return False

        old_key = (current.scope, current.name.lower())
        new_key = (role.scope, role.name.lower())
        if new_key != old_key:
            if new_key in self._role_names:
                raise ConflictError(f"Role with name {role.name} already exists")
            del self._role_names[old_key]
            self._role_names[new_key] = role.role_id

        self._roles[role.role_id] = copy.deepcopy(role)
        return True

    async def delete_role(self, role_id: str) -> bool:
        """Delete a role and unassign it from every user."""
        role = self._roles.pop(role_id, None)
        if not role:
            return False

        self._role_names.pop((role.scope, role.name.lower()), None)
        for record in self._users.values():
            if role_id in record.role_ids:
                record.role_ids.remove(role_id)
        return True
