"""
Role Service - Role management and assignment.

Only admins or the owner of a role's business may create, change, delete,
or assign that role. Global roles (no business) are admin-only.
"""

import logging
from typing import Iterable, List, Mapping, Optional
from venue_auth.errors import ForbiddenError, NotFoundError
from venue_auth.ports.credential_store_port import CredentialStorePort
from venue_auth.domain.credential import CredentialRecord
from venue_auth.domain.principal import Principal
from venue_auth.domain.role import Role, parse_permissions
from venue_auth.services.store_calls import store_call

logger = logging.getLogger(__name__)


def _check_can_manage(principal: Principal, business_id: Optional[str]):
    if principal.is_admin:
        return
    if business_id is None:
        raise ForbiddenError("Only admins can manage global roles")
    if not principal.owns_business(business_id):
        raise ForbiddenError("You are not the owner of this business account.")


class RoleService:
    """CRUD and assignment for roles."""

    def __init__(self, store: CredentialStorePort):
        self._store = store

    async def _save(self, record: CredentialRecord, action: str):
        record.touch()
        if not await store_call(self._store.update_user(record), action):
            raise NotFoundError("User not found")

    async def get_role(self, role_id: str) -> Role:
        role = await store_call(self._store.get_role(role_id), "role lookup")
        if role is None:
            raise NotFoundError(f"Role with ID {role_id} not found")
        return role

    async def list_roles(self, business_id: Optional[str] = None) -> List[Role]:
        return await store_call(self._store.list_roles(business_id), "role listing")

    async def create_role(
        self,
        principal: Principal,
        name: str,
        permissions: Optional[Mapping[str, Iterable[str]]] = None,
        business_id: Optional[str] = None,
    ) -> Role:
        """
        Create a role.

        Args:
            principal: Acting principal
            name: Role name, unique within the business scope
            permissions: Wire-format permission map
            business_id: Owning business, None for a global role

        Raises:
            ForbiddenError: Not admin and not owner of business_id
            BadRequestError: Empty name or unknown permission
            ConflictError: Name taken in scope
        """
        _check_can_manage(principal, business_id)
        role = Role.create(
            name=name,
            permissions=parse_permissions(permissions),
            business_id=business_id,
            created_by=principal.user_id,
        )

        created = await store_call(self._store.create_role(role), "role creation")
        logger.info("User %s created role %s (%s)", principal.user_id, created.role_id, created.name)
        return created

    async def update_role(
        self,
        principal: Principal,
        role_id: str,
        name: Optional[str] = None,
        permissions: Optional[Mapping[str, Iterable[str]]] = None,
    ) -> Role:
        """Rename a role and/or replace its permissions."""
        role = await self.get_role(role_id)
        _check_can_manage(principal, role.business_id)

        if name is not None:
            role.name = Role.clean_name(name)
        if permissions is not None:
            role.permissions = parse_permissions(permissions)

        if not await store_call(self._store.update_role(role), "role update"):
            raise NotFoundError(f"Role with ID {role_id} not found")
        return role

    async def delete_role(self, principal: Principal, role_id: str) -> Role:
        role = await self.get_role(role_id)
        _check_can_manage(principal, role.business_id)

        if not await store_call(self._store.delete_role(role_id), "role deletion"):
            raise NotFoundError(f"Role with ID {role_id} not found")

        logger.info("User %s deleted role %s", principal.user_id, role_id)
        return role

    async def assign_role(self, principal: Principal, user_id: str, role_id: str) -> None:
        """
        Give a role to a user. Assigning an already held role is a no-op.

        Raises:
            NotFoundError: Unknown role or user
            ForbiddenError: Principal may not manage the role
        """
        role = await self.get_role(role_id)
        _check_can_manage(principal, role.business_id)

        record = await store_call(self._store.get_user(user_id), "user lookup")
        if record is None:
            raise NotFoundError("User not found")

        if role_id not in record.role_ids:
            record.role_ids.append(role_id)
            await self._save(record, "role assignment")

    async def revoke_role(self, principal: Principal, user_id: str, role_id: str) -> None:
        """Take a role away from a user. Not holding it is a no-op."""
        role = await self.get_role(role_id)
        _check_can_manage(principal, role.business_id)

        record = await store_call(self._store.get_user(user_id), "user lookup")
        if record is None:
            raise NotFoundError("User not found")

        if role_id in record.role_ids:
            record.role_ids.remove(role_id)
            await self._save(record, "role revocation")
