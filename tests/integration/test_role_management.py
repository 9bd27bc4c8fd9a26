"""
Integration tests for role management and its effect on authorization.
"""

import pytest
from venue_auth.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from venue_auth.domain.principal import AccountType
from venue_auth.domain.role import PermissionAction, ResourceCategory

MANAGER_PERMISSIONS = {"reservations": ["create", "read", "update"], "guests": ["read"]}


@pytest.fixture
async def admin(client):
    record = await client.accounts.register("admin@x.com", "P@ssw0rd1", first_name="Ada")
    await client.accounts.promote_to_admin(record.user_id)
    return await client.auth.load_principal(record.user_id)


@pytest.fixture
async def owner(client):
    record = await client.accounts.register(
        "owner@x.com", "P@ssw0rd1", first_name="Olga", account_type=AccountType.BUSINESS
    )
    await client.accounts.add_business(record.user_id, "biz_1")
    return await client.auth.load_principal(record.user_id)


@pytest.mark.asyncio
class TestRoleCrud:

    async def test_admin_creates_global_role(self, client, admin):
        role = await client.roles.create_role(admin, "Manager", MANAGER_PERMISSIONS)

        assert role.business_id is None
        assert role.created_by == admin.user_id
        assert role.allows(ResourceCategory.RESERVATIONS, PermissionAction.CREATE)
        assert not role.allows(ResourceCategory.SETTINGS)
        assert await client.roles.get_role(role.role_id) == role

    async def test_owner_creates_business_role(self, client, owner):
        role = await client.roles.create_role(owner, "Host", {"guests": ["read"]}, business_id="biz_1")

        assert role.business_id == "biz_1"
        assert [r.role_id for r in await client.roles.list_roles("biz_1")] == [role.role_id]
        assert await client.roles.list_roles("biz_2") == []

    async def test_owner_cannot_create_global_role(self, client, owner):
        with pytest.raises(ForbiddenError):
            await client.roles.create_role(owner, "Manager")

    async def test_non_owner_cannot_touch_business(self, client, owner, verified_user):
        jane = await client.auth.load_principal(verified_user.user_id)

        with pytest.raises(ForbiddenError) as exc_info:
            await client.roles.create_role(jane, "Host", business_id="biz_1")
        assert exc_info.value.message == "You are not the owner of this business account."

    async def test_names_unique_within_scope(self, client, admin, owner):
        await client.roles.create_role(owner, "Host", business_id="biz_1")

        with pytest.raises(ConflictError):
            await client.roles.create_role(owner, "host", business_id="biz_1")

        # Same name in another scope is fine
        await client.roles.create_role(admin, "Host")
        await client.roles.create_role(admin, "Host", business_id="biz_2")

    async def test_invalid_input(self, client, admin):
        with pytest.raises(BadRequestError):
            await client.roles.create_role(admin, "   ")
        with pytest.raises(BadRequestError):
            await client.roles.create_role(admin, "Manager", {"kitchen": ["read"]})
        with pytest.raises(BadRequestError):
            await client.roles.create_role(admin, "Manager", {"guests": ["cook"]})

    async def test_update_role(self, client, owner):
        role = await client.roles.create_role(owner, "Host", {"guests": ["read"]}, business_id="biz_1")

        updated = await client.roles.update_role(owner, role.role_id, name="Senior Host", permissions=MANAGER_PERMISSIONS)

        stored = await client.roles.get_role(role.role_id)
        assert stored == updated
        assert stored.name == "Senior Host"
        assert stored.allows(ResourceCategory.RESERVATIONS, PermissionAction.UPDATE)

    async def test_rename_into_taken_name_conflicts(self, client, owner):
        await client.roles.create_role(owner, "Host", business_id="biz_1")
        other = await client.roles.create_role(owner, "Server", business_id="biz_1")

        with pytest.raises(ConflictError):
            await client.roles.update_role(owner, other.role_id, name="HOST")

    async def test_delete_role(self, client, owner):
        role = await client.roles.create_role(owner, "Host", business_id="biz_1")

        deleted = await client.roles.delete_role(owner, role.role_id)

        assert deleted.role_id == role.role_id
        with pytest.raises(NotFoundError) as exc_info:
            await client.roles.get_role(role.role_id)
        assert exc_info.value.message == f"Role with ID {role.role_id} not found"


@pytest.mark.asyncio
class TestRoleAssignment:

    async def test_assigned_role_grants_access(self, client, owner, verified_user):
        role = await client.roles.create_role(owner, "Manager", MANAGER_PERMISSIONS, business_id="biz_1")
        tokens = await client.login("jane@x.com", "P@ssw0rd1")
        header = f"Bearer {tokens['access_token']}"

        jane = await client.authenticate(header)
        with pytest.raises(ForbiddenError):
            client.authorize(jane, ["Manager", "BUSINESS"])

        await client.roles.assign_role(owner, verified_user.user_id, role.role_id)

        # Same token, fresh role lookup
        jane = await client.authenticate(header)
        assert jane.role_names == frozenset({"Manager"})
        assert client.authorize(jane, ["Manager", "BUSINESS"]) is True

    async def test_revoke_role(self, client, owner, verified_user):
        role = await client.roles.create_role(owner, "Manager", business_id="biz_1")
        await client.roles.assign_role(owner, verified_user.user_id, role.role_id)
        await client.roles.assign_role(owner, verified_user.user_id, role.role_id)

        stored = await client.store.get_user(verified_user.user_id)
        assert stored.role_ids == [role.role_id]

        await client.roles.revoke_role(owner, verified_user.user_id, role.role_id)

        jane = await client.auth.load_principal(verified_user.user_id)
        assert jane.roles == ()

    async def test_deleted_role_no_longer_grants(self, client, owner, verified_user):
        role = await client.roles.create_role(owner, "Manager", business_id="biz_1")
        await client.roles.assign_role(owner, verified_user.user_id, role.role_id)

        await client.roles.delete_role(owner, role.role_id)

        jane = await client.auth.load_principal(verified_user.user_id)
        with pytest.raises(ForbiddenError):
            client.authorize(jane, ["Manager"])

    async def test_assign_to_unknown_user(self, client, owner):
        role = await client.roles.create_role(owner, "Host", business_id="biz_1")

        with pytest.raises(NotFoundError):
            await client.roles.assign_role(owner, "missing", role.role_id)
