"""
Business Roles Example - A business owner defines a role and grants it to staff.
"""

import asyncio

from venue_auth import AuthClient, AuthSettings, AccountType, ResourceCategory
from venue_auth.errors import ForbiddenError


async def register_verified(client, email, **kwargs):
    record = await client.accounts.register(email, "Sup3rSecret", **kwargs)
    await client.accounts.verify_email(record.verification_token)
    return record


async def main():
    client = AuthClient.from_settings(
        AuthSettings(jwt_secret="my-access-secret", jwt_refresh_secret="my-refresh-secret")
    )

    # Business owner and a staff member
    owner_record = await register_verified(
        client, "owner@bistro.example", first_name="Olga", account_type=AccountType.BUSINESS
    )
    await client.accounts.add_business(owner_record.user_id, "bistro")
    owner = await client.auth.load_principal(owner_record.user_id)

    staff_record = await register_verified(client, "sam@bistro.example", first_name="Sam")
    tokens = await client.login("sam@bistro.example", "Sup3rSecret")
    header = f"Bearer {tokens['access_token']}"

    # Owner creates a role scoped to the business
    role = await client.roles.create_role(
        owner,
        "Manager",
        {"reservations": ["create", "read", "update"], "guests": ["read"]},
        business_id="bistro",
    )
    print(f"Created role: {role.name} -> {role.to_dict()['permissions']}")

    # Before assignment
    sam = await client.authenticate(header)
    try:
        client.authorize(sam, ["Manager"], ResourceCategory.RESERVATIONS)
    except ForbiddenError as exc:
        print(f"\n✗ {exc.message}")

    # Assign; the same access token now carries the role
    await client.roles.assign_role(owner, staff_record.user_id, role.role_id)
    sam = await client.authenticate(header)
    client.authorize(sam, ["Manager"], ResourceCategory.RESERVATIONS)
    print(f"\n✓ {sam.display_name} holds {sorted(sam.role_names)}")

    # Staff cannot manage the business's roles
    try:
        await client.roles.create_role(sam, "Owner", business_id="bistro")
    except ForbiddenError as exc:
        print(f"✗ {exc.message}")

    # Revoke
    await client.roles.revoke_role(owner, staff_record.user_id, role.role_id)
    sam = await client.authenticate(header)
    print(f"\nRoles after revoke: {sorted(sam.role_names)}")


if __name__ == "__main__":
    asyncio.run(main())
