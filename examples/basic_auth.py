"""
Basic Authentication Example - Register, login, and guard a request with in-memory stores.
"""

import asyncio

from venue_auth import AuthClient, AuthSettings, AccountType
from venue_auth.errors import ForbiddenError


async def main():
    # Initialize auth client (no REDIS_URL, so in-memory stores)
    settings = AuthSettings(
        jwt_secret="my-access-secret",
        jwt_refresh_secret="my-refresh-secret",
        app_name="Bistro",
    )
    client = AuthClient.from_settings(settings)

    # Register and verify an account
    record = await client.accounts.register("alice@example.com", "Sup3rSecret", first_name="Alice")
    print(f"Registered: {record.email} ({record.account_type.value})")

    await client.accounts.verify_email(record.verification_token)
    print("Email verified")

    # Login
    tokens = await client.login("alice@example.com", "Sup3rSecret")
    print(f"\nLogin successful!")
    print(f"Access token: {tokens['access_token'][:50]}...")

    # Per-request pipeline: throttle -> authenticate -> authorize
    headers = {
        "authorization": f"Bearer {tokens['access_token']}",
        "x-forwarded-for": "203.0.113.7",
    }
    principal = await client.guard_request(headers)
    print(f"\nAuthenticated: {principal.display_name}")

    try:
        client.authorize(principal, ["Manager", AccountType.BUSINESS])
    except ForbiddenError as exc:
        print(f"Denied: {exc.message}")

    # Two-factor enrollment
    enrollment = await client.auth.generate_two_factor_secret(principal.user_id)
    print(f"\nScan this in an authenticator app: {enrollment['otpauth_url']}")

    code = client.auth._two_factor.current_code(enrollment["secret"])
    valid = await client.auth.verify_two_factor_token(principal.user_id, code)
    print(f"Code {code} valid: {valid}")

    result = await client.auth.enable_two_factor(principal.user_id)
    print(result["message"])

    # Rotate tokens
    rotated = await client.auth.refresh(tokens["refresh_token"])
    print(f"\nRefreshed: {rotated['access_token'] != tokens['access_token']}")


if __name__ == "__main__":
    asyncio.run(main())
