"""
Unit tests for Principal domain model.
"""

import pytest
from dataclasses import FrozenInstanceError
from venue_auth.domain.principal import Principal, AccountType
from venue_auth.domain.role import Role, ResourceCategory, PermissionAction


def test_principal_creation():
    """Test basic principal creation."""
    principal = Principal(
        user_id="usr_1",
        email="alice@example.com",
        account_type=AccountType.BUSINESS,
        first_name="Alice",
    )

    assert principal.user_id == "usr_1"
    assert principal.email == "alice@example.com"
    assert principal.account_type == AccountType.BUSINESS
    assert principal.is_admin is False
    assert principal.roles == ()
    assert principal.display_name == "Alice"


def test_principal_is_immutable():
    principal = Principal(user_id="usr_1", email="alice@example.com")

    with pytest.raises(FrozenInstanceError):
        principal.is_admin = True


def test_display_name_falls_back_to_email():
    principal = Principal(user_id="usr_1", email="alice@example.com")
    assert principal.display_name == "alice@example.com"


def test_role_names_and_ownership():
    manager = Role.create("Manager", {ResourceCategory.GUESTS: frozenset({PermissionAction.READ})})
    principal = Principal(
        user_id="usr_1",
        email="alice@example.com",
        roles=(manager,),
        business_ids=frozenset({"biz_1"}),
    )

    assert principal.role_names == frozenset({"Manager"})
    assert principal.owns_business("biz_1")
    assert not principal.owns_business("biz_2")
    assert not principal.owns_business(None)


def test_claims_round_trip():
    """Test to_claims and from_claims."""
    principal = Principal(
        user_id="usr_1",
        email="alice@example.com",
        account_type=AccountType.ADMIN,
        is_admin=True,
        first_name="Alice",
    )

    claims = principal.to_claims()
    assert claims == {
        "id": "usr_1",
        "email": "alice@example.com",
        "firstName": "Alice",
        "isAdmin": True,
        "accountType": "ADMIN",
    }

    restored = Principal.from_claims(claims)
    assert restored == principal


def test_from_claims_rejects_unknown_account_type():
    with pytest.raises(ValueError):
        Principal.from_claims({"id": "usr_1", "email": "a@b.co", "accountType": "ROOT"})
