import uuid

import pytest

from app.core.errors import AuthenticationFailure, AuthorizationFailure, DenyReason
from app.core.permissions import (
    ADMIN_ONLY,
    COURT_STAFF,
    authorize,
    authorize_owner_or_roles,
    ensure_authorized,
    ensure_owner_or_roles,
)
from app.db.models import UserRole
from app.schemas.user import CurrentUser


def identity(role: UserRole, user_id=None) -> CurrentUser:
    return CurrentUser(
        id=user_id or uuid.uuid4(),
        username=f"{role.value}_user",
        email=f"{role.value}@example.com",
        full_name="Someone",
        role=role,
    )


def test_public_denied_on_admin_only():
    decision = authorize(identity(UserRole.public), ADMIN_ONLY)
    assert not decision.allowed
    assert decision.reason == DenyReason.role_not_permitted


def test_admin_allowed_on_admin_only():
    decision = authorize(identity(UserRole.admin), ADMIN_ONLY)
    assert decision.allowed
    assert decision.reason is None


def test_missing_identity_is_unauthenticated():
    decision = authorize(None, ADMIN_ONLY)
    assert not decision
    assert decision.reason == DenyReason.unauthenticated


@pytest.mark.parametrize("role", [UserRole.admin, UserRole.judge, UserRole.clerk])
def test_court_staff_roles(role):
    assert authorize(identity(role), COURT_STAFF).allowed


@pytest.mark.parametrize("role", [UserRole.lawyer, UserRole.litigant, UserRole.public])
def test_outside_court_staff(role):
    assert not authorize(identity(role), COURT_STAFF).allowed


def test_owner_allowed_without_role():
    owner_id = uuid.uuid4()
    decision = authorize_owner_or_roles(identity(UserRole.litigant, owner_id), owner_id, ADMIN_ONLY)
    assert decision.allowed


def test_owner_id_compared_as_string():
    owner_id = uuid.uuid4()
    assert authorize_owner_or_roles(identity(UserRole.lawyer, owner_id), str(owner_id), ADMIN_ONLY).allowed


def test_non_owner_without_role_denied():
    decision = authorize_owner_or_roles(identity(UserRole.litigant), uuid.uuid4(), ADMIN_ONLY)
    assert not decision.allowed
    assert decision.reason == DenyReason.not_owner


def test_role_grants_access_to_others_resources():
    assert authorize_owner_or_roles(identity(UserRole.admin), uuid.uuid4(), ADMIN_ONLY).allowed


def test_ensure_authorized_raises_with_required_roles():
    with pytest.raises(AuthorizationFailure) as exc_info:
        ensure_authorized(identity(UserRole.public), COURT_STAFF)
    payload = exc_info.value.payload()
    assert payload["reason"] == "role_not_permitted"
    assert payload["required_roles"] == ["admin", "clerk", "judge"]


def test_ensure_authorized_without_identity_is_authentication_failure():
    with pytest.raises(AuthenticationFailure):
        ensure_authorized(None, ADMIN_ONLY)


def test_ensure_owner_returns_identity():
    owner = identity(UserRole.public)
    assert ensure_owner_or_roles(owner, owner.id, ADMIN_ONLY) is owner
