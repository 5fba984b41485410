"""
Role-based and ownership-based authorization decisions.

Role sets are fixed per operation, so a decision is a set-membership test
plus, for ownership rules, a single id comparison.
"""
from dataclasses import dataclass
from typing import FrozenSet, Optional, Union
from uuid import UUID

from app.core.errors import AuthenticationFailure, AuthorizationFailure, DenyReason, TokenFailure
from app.db.models.user import UserRole
from app.schemas.user import CurrentUser

# Per-operation role sets
ADMIN_ONLY: FrozenSet[UserRole] = frozenset({UserRole.admin})
COURT_STAFF: FrozenSet[UserRole] = frozenset({UserRole.admin, UserRole.judge, UserRole.clerk})
STATISTICS_VIEWERS: FrozenSet[UserRole] = frozenset({UserRole.admin, UserRole.judge})
# Everyone except the anonymous-equivalent public role may read restricted cases
RESTRICTED_CASE_READERS: FrozenSet[UserRole] = frozenset(set(UserRole) - {UserRole.public})

CREATE_CASE_ROLES = COURT_STAFF
EDIT_CASE_ROLES = COURT_STAFF
CHANGE_CASE_STATUS_ROLES = COURT_STAFF
DELETE_CASE_ROLES = ADMIN_ONLY
SCHEDULE_HEARING_ROLES = COURT_STAFF
CHANGE_HEARING_STATUS_ROLES = COURT_STAFF
DELETE_HEARING_ROLES = ADMIN_ONLY
MANAGE_COURTS_ROLES = ADMIN_ONLY
MANAGE_USERS_ROLES = ADMIN_ONLY
MANAGE_ADVOCATES_ROLES = ADMIN_ONLY
# Lawyers may add and edit parties on cases; removing one is court business
MANAGE_PARTIES_ROLES: FrozenSet[UserRole] = COURT_STAFF | {UserRole.lawyer}
REMOVE_PARTY_ROLES = COURT_STAFF


@dataclass(frozen=True)
class AuthorizationDecision:
    allowed: bool
    reason: Optional[DenyReason] = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = AuthorizationDecision(allowed=True)


def authorize(identity: Optional[CurrentUser], allowed_roles: FrozenSet[UserRole]) -> AuthorizationDecision:
    if identity is None:
        return AuthorizationDecision(False, DenyReason.unauthenticated)
    if identity.role in allowed_roles:
        return ALLOW
    return AuthorizationDecision(False, DenyReason.role_not_permitted)


def authorize_owner_or_roles(
    identity: Optional[CurrentUser],
    owner_id: Optional[Union[UUID, str]],
    allowed_roles: FrozenSet[UserRole],
) -> AuthorizationDecision:
    """
    Allow the resource owner, or anyone holding one of ``allowed_roles``.
    """
    if identity is None:
        return AuthorizationDecision(False, DenyReason.unauthenticated)
    if owner_id is not None and str(identity.id) == str(owner_id):
        return ALLOW
    if identity.role in allowed_roles:
        return ALLOW
    return AuthorizationDecision(False, DenyReason.not_owner)


def ensure_authorized(identity: Optional[CurrentUser], allowed_roles: FrozenSet[UserRole]) -> CurrentUser:
    decision = authorize(identity, allowed_roles)
    _raise_on_deny(decision, identity, allowed_roles)
    return identity


def ensure_owner_or_roles(
    identity: Optional[CurrentUser],
    owner_id: Optional[Union[UUID, str]],
    allowed_roles: FrozenSet[UserRole],
) -> CurrentUser:
    decision = authorize_owner_or_roles(identity, owner_id, allowed_roles)
    _raise_on_deny(decision, identity, allowed_roles)
    return identity


def _raise_on_deny(
    decision: AuthorizationDecision,
    identity: Optional[CurrentUser],
    allowed_roles: FrozenSet[UserRole],
) -> None:
    if decision.allowed:
        return
    if decision.reason == DenyReason.unauthenticated:
        raise AuthenticationFailure(TokenFailure.missing)
    raise AuthorizationFailure(
        decision.reason,
        role=identity.role.value,
        required_roles=[role.value for role in allowed_roles],
    )
