"""
Registration, login, logout, password change and token refresh.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import AuthenticationFailure, Conflict, InvalidRequest, NotFound, TokenFailure
from app.core.security import get_password_hash
from app.crud import user as user_crud
from app.db.models import User
from app.schemas.user import CurrentUser, UserBase, UserCreate, UserRegister
from app.services import credential_store
from app.services.token_service import IssuedToken, RefreshResult, token_service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Session:
    user: User
    access: IssuedToken
    refresh: IssuedToken


async def _ensure_unique(db: AsyncSession, data: UserBase) -> None:
    if await user_crud.get_user_by_email(db, data.email) or await user_crud.get_user_by_username(db, data.username):
        raise Conflict("User with email or username already exists")
    if data.bar_council_id and await user_crud.get_user_by_bar_council_id(db, data.bar_council_id):
        raise Conflict("User with this Bar Council ID already exists")


async def create_user(db: AsyncSession, data: UserCreate) -> User:
    """Create a user with any role and verification state."""
    await _ensure_unique(db, data)
    payload = data.model_dump(exclude={"password"})
    payload["password_hash"] = get_password_hash(data.password)
    return await user_crud.create_user(db, payload)


async def _start_session(db: AsyncSession, user: User) -> Session:
    # Issuing a refresh token replaces the stored digest, ending any earlier session
    refresh = await token_service.issue_refresh_token(db, user)
    access = token_service.issue_access_token(user)
    return Session(user=user, access=access, refresh=refresh)


async def register(db: AsyncSession, data: UserRegister) -> Session:
    await _ensure_unique(db, data)
    payload = data.model_dump(exclude={"password"})
    payload["password_hash"] = get_password_hash(data.password)
    payload["is_verified"] = False
    user = await user_crud.create_user(db, payload)
    logger.info(f"User registered: {user.id} as {user.role.value}")
    return await _start_session(db, user)


async def login(db: AsyncSession, email: str, password: str) -> Session:
    """
    Unknown email and wrong password fail identically.
    """
    user = await user_crud.get_user_by_email(db, email)
    if user is None or not await credential_store.verify_password(db, user.id, password):
        raise AuthenticationFailure(TokenFailure.bad_credentials)
    logger.info(f"User logged in: {user.id}")
    return await _start_session(db, user)


async def logout(db: AsyncSession, identity: CurrentUser) -> None:
    await token_service.revoke_refresh_token(db, identity.id)
    logger.info(f"User logged out: {identity.id}")


async def refresh(db: AsyncSession, refresh_token: Optional[str]) -> RefreshResult:
    return await token_service.refresh(db, refresh_token)


async def change_password(db: AsyncSession, identity: CurrentUser, old_password: str, new_password: str) -> None:
    if not await credential_store.verify_password(db, identity.id, old_password):
        raise InvalidRequest("Invalid old password")
    if old_password == new_password:
        raise InvalidRequest("New password must differ from the old password")
    await credential_store.set_password(db, identity.id, new_password)


async def get_profile(db: AsyncSession, identity: CurrentUser) -> User:
    user = await user_crud.get_user(db, identity.id)
    if user is None:
        raise NotFound("User")
    return user
