from typing import FrozenSet, Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.database import get_db
from app.core.errors import AuthenticationFailure, TokenFailure
from app.core.permissions import ensure_authorized
from app.crud.user import get_identity
from app.db.models.user import UserRole
from app.schemas.user import CurrentUser
from app.services.token_service import token_service

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)


def extract_access_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    """
    Cookie first, then the Authorization header.
    """
    cookie_token = request.cookies.get(settings.ACCESS_TOKEN_COOKIE_NAME)
    if cookie_token:
        return cookie_token
    if credentials and credentials.scheme.lower() == "bearer" and credentials.credentials:
        return credentials.credentials
    return None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    """
    Resolve the bearer token to an identity or reject the request.

    Read-only: nothing is written on success or failure.
    """
    token = extract_access_token(request, credentials)
    if not token:
        raise AuthenticationFailure(TokenFailure.missing)

    claims = token_service.verify_access_token(token)

    identity = await get_identity(db, claims.user_id)
    if identity is None:
        logger.warning(f"Token for unknown user {claims.user_id} rejected")
        raise AuthenticationFailure(TokenFailure.unknown_identity)

    request.state.identity = identity
    return identity


def require_roles(allowed_roles: FrozenSet[UserRole]):
    """
    Dependency factory gating a route on a static role set.
    """
    def role_checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        return ensure_authorized(current_user, allowed_roles)
    return role_checker
