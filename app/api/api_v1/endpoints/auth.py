from typing import Any, Optional
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.auth import get_current_user
from app.core.config import settings
from app.core.database import get_db
from app.schemas.auth import AuthResponse, ChangePasswordRequest, LoginRequest, RefreshTokenRequest, Token
from app.schemas.user import CurrentUser, User, UserRegister
from app.services import auth_service
from app.services.auth_service import Session
from app.services.token_service import IssuedToken

router = APIRouter()


def _set_cookie(response: Response, name: str, issued: IssuedToken) -> None:
    response.set_cookie(
        key=name,
        value=issued.token,
        expires=issued.expires_at,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )


def _session_response(response: Response, session: Session) -> AuthResponse:
    _set_cookie(response, settings.ACCESS_TOKEN_COOKIE_NAME, session.access)
    _set_cookie(response, settings.REFRESH_TOKEN_COOKIE_NAME, session.refresh)
    return AuthResponse(
        user=User.model_validate(session.user),
        tokens=Token(
            access_token=session.access.token,
            expires_at=session.access.expires_at,
            refresh_token=session.refresh.token,
            refresh_expires_at=session.refresh.expires_at,
        ),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    *,
    db: AsyncSession = Depends(get_db),
    user_in: UserRegister,
    response: Response,
) -> Any:
    """
    Register a new account and start a session for it.

    Only the public, litigant and lawyer roles can be chosen here.
    """
    session = await auth_service.register(db, user_in)
    return _session_response(response, session)


@router.post("/login", response_model=AuthResponse)
async def login(
    *,
    db: AsyncSession = Depends(get_db),
    credentials: LoginRequest,
    response: Response,
) -> Any:
    session = await auth_service.login(db, credentials.email, credentials.password)
    return _session_response(response, session)


@router.post("/logout")
async def logout(
    response: Response,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Revoke the stored refresh token and clear the auth cookies.
    """
    await auth_service.logout(db, current_user)
    response.delete_cookie(settings.ACCESS_TOKEN_COOKIE_NAME)
    response.delete_cookie(settings.REFRESH_TOKEN_COOKIE_NAME)
    return {"message": "Successfully logged out"}


@router.post("/refresh-token", response_model=Token)
async def refresh_token(
    request: Request,
    response: Response,
    payload: Optional[RefreshTokenRequest] = None,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Exchange a refresh token for a new access token.

    The token is read from the body, falling back to the refresh cookie.
    """
    token = payload.refresh_token if payload and payload.refresh_token else None
    if token is None:
        token = request.cookies.get(settings.REFRESH_TOKEN_COOKIE_NAME)

    result = await auth_service.refresh(db, token)
    _set_cookie(response, settings.ACCESS_TOKEN_COOKIE_NAME, result.access)
    tokens = Token(access_token=result.access.token, expires_at=result.access.expires_at)
    if result.refresh is not None:
        _set_cookie(response, settings.REFRESH_TOKEN_COOKIE_NAME, result.refresh)
        tokens.refresh_token = result.refresh.token
        tokens.refresh_expires_at = result.refresh.expires_at
    return tokens


@router.get("/me", response_model=User)
async def read_current_user(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Any:
    return await auth_service.get_profile(db, current_user)


@router.post("/change-password")
async def change_password(
    *,
    db: AsyncSession = Depends(get_db),
    body: ChangePasswordRequest,
    response: Response,
    current_user: CurrentUser = Depends(get_current_user),
) -> Any:
    """
    Change the password; every outstanding refresh token stops working.
    """
    await auth_service.change_password(db, current_user, body.old_password, body.new_password)
    response.delete_cookie(settings.REFRESH_TOKEN_COOKIE_NAME)
    return {"message": "Password changed successfully"}
