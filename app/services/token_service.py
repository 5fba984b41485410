"""
Access and refresh token issuance, verification and rotation.

Access tokens are stateless. Refresh tokens are trusted only while their
digest is the one stored on the user row, so issuing a new refresh token,
logging out or changing the password makes any earlier refresh token stale.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from jose import jwt, JWTError, ExpiredSignatureError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import TokenError, TokenFailure
from app.core.security import token_digest, digests_match
from app.crud import user as user_crud
from app.db.models import User

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class AccessClaims:
    user_id: UUID
    email: str
    username: str
    role: str
    expires_at: datetime


@dataclass(frozen=True)
class RefreshClaims:
    user_id: UUID
    expires_at: datetime


@dataclass(frozen=True)
class RefreshResult:
    access: IssuedToken
    refresh: Optional[IssuedToken] = None


class TokenService:
    """
    Signs and verifies the two token kinds with independent secrets.

    Example:
        service = TokenService.from_settings(settings)
        issued = service.issue_access_token(user)
        claims = service.verify_access_token(issued.token)
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta,
        refresh_ttl: timedelta,
        algorithm: str = "HS256",
        rotate_on_use: bool = False,
    ):
        if access_secret == refresh_secret:
            raise ValueError("access and refresh tokens need distinct secrets")
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.algorithm = algorithm
        self.rotate_on_use = rotate_on_use

    @classmethod
    def from_settings(cls, config=settings) -> "TokenService":
        return cls(
            access_secret=config.ACCESS_TOKEN_SECRET,
            refresh_secret=config.REFRESH_TOKEN_SECRET,
            access_ttl=timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=config.REFRESH_TOKEN_EXPIRE_DAYS),
            algorithm=config.JWT_ALGORITHM,
            rotate_on_use=config.ROTATE_REFRESH_TOKEN_ON_USE,
        )

    # Issuance

    def issue_access_token(self, user: User) -> IssuedToken:
        claims = {
            "sub": str(user.id),
            "email": user.email,
            "username": user.username,
            "role": _role_value(user.role),
        }
        return self._sign(claims, ACCESS_TOKEN_TYPE, self.access_secret, self.access_ttl)

    def create_refresh_token(self, user: User) -> IssuedToken:
        """Sign a refresh token without recording it; see issue_refresh_token."""
        return self._sign({"sub": str(user.id)}, REFRESH_TOKEN_TYPE, self.refresh_secret, self.refresh_ttl)

    async def issue_refresh_token(self, db: AsyncSession, user: User) -> IssuedToken:
        issued = self.create_refresh_token(user)
        await user_crud.set_refresh_token_hash(db, user.id, token_digest(issued.token))
        logger.info(f"Refresh token issued for user {user.id}")
        return issued

    async def revoke_refresh_token(self, db: AsyncSession, user_id: UUID) -> None:
        await user_crud.set_refresh_token_hash(db, user_id, None)
        logger.info(f"Refresh token revoked for user {user_id}")

    # Verification

    def verify_access_token(self, token: str) -> AccessClaims:
        payload = self._decode(token, self.access_secret, ACCESS_TOKEN_TYPE)
        try:
            return AccessClaims(
                user_id=UUID(payload["sub"]),
                email=payload["email"],
                username=payload["username"],
                role=payload["role"],
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (KeyError, ValueError, TypeError):
            raise TokenError(TokenFailure.malformed)

    def decode_refresh_token(self, token: str) -> RefreshClaims:
        """Signature, expiry and shape checks only; no store lookup."""
        payload = self._decode(token, self.refresh_secret, REFRESH_TOKEN_TYPE)
        try:
            return RefreshClaims(
                user_id=UUID(payload["sub"]),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (KeyError, ValueError, TypeError):
            raise TokenError(TokenFailure.malformed)

    async def verify_refresh_token(self, db: AsyncSession, token: str) -> RefreshClaims:
        claims = self.decode_refresh_token(token)
        user = await user_crud.get_user(db, claims.user_id)
        if user is None:
            raise TokenError(TokenFailure.unknown_identity)
        if not digests_match(token, user.refresh_token_hash):
            raise TokenError(TokenFailure.stale)
        return claims

    async def refresh(self, db: AsyncSession, refresh_token: Optional[str]) -> RefreshResult:
        """
        Exchange a trusted refresh token for a new access token.

        The refresh token is rotated as well when rotation on use is enabled.
        """
        if not refresh_token:
            raise TokenError(TokenFailure.missing)
        claims = await self.verify_refresh_token(db, refresh_token)
        user = await user_crud.get_user(db, claims.user_id)
        if user is None:
            raise TokenError(TokenFailure.unknown_identity)

        access = self.issue_access_token(user)
        rotated = None
        if self.rotate_on_use:
            rotated = await self.issue_refresh_token(db, user)
        return RefreshResult(access=access, refresh=rotated)

    # Internals

    def _sign(self, claims: dict, token_type: str, secret: str, ttl: timedelta) -> IssuedToken:
        now = datetime.now(timezone.utc)
        expires_at = now + ttl
        to_encode = dict(claims)
        to_encode.update({
            "type": token_type,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": uuid.uuid4().hex,
        })
        token = jwt.encode(to_encode, secret, algorithm=self.algorithm)
        return IssuedToken(token=token, expires_at=datetime.fromtimestamp(to_encode["exp"], tz=timezone.utc))

    def _decode(self, token: str, secret: str, expected_type: str) -> dict:
        if not token:
            raise TokenError(TokenFailure.missing)
        try:
            jwt.get_unverified_header(token)
        except JWTError:
            raise TokenError(TokenFailure.malformed)
        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={"require_exp": True, "require_iat": True, "require_sub": True},
            )
        except ExpiredSignatureError:
            raise TokenError(TokenFailure.expired)
        except JWTError:
            raise TokenError(TokenFailure.invalid_signature)
        if payload.get("type") != expected_type:
            raise TokenError(TokenFailure.malformed)
        return payload


def _role_value(role) -> str:
    return getattr(role, "value", role)


token_service = TokenService.from_settings(settings)
