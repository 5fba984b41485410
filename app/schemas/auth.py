from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field
from app.schemas.user import NewPassword, User


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(BaseModel):
    refresh_token: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    old_password: str = Field(..., min_length=1)
    new_password: NewPassword


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    refresh_token: Optional[str] = None
    refresh_expires_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    user: User
    tokens: Token


class TokenPayload(BaseModel):
    sub: str
    type: str
    exp: int
    iat: int
    jti: str
    email: Optional[str] = None
    username: Optional[str] = None
    role: Optional[str] = None
