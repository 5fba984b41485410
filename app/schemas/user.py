from typing import Annotated, Optional
from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from datetime import datetime
from uuid import UUID
from app.core.security import is_password_too_long
from app.schemas.common import reject_null
from app.db.models.user import UserRole

# Roles anyone may pick when signing up; the rest are granted by an admin
SELF_REGISTRATION_ROLES = frozenset({UserRole.public, UserRole.litigant, UserRole.lawyer})

USERNAME_PATTERN = r"^[a-zA-Z0-9_.-]+$"


def check_password_length(v: str) -> str:
    # bcrypt limit is in bytes, so multibyte characters count more than once
    if is_password_too_long(v):
        raise ValueError("Password must be at most 72 bytes")
    return v


NewPassword = Annotated[str, Field(min_length=6, max_length=72), AfterValidator(check_password_length)]


class UserBase(BaseModel):
    username: str = Field(..., min_length=3, max_length=30, pattern=USERNAME_PATTERN)
    email: EmailStr
    full_name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    role: UserRole = UserRole.public
    bar_council_id: Optional[str] = None

    @field_validator("username", "email", mode="after")
    @classmethod
    def lowercase(cls, v: str) -> str:
        return v.strip().lower()

    @model_validator(mode="after")
    def lawyers_need_bar_council_id(self):
        if self.role == UserRole.lawyer and not self.bar_council_id:
            raise ValueError("Bar Council ID is required for lawyers")
        return self


class UserCreate(UserBase):
    """Admin-created user; any role may be assigned."""
    password: NewPassword
    is_verified: bool = False


class UserRegister(UserBase):
    password: NewPassword

    @field_validator("role")
    @classmethod
    def role_open_for_registration(cls, v: UserRole) -> UserRole:
        if v not in SELF_REGISTRATION_ROLES:
            raise ValueError(f"Role {v.value} cannot be chosen at registration")
        return v


class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def full_name_not_null(cls, v):
        return reject_null(v)


class UserRoleUpdate(BaseModel):
    role: UserRole
    bar_council_id: Optional[str] = None


class User(BaseModel):
    id: UUID
    username: str
    email: EmailStr
    full_name: str
    phone: Optional[str] = None
    role: UserRole
    bar_council_id: Optional[str] = None
    is_verified: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    id: UUID
    username: str
    full_name: str
    role: UserRole

    model_config = ConfigDict(from_attributes=True)


class CurrentUser(BaseModel):
    """
    Identity attached to an authenticated request.

    Built from a column projection; never carries the password hash or the
    refresh token digest.
    """
    id: UUID
    username: str
    email: str
    full_name: str
    role: UserRole
    is_verified: bool = False

    model_config = ConfigDict(from_attributes=True, frozen=True)
