from typing import Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from app.db.models.court import CourtType
from app.schemas.common import reject_null


class CourtBase(BaseModel):
    name: str = Field(..., min_length=2)
    code: str = Field(..., min_length=1, max_length=20)
    type: CourtType
    state: str
    city: str
    address: str
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None

    @field_validator("code")
    @classmethod
    def uppercase_code(cls, v: str) -> str:
        return v.strip().upper()


class CourtCreate(CourtBase):
    pass


class CourtUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    type: Optional[CourtType] = None
    state: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("name", "type", "state", "city", "address", "is_active")
    @classmethod
    def required_columns_not_null(cls, v):
        return reject_null(v)


class Court(CourtBase):
    id: UUID
    slug: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CourtSummary(BaseModel):
    id: UUID
    name: str
    code: str
    type: CourtType

    model_config = ConfigDict(from_attributes=True)
