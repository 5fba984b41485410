from typing import Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from app.db.models.case_party import PartyType
from app.schemas.advocate import AdvocateSummary
from app.schemas.common import reject_null
from app.schemas.user import UserSummary


class CasePartyBase(BaseModel):
    party_type: PartyType
    name: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    user_id: Optional[UUID] = None  # set when the party has an account
    advocate_id: Optional[UUID] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


class CasePartyCreate(CasePartyBase):
    case_id: UUID


class CasePartyUpdate(BaseModel):
    party_type: Optional[PartyType] = None
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    user_id: Optional[UUID] = None
    advocate_id: Optional[UUID] = None
    is_active: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("party_type", "name", "is_active")
    @classmethod
    def required_columns_not_null(cls, v):
        return reject_null(v)


class CaseParty(CasePartyBase):
    id: UUID
    case_id: UUID
    is_active: bool
    user: Optional[UserSummary] = None
    advocate: Optional[AdvocateSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
