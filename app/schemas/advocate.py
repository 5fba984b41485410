from typing import List, Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator
from app.schemas.case import Pagination
from app.schemas.common import reject_null
from app.schemas.user import UserSummary


def _normalise_specialization(values: List[str]) -> List[str]:
    # Lowercased, blank entries dropped, first occurrence wins
    seen = []
    for value in values:
        value = value.strip().lower()
        if value and value not in seen:
            seen.append(value)
    return seen


class AdvocateBase(BaseModel):
    bar_council_id: str = Field(..., min_length=1)
    license_number: str = Field(..., min_length=1)
    specialization: List[str] = Field(default_factory=list)
    experience: int = Field(..., ge=0)
    firm_name: Optional[str] = None
    firm_address: Optional[str] = None
    enrollment_date: datetime

    @field_validator("bar_council_id", "license_number")
    @classmethod
    def uppercase_identifiers(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("specialization")
    @classmethod
    def normalise_specialization(cls, v: List[str]) -> List[str]:
        return _normalise_specialization(v)


class AdvocateCreate(AdvocateBase):
    user_id: UUID


class AdvocateUpdate(BaseModel):
    bar_council_id: Optional[str] = Field(None, min_length=1)
    license_number: Optional[str] = Field(None, min_length=1)
    specialization: Optional[List[str]] = None
    experience: Optional[int] = Field(None, ge=0)
    firm_name: Optional[str] = None
    firm_address: Optional[str] = None
    enrollment_date: Optional[datetime] = None
    is_active: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("bar_council_id", "license_number", "specialization", "experience", "enrollment_date", "is_active")
    @classmethod
    def required_columns_not_null(cls, v):
        return reject_null(v)

    @field_validator("bar_council_id", "license_number")
    @classmethod
    def uppercase_identifiers(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("specialization")
    @classmethod
    def normalise_specialization(cls, v: List[str]) -> List[str]:
        return _normalise_specialization(v)


class Advocate(AdvocateBase):
    id: UUID
    user_id: UUID
    is_active: bool
    user: Optional[UserSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AdvocateSummary(BaseModel):
    id: UUID
    bar_council_id: str
    is_active: bool
    user: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class AdvocateList(BaseModel):
    advocates: List[Advocate]
    pagination: Pagination
