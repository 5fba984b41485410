from typing import Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator
from app.db.models.case_type import CaseCategory
from app.schemas.common import reject_null


class CaseTypeBase(BaseModel):
    name: str = Field(..., min_length=2)
    code: str = Field(..., min_length=1, max_length=20)
    description: Optional[str] = None
    category: CaseCategory

    @field_validator("code")
    @classmethod
    def uppercase_code(cls, v: str) -> str:
        return v.strip().upper()


class CaseTypeCreate(CaseTypeBase):
    pass


class CaseTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    description: Optional[str] = None
    category: Optional[CaseCategory] = None
    is_active: Optional[bool] = None

    @field_validator("name", "category", "is_active")
    @classmethod
    def required_columns_not_null(cls, v):
        return reject_null(v)


class CaseType(CaseTypeBase):
    id: UUID
    slug: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CaseTypeSummary(BaseModel):
    id: UUID
    name: str
    code: str
    category: CaseCategory

    model_config = ConfigDict(from_attributes=True)
