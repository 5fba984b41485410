from typing import Optional, List
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from app.db.models.case import CaseStatus, CaseStage, CasePriority
from app.schemas.court import CourtSummary
from app.schemas.common import reject_null
from app.schemas.case_type import CaseTypeSummary
from app.schemas.user import UserSummary


class CaseBase(BaseModel):
    title: str = Field(..., min_length=3)
    description: Optional[str] = None
    priority: CasePriority = CasePriority.normal
    is_public: bool = True
    is_sensitive: bool = False


class CaseCreate(CaseBase):
    case_number: str = Field(..., min_length=1, max_length=50)
    case_type_id: UUID
    court_id: UUID
    filed_by_id: Optional[UUID] = None  # defaults to the requesting user
    filing_date: datetime

    @field_validator("case_number")
    @classmethod
    def uppercase_case_number(cls, v: str) -> str:
        return v.strip().upper()


class CaseUpdate(BaseModel):
    """
    Editable case metadata. Status, stage and lifecycle dates are changed
    only through the status endpoint.
    """
    title: Optional[str] = Field(None, min_length=3)
    description: Optional[str] = None
    priority: Optional[CasePriority] = None
    case_type_id: Optional[UUID] = None
    court_id: Optional[UUID] = None
    is_public: Optional[bool] = None
    is_sensitive: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("title", "priority", "case_type_id", "court_id", "is_public", "is_sensitive")
    @classmethod
    def required_columns_not_null(cls, v):
        return reject_null(v)


class CaseStatusUpdate(BaseModel):
    status: Optional[CaseStatus] = None
    stage: Optional[CaseStage] = None

    @model_validator(mode="after")
    def something_to_change(self):
        if self.status is None and self.stage is None:
            raise ValueError("Provide a status, a stage or both")
        return self


class Case(CaseBase):
    id: UUID
    case_number: str
    slug: str
    case_type_id: UUID
    court_id: UUID
    filed_by_id: UUID
    status: CaseStatus
    stage: CaseStage
    filing_date: datetime
    admission_date: Optional[datetime] = None
    judgment_date: Optional[datetime] = None
    next_hearing_date: Optional[datetime] = None
    hearing_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CaseResponse(Case):
    court: Optional[CourtSummary] = None
    case_type: Optional[CaseTypeSummary] = None
    filer: Optional[UserSummary] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class CaseList(BaseModel):
    cases: List[CaseResponse]
    pagination: Pagination


class CaseSummary(BaseModel):
    id: UUID
    case_number: str
    title: str
    status: CaseStatus
    next_hearing_date: Optional[datetime] = None
    court: Optional[CourtSummary] = None
    case_type: Optional[CaseTypeSummary] = None

    model_config = ConfigDict(from_attributes=True)
