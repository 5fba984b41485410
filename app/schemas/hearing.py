from typing import Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator
from app.db.models.hearing import HearingStatus, HearingPurpose
from app.schemas.common import reject_null
from app.schemas.user import UserSummary

HEARING_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class HearingBase(BaseModel):
    hearing_number: str = Field(..., min_length=1)
    hearing_date: datetime
    hearing_time: str = Field(..., pattern=HEARING_TIME_PATTERN)
    judge_id: UUID
    court_room: Optional[str] = None
    purpose: HearingPurpose


class HearingCreate(HearingBase):
    case_id: UUID


class HearingUpdate(BaseModel):
    """Scheduling details only; status goes through the status endpoint."""
    hearing_number: Optional[str] = Field(None, min_length=1)
    hearing_date: Optional[datetime] = None
    hearing_time: Optional[str] = Field(None, pattern=HEARING_TIME_PATTERN)
    judge_id: Optional[UUID] = None
    court_room: Optional[str] = None
    purpose: Optional[HearingPurpose] = None
    notes: Optional[str] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("hearing_number", "hearing_date", "hearing_time", "judge_id", "purpose")
    @classmethod
    def required_columns_not_null(cls, v):
        return reject_null(v)


class HearingStatusUpdate(BaseModel):
    status: HearingStatus
    notes: Optional[str] = None
    next_hearing_date: Optional[datetime] = None
    adjournment_reason: Optional[str] = None


class Hearing(HearingBase):
    id: UUID
    case_id: UUID
    status: HearingStatus
    notes: Optional[str] = None
    next_hearing_date: Optional[datetime] = None
    adjournment_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class HearingResponse(Hearing):
    judge: Optional[UserSummary] = None
