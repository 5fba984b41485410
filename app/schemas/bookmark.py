from typing import Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict
from app.schemas.case import CaseSummary


class BookmarkCreate(BaseModel):
    case_id: UUID
    notes: Optional[str] = None


class BookmarkUpdate(BaseModel):
    notes: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class Bookmark(BaseModel):
    id: UUID
    user_id: UUID
    case_id: UUID
    notes: Optional[str] = None
    case: Optional[CaseSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BookmarkCheck(BaseModel):
    is_bookmarked: bool
    bookmark_id: Optional[UUID] = None
