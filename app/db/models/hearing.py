from sqlalchemy import Column, Text, Integer, DateTime, Enum as SQLEnum, ForeignKey, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from enum import Enum
import uuid
from app.core.database import Base

class HearingStatus(str, Enum):
    scheduled = "scheduled"
    ongoing = "ongoing"
    completed = "completed"
    adjourned = "adjourned"
    cancelled = "cancelled"

class HearingPurpose(str, Enum):
    preliminary = "preliminary"
    evidence = "evidence"
    argument = "argument"
    judgment = "judgment"
    mention = "mention"

class Hearing(Base):
    __tablename__ = "hearings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    case_id = Column(Uuid(as_uuid=True), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True)
    hearing_number = Column(Text, nullable=False)
    hearing_date = Column(DateTime(timezone=True), nullable=False, index=True)
    hearing_time = Column(Text, nullable=False)
    judge_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    court_room = Column(Text, nullable=True)
    purpose = Column(SQLEnum(HearingPurpose, name="hearing_purpose"), nullable=False)
    status = Column(SQLEnum(HearingStatus, name="hearing_status"), nullable=False, default=HearingStatus.scheduled, index=True)
    notes = Column(Text, nullable=True)
    next_hearing_date = Column(DateTime(timezone=True), nullable=True)
    adjournment_reason = Column(Text, nullable=True)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp())

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    case = relationship("Case", back_populates="hearings")
    judge = relationship("User", back_populates="judged_hearings", lazy="selectin")
