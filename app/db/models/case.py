from sqlalchemy import Column, Text, Integer, Boolean, DateTime, Enum as SQLEnum, ForeignKey, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from enum import Enum
import uuid
from app.core.database import Base

class CaseStatus(str, Enum):
    filed = "filed"
    admitted = "admitted"
    hearing = "hearing"
    judgment = "judgment"
    closed = "closed"
    archived = "archived"

class CaseStage(str, Enum):
    preliminary = "preliminary"
    trial = "trial"
    final = "final"

class CasePriority(str, Enum):
    normal = "normal"
    urgent = "urgent"
    high = "high"

class Case(Base):
    __tablename__ = "cases"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    case_number = Column(Text, nullable=False, unique=True, index=True)
    slug = Column(Text, nullable=False, unique=True, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    case_type_id = Column(Uuid(as_uuid=True), ForeignKey("case_types.id"), nullable=False, index=True)
    court_id = Column(Uuid(as_uuid=True), ForeignKey("courts.id"), nullable=False, index=True)
    filed_by_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    status = Column(SQLEnum(CaseStatus, name="case_status"), nullable=False, default=CaseStatus.filed, index=True)
    stage = Column(SQLEnum(CaseStage, name="case_stage"), nullable=False, default=CaseStage.preliminary)
    priority = Column(SQLEnum(CasePriority, name="case_priority"), nullable=False, default=CasePriority.normal)
    filing_date = Column(DateTime(timezone=True), nullable=False)
    admission_date = Column(DateTime(timezone=True), nullable=True)
    judgment_date = Column(DateTime(timezone=True), nullable=True)
    next_hearing_date = Column(DateTime(timezone=True), nullable=True, index=True)
    hearing_count = Column(Integer, nullable=False, default=0)
    is_public = Column(Boolean, nullable=False, default=True, index=True)
    is_sensitive = Column(Boolean, nullable=False, default=False)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp())

    # Every UPDATE is conditional on the version that was read
    __mapper_args__ = {"version_id_col": version}

    # Relationships
    court = relationship("Court", back_populates="cases", lazy="selectin")
    case_type = relationship("CaseType", back_populates="cases", lazy="selectin")
    filer = relationship("User", back_populates="filed_cases", lazy="selectin")
    hearings = relationship("Hearing", back_populates="case", passive_deletes=True)
    parties = relationship("CaseParty", back_populates="case", passive_deletes=True)
