from sqlalchemy import Column, Text, Boolean, DateTime, Enum as SQLEnum, Uuid
from sqlalchemy.sql import func, true
from sqlalchemy.orm import relationship
from enum import Enum
import uuid
from app.core.database import Base

class CaseCategory(str, Enum):
    civil = "civil"
    criminal = "criminal"
    family = "family"
    constitutional = "constitutional"

class CaseType(Base):
    __tablename__ = "case_types"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False, unique=True)
    slug = Column(Text, nullable=False, unique=True, index=True)
    code = Column(Text, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    category = Column(SQLEnum(CaseCategory, name="case_category"), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp())

    # Relationships
    cases = relationship("Case", back_populates="case_type")
