from sqlalchemy import Column, Text, Boolean, DateTime, Enum as SQLEnum, Uuid
from sqlalchemy.sql import func, true
from sqlalchemy.orm import relationship
from enum import Enum
import uuid
from app.core.database import Base

class CourtType(str, Enum):
    supreme = "supreme"
    high = "high"
    district = "district"
    magistrate = "magistrate"

class Court(Base):
    __tablename__ = "courts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False, unique=True)
    slug = Column(Text, nullable=False, unique=True, index=True)
    code = Column(Text, nullable=False, unique=True)
    type = Column(SQLEnum(CourtType, name="court_type"), nullable=False)
    state = Column(Text, nullable=False)
    city = Column(Text, nullable=False)
    address = Column(Text, nullable=False)
    contact_email = Column(Text, nullable=True)
    contact_phone = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp())

    # Relationships
    cases = relationship("Case", back_populates="court")
