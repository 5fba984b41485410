from sqlalchemy import Column, Text, Integer, Boolean, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.sql import func, true
from sqlalchemy.orm import relationship
import uuid
from app.core.database import Base

class Advocate(Base):
    __tablename__ = "advocates"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, unique=True)
    bar_council_id = Column(Text, nullable=False, unique=True)
    license_number = Column(Text, nullable=False, unique=True)
    specialization = Column(JSON, nullable=False, default=list)
    experience = Column(Integer, nullable=False, default=0)
    firm_name = Column(Text, nullable=True)
    firm_address = Column(Text, nullable=True)
    enrollment_date = Column(DateTime(timezone=True), nullable=False)
    # Advocates are deactivated, never deleted
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp())

    # Relationships
    user = relationship("User", lazy="selectin")
    parties = relationship("CaseParty", back_populates="advocate")
