from sqlalchemy import Column, Text, Boolean, DateTime, Enum as SQLEnum, ForeignKey, Uuid
from sqlalchemy.sql import func, true
from sqlalchemy.orm import relationship
from enum import Enum
import uuid
from app.core.database import Base

class PartyType(str, Enum):
    petitioner = "petitioner"
    respondent = "respondent"
    appellant = "appellant"
    defendant = "defendant"
    plaintiff = "plaintiff"
    witness = "witness"

class CaseParty(Base):
    __tablename__ = "case_parties"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    case_id = Column(Uuid(as_uuid=True), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    party_type = Column(SQLEnum(PartyType, name="party_type"), nullable=False)
    name = Column(Text, nullable=False)
    email = Column(Text, nullable=True)
    phone = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    advocate_id = Column(Uuid(as_uuid=True), ForeignKey("advocates.id"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp())

    # Relationships
    case = relationship("Case", back_populates="parties")
    user = relationship("User", lazy="selectin")
    advocate = relationship("Advocate", back_populates="parties", lazy="selectin")
