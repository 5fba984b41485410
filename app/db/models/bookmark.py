from sqlalchemy import Column, Text, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from app.core.database import Base

class CaseBookmark(Base):
    __tablename__ = "case_bookmarks"
    __table_args__ = (UniqueConstraint("user_id", "case_id", name="uq_case_bookmarks_user_case"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    case_id = Column(Uuid(as_uuid=True), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp())

    # Relationships
    case = relationship("Case", lazy="selectin")
