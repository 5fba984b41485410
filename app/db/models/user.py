from sqlalchemy import Column, String, Boolean, Enum as SQLEnum, Text, DateTime, Uuid
from sqlalchemy.sql import func, false
from sqlalchemy.orm import relationship
import uuid
from app.core.database import Base
from enum import Enum

class UserRole(str, Enum):
    admin = "admin"
    judge = "judge"
    lawyer = "lawyer"
    litigant = "litigant"
    clerk = "clerk"
    public = "public"

class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(30), unique=True, nullable=False, index=True)
    email = Column(Text, unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    full_name = Column(Text, nullable=False)
    phone = Column(Text, nullable=True)
    role = Column(SQLEnum(UserRole, name="user_role"), nullable=False, default=UserRole.public, server_default=UserRole.public.value)
    bar_council_id = Column(Text, unique=True, nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False, server_default=false())
    # SHA-256 digest of the only refresh token currently trusted for this user
    refresh_token_hash = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.current_timestamp())
    updated_at = Column(DateTime(timezone=True), server_default=func.current_timestamp(), onupdate=func.current_timestamp())

    # Relationships
    filed_cases = relationship("Case", back_populates="filer")
    judged_hearings = relationship("Hearing", back_populates="judge")
