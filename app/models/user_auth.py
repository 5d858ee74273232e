# models/user_auth.py

import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, DateTime, Enum as SqlEnum
)
import enum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.core.config import Base


class Plan(str, enum.Enum):
    free = "free"
    starter = "starter"
    pro = "pro"
    premium = "premium"
    team = "team"

class Status(enum.Enum):
    active = "active"
    suspended = "suspended"
    deactivated = "deactivated"

class UserAuth(Base):
    __tablename__ = "user_auth"

    # ---- Base fields ----
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, unique=True, index=True)
    username = Column(String(50), nullable=True)
    email = Column(String(255), unique=True, nullable=False, index=True)

    # ---- Account status & subscription ----
    status = Column(SqlEnum(Status), default=Status.active)
    plan = Column(SqlEnum(Plan), default=Plan.free, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # ---- Relationships ----
    mood_logs = relationship("MoodLog", back_populates="user", cascade="all, delete-orphan")
    activity_logs = relationship("ActivityLog", back_populates="user", cascade="all, delete-orphan")
    wellbeing_reports = relationship("WellbeingReport", back_populates="user", cascade="all, delete-orphan")
    usage_counters = relationship("UsageCounter", back_populates="user", cascade="all, delete-orphan")
