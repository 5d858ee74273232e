# models/mood_log.py

import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Integer, Float, DateTime, Text, ForeignKey, CheckConstraint, Index
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.core.config import Base


class MoodLog(Base):
    """
    A single mood check-in. Written by the logging service, only read by the
    report engine.
    """

    __tablename__ = "mood_log"
    __table_args__ = (
        CheckConstraint("mood_score BETWEEN 1 AND 10", name="ck_mood_log_score"),
        CheckConstraint("stress_level IS NULL OR stress_level BETWEEN 1 AND 10", name="ck_mood_log_stress"),
        CheckConstraint("sleep_hours IS NULL OR sleep_hours >= 0", name="ck_mood_log_sleep"),
        Index("ix_mood_log_user_timestamp", "user_id", "timestamp"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("user_auth.id", ondelete="CASCADE"), nullable=False)
    timestamp = Column(DateTime, nullable=False)

    mood = Column(String(20), nullable=False)  # happy, calm, focused, anxious, ...
    mood_score = Column(Integer, nullable=False)
    stress_level = Column(Integer, nullable=True)
    sleep_hours = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    user = relationship("UserAuth", back_populates="mood_logs")
