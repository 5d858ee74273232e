# models/wellbeing_report.py

import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, Text, JSON, ForeignKey, CheckConstraint, Index
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.core.config import Base


class WellbeingReport(Base):
    """Write-once wellbeing report. A new request always creates a new row."""

    __tablename__ = "wellbeing_report"
    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="ck_wellbeing_report_window"),
        CheckConstraint("overall_score BETWEEN 0 AND 100", name="ck_wellbeing_report_score"),
        Index("ix_wellbeing_report_user_created", "user_id", "created_at"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, unique=True, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("user_auth.id", ondelete="CASCADE"), nullable=False)

    # ---- Window ----
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)

    # ---- Score ----
    overall_score = Column(Integer, nullable=False)
    wellbeing_level = Column(String(20), nullable=False)
    trend = Column(String(20), nullable=False)

    # ---- Narrative & recommendations ----
    summary = Column(Text, nullable=False)
    recommendations = Column(JSON, nullable=False)  # [{"title", "description", "priority", "category", "actionable"}]
    strengths = Column(JSON, nullable=False, default=list)
    areas_for_improvement = Column(JSON, nullable=False, default=list)

    # ---- Analysis sections (null when the window has no relevant logs) ----
    mood_analysis = Column(JSON, nullable=True)
    activity_analysis = Column(JSON, nullable=True)
    sleep_analysis = Column(JSON, nullable=True)
    stress_analysis = Column(JSON, nullable=True)
    data_points = Column(JSON, nullable=False)

    # ---- Professional help ----
    seek_help_recommended = Column(Boolean, default=False, nullable=False)
    help_recommendation = Column(JSON, nullable=True)  # {"reason", "urgency", "suggested_specialties"}

    # ---- Provenance ----
    generated_by = Column(String(20), nullable=False)  # ai | fallback | client
    ai_model = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    user = relationship("UserAuth", back_populates="wellbeing_reports")
