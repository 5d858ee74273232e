# models/usage_counter.py

import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, Date, DateTime, ForeignKey, UniqueConstraint
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.core.config import Base


class UsageCounter(Base):
    """Report generations consumed by a user in one billing period."""

    __tablename__ = "usage_counter"
    __table_args__ = (
        UniqueConstraint("user_id", "period_start", name="uq_usage_counter_user_period"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("user_auth.id", ondelete="CASCADE"), nullable=False)
    period_start = Column(Date, nullable=False)  # first day of the billing month
    report_count = Column(Integer, default=0, nullable=False)

    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    user = relationship("UserAuth", back_populates="usage_counters")
