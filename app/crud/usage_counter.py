# crud/usage_counter.py
from typing import Optional
from uuid import UUID
from datetime import date, datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import and_

from app.models.usage_counter import UsageCounter


class CRUDUsageCounter:
    """CRUD operations for UsageCounter model."""

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get(self, db: Session, *, user_id: UUID, period_start: date) -> Optional[UsageCounter]:
        """
        Get the counter for a user and billing period.

        Args:
            db: Database session
            user_id: User UUID
            period_start: First day of the billing period

        Returns:
            UsageCounter instance or None
        """
        return (
            db.query(UsageCounter)
            .filter(and_(UsageCounter.user_id == user_id, UsageCounter.period_start == period_start))
            .first()
        )

    def used(self, db: Session, *, user_id: UUID, period_start: date) -> int:
        """Reports generated in the period, 0 when no counter exists yet."""
        counter = self.get(db, user_id=user_id, period_start=period_start)
        return counter.report_count if counter else 0

    # =====================================================================
    # CREATE OPERATIONS
    # =====================================================================

    def ensure(self, db: Session, *, user_id: UUID, period_start: date) -> None:
        """
        Create the counter row for a period if it does not exist yet.

        A concurrent request may insert the same row first; the unique
        constraint rejects ours and the existing row is used instead.

        Args:
            db: Database session
            user_id: User UUID
            period_start: First day of the billing period
        """
        if self.get(db, user_id=user_id, period_start=period_start):
            return

        db.add(UsageCounter(user_id=user_id, period_start=period_start, report_count=0))
        try:
            db.commit()
        except IntegrityError:
            db.rollback()

    # =====================================================================
    # UPDATE OPERATIONS
    # =====================================================================

    def increment_with_ceiling(
        self, db: Session, *, user_id: UUID, period_start: date, limit: Optional[int]
    ) -> bool:
        """
        Atomically add one report to the counter unless it already reached
        the limit. A limit of None means no ceiling.

        Check and increment are a single conditional UPDATE, so two
        concurrent requests can never both take the last unit.

        Args:
            db: Database session
            user_id: User UUID
            period_start: First day of the billing period
            limit: Maximum reports allowed in the period, or None

        Returns:
            True if a unit was consumed, False if the limit was reached
        """
        query = db.query(UsageCounter).filter(
            and_(UsageCounter.user_id == user_id, UsageCounter.period_start == period_start)
        )
        if limit is not None:
            query = query.filter(UsageCounter.report_count < limit)

        updated = query.update(
            {
                UsageCounter.report_count: UsageCounter.report_count + 1,
                UsageCounter.updated_at: datetime.now(timezone.utc),
            },
            synchronize_session=False,
        )
        db.commit()
        return updated == 1


# Create singleton instance
crud_usage_counter = CRUDUsageCounter()
