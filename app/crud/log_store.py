# crud/log_store.py
from typing import List
from uuid import UUID
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import and_

from app.models.mood_log import MoodLog
from app.models.activity_log import ActivityLog
from app.schemas.logs import MoodLogEntry, ActivityLogEntry


class CRUDLogStore:
    """
    Read-only access to mood and activity logs.

    Logs are written by the logging service; the report engine only reads
    them, converted to immutable entries ordered by time.
    """

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get_mood_logs(
        self, db: Session, *, user_id: UUID, start: datetime, end: datetime
    ) -> List[MoodLogEntry]:
        """
        Get mood logs for a user within [start, end], oldest first.

        Args:
            db: Database session
            user_id: User UUID
            start: Window start (inclusive)
            end: Window end (inclusive)

        Returns:
            List of MoodLogEntry
        """
        rows = (
            db.query(MoodLog)
            .filter(
                and_(
                    MoodLog.user_id == user_id,
                    MoodLog.timestamp >= start,
                    MoodLog.timestamp <= end,
                )
            )
            .order_by(MoodLog.timestamp.asc(), MoodLog.created_at.asc(), MoodLog.id.asc())
            .all()
        )
        return [MoodLogEntry.model_validate(row) for row in rows]

    def get_activity_logs(
        self, db: Session, *, user_id: UUID, start: datetime, end: datetime
    ) -> List[ActivityLogEntry]:
        """
        Get activity logs for a user within [start, end], oldest first.

        Args:
            db: Database session
            user_id: User UUID
            start: Window start (inclusive)
            end: Window end (inclusive)

        Returns:
            List of ActivityLogEntry
        """
        rows = (
            db.query(ActivityLog)
            .filter(
                and_(
                    ActivityLog.user_id == user_id,
                    ActivityLog.timestamp >= start,
                    ActivityLog.timestamp <= end,
                )
            )
            .order_by(ActivityLog.timestamp.asc(), ActivityLog.created_at.asc(), ActivityLog.id.asc())
            .all()
        )
        return [ActivityLogEntry.model_validate(row) for row in rows]


# Create singleton instance
crud_log_store = CRUDLogStore()
