# crud/wellbeing_report.py
from typing import Optional, List
from uuid import UUID
from sqlalchemy.orm import Session
from sqlalchemy import and_

from app.models.wellbeing_report import WellbeingReport
from app.schemas.wellbeing_report import WellbeingReportCreate


class CRUDWellbeingReport:
    """
    CRUD operations for WellbeingReport model.

    Reports are write-once; there is no update operation.
    """

    # =====================================================================
    # CREATE OPERATIONS
    # =====================================================================

    def create(self, db: Session, *, obj_in: WellbeingReportCreate) -> WellbeingReport:
        """
        Persist an assembled wellbeing report.

        Args:
            db: Database session
            obj_in: WellbeingReportCreate schema with the full report

        Returns:
            Created WellbeingReport instance
        """
        # Nested sections go into JSON columns, so serialize them to plain JSON
        obj_data = obj_in.model_dump(mode="json")
        obj_data["user_id"] = obj_in.user_id
        obj_data["start_date"] = obj_in.start_date
        obj_data["end_date"] = obj_in.end_date
        obj_data["created_at"] = obj_in.created_at

        db_obj = WellbeingReport(**obj_data)

        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get_for_user(self, db: Session, *, id: UUID, user_id: UUID) -> Optional[WellbeingReport]:
        """
        Get a report by ID, scoped to its owner.

        Args:
            db: Database session
            id: Report UUID
            user_id: Owner UUID

        Returns:
            WellbeingReport instance or None
        """
        return (
            db.query(WellbeingReport)
            .filter(and_(WellbeingReport.id == id, WellbeingReport.user_id == user_id))
            .first()
        )

    def get_latest_for_user(self, db: Session, *, user_id: UUID) -> Optional[WellbeingReport]:
        """Most recently created report for a user, or None."""
        return (
            db.query(WellbeingReport)
            .filter(WellbeingReport.user_id == user_id)
            .order_by(WellbeingReport.created_at.desc(), WellbeingReport.id.desc())
            .first()
        )

    def get_multi_for_user(
        self, db: Session, *, user_id: UUID, skip: int = 0, limit: int = 10
    ) -> List[WellbeingReport]:
        """
        Get a user's reports, newest first, with pagination.

        Args:
            db: Database session
            user_id: User UUID
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            List of WellbeingReport instances
        """
        return (
            db.query(WellbeingReport)
            .filter(WellbeingReport.user_id == user_id)
            .order_by(WellbeingReport.created_at.desc(), WellbeingReport.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    # =====================================================================
    # UTILITY OPERATIONS
    # =====================================================================

    def count_for_user(self, db: Session, *, user_id: UUID) -> int:
        return db.query(WellbeingReport).filter(WellbeingReport.user_id == user_id).count()


# Create singleton instance
crud_wellbeing_report = CRUDWellbeingReport()
