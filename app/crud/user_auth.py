# crud/user_auth.py
from typing import Optional
from uuid import UUID
from sqlalchemy.orm import Session

from app.models.user_auth import UserAuth, Plan, Status


class CRUDUserAuth:
    """
    Account lookups for report requests.

    Accounts are managed by the auth service; only plan and status are
    relevant here.
    """

    def get(self, db: Session, id: UUID) -> Optional[UserAuth]:
        """
        Get user by ID.

        Args:
            db: Database session
            id: User UUID

        Returns:
            UserAuth instance or None
        """
        return db.query(UserAuth).filter(UserAuth.id == id).first()

    def create(
        self,
        db: Session,
        *,
        email: str,
        username: Optional[str] = None,
        plan: Plan = Plan.free,
        status: Status = Status.active,
    ) -> UserAuth:
        db_obj = UserAuth(email=email, username=username, plan=plan, status=status)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def update_plan(self, db: Session, *, db_obj: UserAuth, plan: Plan) -> UserAuth:
        """Switch a user to another subscription plan."""
        db_obj.plan = plan
        db.commit()
        db.refresh(db_obj)
        return db_obj


# Create singleton instance
crud_user_auth = CRUDUserAuth()
