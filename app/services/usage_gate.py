# services/usage_gate.py
import logging
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import QuotaExceededError
from app.crud.usage_counter import crud_usage_counter
from app.models.user_auth import UserAuth
from app.schemas.wellbeing_report import UsageStatusOut

logger = logging.getLogger(__name__)

UNLIMITED = "unlimited"


def billing_period(now: Optional[datetime] = None) -> date:
    """First day of the calendar month (UTC) that `now` falls in."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.date().replace(day=1)


def plan_name(plan) -> str:
    return getattr(plan, "value", plan)


class UsageGate:
    """Per-plan monthly quota on report generation."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.crud = crud_usage_counter

    def limit_for(self, plan) -> Optional[int]:
        """
        Reports allowed per period for a plan, None when unlimited.
        Unknown plans get the free plan's limit.
        """
        limits = self.settings.PLAN_REPORT_LIMITS
        limit = limits.get(plan_name(plan), limits.get("free", 0))
        return None if limit == UNLIMITED else int(limit)

    # =====================================================================
    # CONSUME
    # =====================================================================

    def try_consume(self, db: Session, user: UserAuth, now: Optional[datetime] = None) -> bool:
        """Take one report from the user's quota. False when the quota is used up."""
        period = billing_period(now)
        limit = self.limit_for(user.plan)

        self.crud.ensure(db, user_id=user.id, period_start=period)
        return self.crud.increment_with_ceiling(
            db, user_id=user.id, period_start=period, limit=limit
        )

    def consume_or_raise(self, db: Session, user: UserAuth, now: Optional[datetime] = None) -> None:
        """
        Take one report from the user's quota.

        Raises:
            QuotaExceededError: If the plan limit for this period is reached
        """
        if self.try_consume(db, user, now):
            return

        limit = self.limit_for(user.plan)
        used = self.crud.used(db, user_id=user.id, period_start=billing_period(now))
        logger.info(f"Report quota exceeded for user {user.id} ({plan_name(user.plan)}: {used}/{limit})")
        raise QuotaExceededError(plan=plan_name(user.plan), limit=limit, used=used)

    # =====================================================================
    # READ
    # =====================================================================

    def usage(self, db: Session, user: UserAuth, now: Optional[datetime] = None) -> UsageStatusOut:
        period = billing_period(now)
        limit = self.limit_for(user.plan)
        used = self.crud.used(db, user_id=user.id, period_start=period)
        return UsageStatusOut(
            plan=plan_name(user.plan),
            period_start=period,
            used=used,
            limit=limit,
            remaining=None if limit is None else max(limit - used, 0),
        )


usage_gate = UsageGate()
