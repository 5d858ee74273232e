# app/models/__init__.py

from app.core.config import Base

# Import all models here so metadata.create_all and app-wide imports work
from .user_auth import UserAuth, Plan, Status
from .mood_log import MoodLog
from .activity_log import ActivityLog
from .wellbeing_report import WellbeingReport
from .usage_counter import UsageCounter

__all__ = [
    "Base",
    "UserAuth",
    "Plan",
    "Status",
    "MoodLog",
    "ActivityLog",
    "WellbeingReport",
    "UsageCounter",
]
