# schemas/logs.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime
import enum


# =====================================================================
# ENUMS
# =====================================================================

class MoodType(str, enum.Enum):
    happy = "happy"
    calm = "calm"
    focused = "focused"
    anxious = "anxious"
    stressed = "stressed"
    sad = "sad"
    tired = "tired"
    energetic = "energetic"
    irritated = "irritated"
    hopeful = "hopeful"


class ActivityCategory(str, enum.Enum):
    exercise = "exercise"
    work = "work"
    sleep = "sleep"
    social = "social"
    relaxation = "relaxation"
    nutrition = "nutrition"
    meditation = "meditation"
    hobby = "hobby"
    healthcare = "healthcare"
    other = "other"


# =====================================================================
# LOG ENTRIES (read-only view handed to the report engine)
# =====================================================================

class MoodLogEntry(BaseModel):
    """Immutable mood check-in as seen by the report engine."""
    model_config = ConfigDict(from_attributes=True, frozen=True, use_enum_values=True)

    timestamp: datetime
    mood: MoodType
    mood_score: int = Field(..., ge=1, le=10)
    stress_level: Optional[int] = Field(None, ge=1, le=10)
    sleep_hours: Optional[float] = Field(None, ge=0)


class ActivityLogEntry(BaseModel):
    """Immutable activity record as seen by the report engine."""
    model_config = ConfigDict(from_attributes=True, frozen=True, use_enum_values=True)

    timestamp: datetime
    category: ActivityCategory
    duration_minutes: Optional[int] = Field(None, ge=0)
    title: Optional[str] = None
    description: Optional[str] = None
