# schemas/wellbeing_report.py
from pydantic import BaseModel, Field, ConfigDict, model_validator
from typing import Optional, Dict, List, Any
from datetime import date, datetime
from uuid import UUID
import enum


# =====================================================================
# ENUMS
# =====================================================================

class WellbeingLevel(str, enum.Enum):
    """Ordered from best to worst; no_data sits outside the scale."""
    excellent = "excellent"
    good = "good"
    moderate = "moderate"
    low = "low"
    critical = "critical"
    no_data = "no_data"


class Trend(str, enum.Enum):
    improving = "improving"
    stable = "stable"
    declining = "declining"


class StressTrend(str, enum.Enum):
    increasing = "increasing"
    stable = "stable"
    decreasing = "decreasing"


class Priority(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


class GeneratedBy(str, enum.Enum):
    ai = "ai"
    fallback = "fallback"
    client = "client"


class HelpUrgency(str, enum.Enum):
    low = "low"
    moderate = "moderate"
    high = "high"


# =====================================================================
# A. REPORT SECTIONS
# =====================================================================

class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    title: str
    description: str
    priority: Priority
    category: str = "general"
    actionable: bool = True


class MoodAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    total_logs: int
    average_score: float
    highest_score: int
    lowest_score: int
    trend: Trend
    dominant_mood: Optional[str] = None
    mood_counts: Dict[str, int] = Field(default_factory=dict)


class ActivityAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_activities: int
    total_minutes: int
    average_duration: float
    top_categories: List[str] = Field(default_factory=list)
    category_counts: Dict[str, int] = Field(default_factory=dict)
    most_active_day: Optional[date] = None


class SleepAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    average_hours: float
    shortest_hours: float
    longest_hours: float
    quality: str
    consistency: str


class StressAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    average_level: float
    highest_level: int
    high_stress_entries: int
    trend: StressTrend


class HelpRecommendation(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    reason: str
    urgency: HelpUrgency
    suggested_specialties: List[str] = Field(default_factory=list)


# =====================================================================
# B. CREATE SCHEMA (assembled by the report engine, never updated)
# =====================================================================

class WellbeingReportCreate(BaseModel):
    """Immutable, fully assembled report handed to the report store."""
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    user_id: UUID
    start_date: datetime
    end_date: datetime
    overall_score: int = Field(..., ge=0, le=100)
    wellbeing_level: WellbeingLevel
    trend: Trend
    summary: str = Field(..., min_length=1)
    recommendations: List[Recommendation] = Field(..., min_length=1)
    strengths: List[str] = Field(default_factory=list)
    areas_for_improvement: List[str] = Field(default_factory=list)
    mood_analysis: Optional[MoodAnalysis] = None
    activity_analysis: Optional[ActivityAnalysis] = None
    sleep_analysis: Optional[SleepAnalysis] = None
    stress_analysis: Optional[StressAnalysis] = None
    data_points: Dict[str, Any] = Field(default_factory=dict)
    seek_help_recommended: bool = False
    help_recommendation: Optional[HelpRecommendation] = None
    generated_by: GeneratedBy
    ai_model: Optional[str] = None
    created_at: datetime

    @model_validator(mode="after")
    def check_window(self) -> "WellbeingReportCreate":
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


# =====================================================================
# C. REQUEST SCHEMAS
# =====================================================================

class GenerateReportRequest(BaseModel):
    """
    Either a trailing window in days, or an explicit start/end pair.
    When neither is given the default window is used.
    """
    window_days: Optional[int] = Field(None, gt=0, description="Trailing window ending now")
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    client_summary: Optional[str] = Field(
        None, min_length=1, max_length=5000,
        description="Narrative assembled by the client; stored as generated_by=client",
    )

    @model_validator(mode="after")
    def check_window_shape(self) -> "GenerateReportRequest":
        if (self.start is None) != (self.end is None):
            raise ValueError("start and end must be provided together")
        if self.window_days is not None and self.start is not None:
            raise ValueError("Use either window_days or start/end, not both")
        return self


# =====================================================================
# D. READ SCHEMAS
# =====================================================================

class WellbeingReportOut(BaseModel):
    """Complete wellbeing report output."""
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    id: UUID
    user_id: UUID
    start_date: datetime
    end_date: datetime
    overall_score: int
    wellbeing_level: WellbeingLevel
    trend: Trend
    summary: str
    recommendations: List[Recommendation]
    strengths: List[str] = Field(default_factory=list)
    areas_for_improvement: List[str] = Field(default_factory=list)
    mood_analysis: Optional[MoodAnalysis] = None
    activity_analysis: Optional[ActivityAnalysis] = None
    sleep_analysis: Optional[SleepAnalysis] = None
    stress_analysis: Optional[StressAnalysis] = None
    data_points: Dict[str, Any]
    seek_help_recommended: bool
    help_recommendation: Optional[HelpRecommendation] = None
    generated_by: GeneratedBy
    ai_model: Optional[str] = None
    created_at: datetime


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class WellbeingReportList(BaseModel):
    reports: List[WellbeingReportOut]
    pagination: Pagination


class UsageStatusOut(BaseModel):
    """Report quota for the current billing period; limit None means unlimited."""
    plan: str
    period_start: date
    used: int
    limit: Optional[int] = None
    remaining: Optional[int] = None
