# app/schemas/__init__.py

from .logs import (
    MoodType,
    ActivityCategory,
    MoodLogEntry,
    ActivityLogEntry,
)
from .wellbeing_report import (
    WellbeingLevel,
    Trend,
    StressTrend,
    Priority,
    GeneratedBy,
    HelpUrgency,
    Recommendation,
    MoodAnalysis,
    ActivityAnalysis,
    SleepAnalysis,
    StressAnalysis,
    HelpRecommendation,
    WellbeingReportCreate,
    GenerateReportRequest,
    WellbeingReportOut,
    Pagination,
    WellbeingReportList,
    UsageStatusOut,
)


__all__ = [
    # Logs
    "MoodType", "ActivityCategory", "MoodLogEntry", "ActivityLogEntry",

    # Wellbeing reports
    "WellbeingLevel", "Trend", "StressTrend", "Priority", "GeneratedBy", "HelpUrgency",
    "Recommendation", "MoodAnalysis", "ActivityAnalysis", "SleepAnalysis", "StressAnalysis",
    "HelpRecommendation", "WellbeingReportCreate", "GenerateReportRequest",
    "WellbeingReportOut", "Pagination", "WellbeingReportList", "UsageStatusOut",
]
