# services/aggregator.py
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

from app.schemas.logs import MoodLogEntry, ActivityLogEntry


HIGH_STRESS_THRESHOLD = 8


# =====================================================================
# SNAPSHOT
# =====================================================================

@dataclass(frozen=True)
class AggregateSnapshot:
    """
    Statistical summary of one report window. Built per request and thrown
    away with it; only the figures copied into a report are ever stored.
    """
    # Mood
    mood_count: int = 0
    average_mood: Optional[float] = None
    min_mood: Optional[int] = None
    max_mood: Optional[int] = None
    dominant_mood: Optional[str] = None
    mood_counts: Dict[str, int] = field(default_factory=dict)

    # Stress
    stress_count: int = 0
    average_stress: Optional[float] = None
    max_stress: Optional[int] = None
    high_stress_count: int = 0

    # Sleep
    sleep_count: int = 0
    average_sleep: Optional[float] = None
    min_sleep: Optional[float] = None
    max_sleep: Optional[float] = None

    # Activity
    activity_count: int = 0
    total_activity_minutes: int = 0
    average_activity_duration: Optional[float] = None
    dominant_activity: Optional[str] = None
    activity_counts: Dict[str, int] = field(default_factory=dict)
    most_active_day: Optional[date] = None

    @property
    def has_mood_data(self) -> bool:
        return self.mood_count > 0

    @property
    def is_empty(self) -> bool:
        return self.mood_count == 0 and self.activity_count == 0

    def data_points(self) -> dict:
        """Headline figures stored on the report."""
        return {
            "total_mood_logs": self.mood_count,
            "total_activity_logs": self.activity_count,
            "average_mood_score": _rounded(self.average_mood),
            "average_stress_level": _rounded(self.average_stress),
            "average_sleep_hours": _rounded(self.average_sleep),
            "total_activity_minutes": self.total_activity_minutes,
            "most_common_mood": self.dominant_mood,
            "most_common_activity": self.dominant_activity,
        }


# =====================================================================
# HELPERS
# =====================================================================

def _rounded(value: Optional[float], digits: int = 2) -> Optional[float]:
    return None if value is None else round(value, digits)


def _mean(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    # fsum is exact, so the mean does not depend on input order
    return math.fsum(values) / len(values)


def _first_seen_counts(values: Iterable[str]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    return counts


def _mode(counts: Dict[str, int]) -> Optional[str]:
    # max() keeps the first key on ties, and dicts keep insertion order
    if not counts:
        return None
    return max(counts, key=counts.get)


# =====================================================================
# AGGREGATION
# =====================================================================

def aggregate(
    mood_logs: Sequence[MoodLogEntry],
    activity_logs: Sequence[ActivityLogEntry],
) -> AggregateSnapshot:
    """
    Reduce a window of mood and activity logs to an AggregateSnapshot.

    Means only consider entries where the field was recorded; a missing
    stress level or sleep value is not a zero. Missing activity durations
    count as 0 minutes towards the total.
    """
    mood_scores: List[int] = [entry.mood_score for entry in mood_logs]
    stress_levels: List[int] = [e.stress_level for e in mood_logs if e.stress_level is not None]
    sleep_hours: List[float] = [e.sleep_hours for e in mood_logs if e.sleep_hours is not None]
    mood_counts = _first_seen_counts(entry.mood for entry in mood_logs)

    durations: List[int] = [a.duration_minutes for a in activity_logs if a.duration_minutes is not None]
    activity_counts = _first_seen_counts(entry.category for entry in activity_logs)

    minutes_by_day: Dict[date, int] = {}
    for entry in activity_logs:
        day = entry.timestamp.date()
        minutes_by_day[day] = minutes_by_day.get(day, 0) + (entry.duration_minutes or 0)

    return AggregateSnapshot(
        mood_count=len(mood_scores),
        average_mood=_mean(mood_scores),
        min_mood=min(mood_scores) if mood_scores else None,
        max_mood=max(mood_scores) if mood_scores else None,
        dominant_mood=_mode(mood_counts),
        mood_counts=mood_counts,
        stress_count=len(stress_levels),
        average_stress=_mean(stress_levels),
        max_stress=max(stress_levels) if stress_levels else None,
        high_stress_count=sum(1 for level in stress_levels if level >= HIGH_STRESS_THRESHOLD),
        sleep_count=len(sleep_hours),
        average_sleep=_mean(sleep_hours),
        min_sleep=min(sleep_hours) if sleep_hours else None,
        max_sleep=max(sleep_hours) if sleep_hours else None,
        activity_count=len(activity_logs),
        total_activity_minutes=sum(durations),
        average_activity_duration=_mean(durations),
        dominant_activity=_mode(activity_counts),
        activity_counts=activity_counts,
        most_active_day=max(minutes_by_day, key=minutes_by_day.get) if minutes_by_day else None,
    )
