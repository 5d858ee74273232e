# services/trend.py
import math
from typing import List, Optional, Sequence, Tuple

from app.schemas.logs import MoodLogEntry
from app.schemas.wellbeing_report import Trend, StressTrend


TREND_THRESHOLD = 0.5
MIN_TREND_ENTRIES = 3
RECENT_WINDOW = 3


def split_windows(values: Sequence[float]) -> Optional[Tuple[List[float], List[float]]]:
    """
    Split a time-ordered series into (earlier, recent).

    The recent window is the last min(3, n-1) values so the earlier window
    always keeps at least one. Returns None for series too short to compare.
    """
    n = len(values)
    if n < MIN_TREND_ENTRIES:
        return None
    recent_size = min(RECENT_WINDOW, n - 1)
    return list(values[:-recent_size]), list(values[-recent_size:])


def _difference(values: Sequence[float]) -> Optional[float]:
    windows = split_windows(values)
    if windows is None:
        return None
    earlier, recent = windows
    return math.fsum(recent) / len(recent) - math.fsum(earlier) / len(earlier)


def classify_mood_trend(mood_logs: Sequence[MoodLogEntry]) -> Trend:
    """Label mood direction by comparing the recent window with the earlier one."""
    diff = _difference([entry.mood_score for entry in mood_logs])
    if diff is None:
        return Trend.stable
    if diff > TREND_THRESHOLD:
        return Trend.improving
    if diff < -TREND_THRESHOLD:
        return Trend.declining
    return Trend.stable


def classify_stress_trend(mood_logs: Sequence[MoodLogEntry]) -> StressTrend:
    """Same split as the mood trend, over entries that recorded a stress level."""
    diff = _difference([e.stress_level for e in mood_logs if e.stress_level is not None])
    if diff is None:
        return StressTrend.stable
    if diff > TREND_THRESHOLD:
        return StressTrend.increasing
    if diff < -TREND_THRESHOLD:
        return StressTrend.decreasing
    return StressTrend.stable
