# app/data/report_highlights.py
from dataclasses import dataclass
from typing import Any, Callable, List


@dataclass(frozen=True)
class HighlightRule:
    """A trigger over the snapshot and the line it adds to the report."""
    name: str
    trigger: Callable[[Any], bool]
    text: str


def _at_least(value, threshold) -> bool:
    return value is not None and value >= threshold


def _at_most(value, threshold) -> bool:
    return value is not None and value <= threshold


def _above(value, threshold) -> bool:
    return value is not None and value > threshold


def _below(value, threshold) -> bool:
    return value is not None and value < threshold


# =====================================================================
# STRENGTHS
# =====================================================================

STRENGTH_RULES: List[HighlightRule] = [
    HighlightRule(
        name="positive_mood",
        trigger=lambda snap: _at_least(snap.average_mood, 6),
        text="Maintaining positive mood states",
    ),
    HighlightRule(
        name="regular_activity",
        trigger=lambda snap: snap.total_activity_minutes > 60,
        text="Staying active regularly",
    ),
    HighlightRule(
        name="managed_stress",
        trigger=lambda snap: _at_most(snap.average_stress, 5),
        text="Managing stress effectively",
    ),
]

DEFAULT_STRENGTH = "Taking steps to track your wellbeing"


# =====================================================================
# AREAS FOR IMPROVEMENT
# =====================================================================

IMPROVEMENT_RULES: List[HighlightRule] = [
    HighlightRule(
        name="high_stress",
        trigger=lambda snap: _above(snap.average_stress, 6),
        text="Stress management techniques",
    ),
    HighlightRule(
        name="low_activity",
        trigger=lambda snap: snap.total_activity_minutes < 60,
        text="Increasing physical activity",
    ),
    HighlightRule(
        name="low_mood",
        trigger=lambda snap: _below(snap.average_mood, 5),
        text="Mood-boosting activities",
    ),
]

DEFAULT_IMPROVEMENT = "Continue your current positive habits"
