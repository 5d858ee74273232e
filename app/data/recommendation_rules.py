# app/data/recommendation_rules.py
from dataclasses import dataclass
from typing import Any, Callable, List

from app.schemas.wellbeing_report import Priority, Recommendation


# =====================================================================
# RULE TYPE
# =====================================================================

@dataclass(frozen=True)
class RecommendationRule:
    """A trigger over (snapshot, overall score) and the suggestion it emits."""
    name: str
    trigger: Callable[[Any, int], bool]
    recommendation: Recommendation


def _below(value, threshold) -> bool:
    return value is not None and value < threshold


def _above(value, threshold) -> bool:
    return value is not None and value > threshold


# =====================================================================
# RULE TABLE (evaluated in order, every matching rule fires)
# =====================================================================

RECOMMENDATION_RULES: List[RecommendationRule] = [
    RecommendationRule(
        name="low_score",
        trigger=lambda snap, score: snap.mood_count > 0 and score < 40,
        recommendation=Recommendation(
            title="Reach Out for Support",
            description="Your wellbeing score has been low. Talking with a counselor "
                        "or someone you trust can make a real difference.",
            priority=Priority.high,
            category="support",
        ),
    ),
    RecommendationRule(
        name="high_stress",
        trigger=lambda snap, score: _above(snap.average_stress, 6),
        recommendation=Recommendation(
            title="Manage Stress",
            description="Your stress levels have been high. Try a few minutes of deep "
                        "breathing or meditation and take regular breaks during the day.",
            priority=Priority.high,
            category="stress",
        ),
    ),
    RecommendationRule(
        name="low_mood",
        trigger=lambda snap, score: _below(snap.average_mood, 5),
        recommendation=Recommendation(
            title="Boost Your Mood",
            description="Your mood has been a bit low. Plan small things you enjoy "
                        "and spend time with people who lift you up.",
            priority=Priority.high,
            category="mood",
        ),
    ),
    RecommendationRule(
        name="low_activity",
        trigger=lambda snap, score: snap.total_activity_minutes < 60 and snap.activity_count < 3,
        recommendation=Recommendation(
            title="Increase Activity",
            description="Aim for at least 30 minutes of movement a day. "
                        "Even a short walk can help you feel better.",
            priority=Priority.medium,
            category="activity",
        ),
    ),
    RecommendationRule(
        name="short_sleep",
        trigger=lambda snap, score: _below(snap.average_sleep, 7),
        recommendation=Recommendation(
            title="Improve Your Sleep",
            description="You are averaging less than 7 hours of sleep. A regular bedtime "
                        "and less screen time in the evening can help.",
            priority=Priority.medium,
            category="sleep",
        ),
    ),
    RecommendationRule(
        name="no_mood_data",
        trigger=lambda snap, score: snap.mood_count == 0,
        recommendation=Recommendation(
            title="Start Tracking Your Mood",
            description="Log your mood daily so your reports can spot patterns "
                        "and give you better suggestions.",
            priority=Priority.low,
            category="tracking",
        ),
    ),
    RecommendationRule(
        name="sparse_mood_data",
        trigger=lambda snap, score: 1 <= snap.mood_count <= 2,
        recommendation=Recommendation(
            title="Log More Consistently",
            description="A few more check-ins each week will make your reports more accurate.",
            priority=Priority.low,
            category="tracking",
        ),
    ),
]


DEFAULT_RECOMMENDATION = Recommendation(
    title="Keep It Up",
    description="You have been feeling good lately. Whatever you are doing is working!",
    priority=Priority.low,
    category="general",
)
