# services/recommendations.py
from typing import List, Sequence

from app.data.recommendation_rules import (
    RECOMMENDATION_RULES,
    DEFAULT_RECOMMENDATION,
    RecommendationRule,
)
from app.data.report_highlights import (
    DEFAULT_IMPROVEMENT,
    DEFAULT_STRENGTH,
    IMPROVEMENT_RULES,
    STRENGTH_RULES,
    HighlightRule,
)
from app.schemas.wellbeing_report import Recommendation
from app.services.aggregator import AggregateSnapshot


def build_recommendations(
    snapshot: AggregateSnapshot,
    score: int,
    rules: Sequence[RecommendationRule] = RECOMMENDATION_RULES,
) -> List[Recommendation]:
    """
    Evaluate the rule table in order and collect every matching
    recommendation. Never returns an empty list.
    """
    matched = [rule.recommendation for rule in rules if rule.trigger(snapshot, score)]
    return matched or [DEFAULT_RECOMMENDATION]


def _highlights(snapshot: AggregateSnapshot, rules: Sequence[HighlightRule], default: str) -> List[str]:
    return [rule.text for rule in rules if rule.trigger(snapshot)] or [default]


def build_strengths(
    snapshot: AggregateSnapshot, rules: Sequence[HighlightRule] = STRENGTH_RULES
) -> List[str]:
    return _highlights(snapshot, rules, DEFAULT_STRENGTH)


def build_areas_for_improvement(
    snapshot: AggregateSnapshot, rules: Sequence[HighlightRule] = IMPROVEMENT_RULES
) -> List[str]:
    return _highlights(snapshot, rules, DEFAULT_IMPROVEMENT)
