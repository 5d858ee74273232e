# services/scorer.py
from dataclasses import dataclass

from app.schemas.wellbeing_report import Trend, WellbeingLevel
from app.services.aggregator import AggregateSnapshot


NEUTRAL_SCORE = 50

TREND_ADJUSTMENT = {
    Trend.improving: 5,
    Trend.stable: 0,
    Trend.declining: -5,
}

STRESS_BASELINE = 5
STRESS_PENALTY_PER_POINT = 2
MAX_STRESS_PENALTY = 10

# Lower bounds, inclusive, checked top down
LEVEL_THRESHOLDS = (
    (85, WellbeingLevel.excellent),
    (70, WellbeingLevel.good),
    (50, WellbeingLevel.moderate),
    (25, WellbeingLevel.low),
)


@dataclass(frozen=True)
class ScoreResult:
    score: int
    level: WellbeingLevel


def classify_level(score: int) -> WellbeingLevel:
    for lower_bound, level in LEVEL_THRESHOLDS:
        if score >= lower_bound:
            return level
    return WellbeingLevel.critical


def stress_penalty(average_stress) -> float:
    if average_stress is None or average_stress <= STRESS_BASELINE:
        return 0.0
    return min((average_stress - STRESS_BASELINE) * STRESS_PENALTY_PER_POINT, MAX_STRESS_PENALTY)


def score_snapshot(snapshot: AggregateSnapshot, trend: Trend) -> ScoreResult:
    """
    Overall score from average mood (1-10 scaled to 10-100), adjusted for
    trend and average stress, rounded and clamped to [0, 100].

    Without mood data the score is the neutral midpoint and the level is
    no_data.
    """
    if not snapshot.has_mood_data:
        return ScoreResult(score=NEUTRAL_SCORE, level=WellbeingLevel.no_data)

    raw = snapshot.average_mood * 10
    raw += TREND_ADJUSTMENT[Trend(trend)]
    raw -= stress_penalty(snapshot.average_stress)

    score = max(0, min(100, int(round(raw))))
    return ScoreResult(score=score, level=classify_level(score))
