# services/wellbeing_report.py
import logging
import math
import warnings
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import Settings, settings as default_settings
from app.core.exceptions import InsufficientDataWarning, NotFoundError, ValidationError
from app.crud.log_store import crud_log_store
from app.crud.wellbeing_report import crud_wellbeing_report
from app.models.user_auth import UserAuth
from app.models.wellbeing_report import WellbeingReport
from app.schemas.logs import ActivityLogEntry, MoodLogEntry
from app.schemas.wellbeing_report import (
    ActivityAnalysis,
    GeneratedBy,
    HelpRecommendation,
    HelpUrgency,
    MoodAnalysis,
    Pagination,
    SleepAnalysis,
    StressAnalysis,
    Trend,
    UsageStatusOut,
    WellbeingReportCreate,
    WellbeingReportList,
    WellbeingReportOut,
)
from app.services.aggregator import AggregateSnapshot, aggregate
from app.services.document_renderer import render_report_pdf
from app.services.narrative import NarrativeContext, NarrativeGeneratorFactory, NarrativeResult
from app.services.recommendations import (
    build_areas_for_improvement,
    build_recommendations,
    build_strengths,
)
from app.services.scorer import ScoreResult, score_snapshot
from app.services.trend import classify_mood_trend, classify_stress_trend
from app.services.usage_gate import UsageGate, plan_name

logger = logging.getLogger(__name__)


HELP_SCORE_THRESHOLD = 40
URGENT_HELP_SCORE_THRESHOLD = 30
HELP_SPECIALTIES = ["mental_health", "counseling"]
TOP_CATEGORY_COUNT = 3


def _utc_naive(value: datetime) -> datetime:
    """Stored timestamps are naive UTC; aware inputs are converted first."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _round(value: Optional[float]) -> float:
    return round(value or 0.0, 2)


# =====================================================================
# ANALYSIS SECTIONS
# =====================================================================

def build_mood_analysis(snapshot: AggregateSnapshot, trend: Trend) -> Optional[MoodAnalysis]:
    if not snapshot.mood_count:
        return None
    return MoodAnalysis(
        total_logs=snapshot.mood_count,
        average_score=_round(snapshot.average_mood),
        highest_score=snapshot.max_mood,
        lowest_score=snapshot.min_mood,
        trend=trend,
        dominant_mood=snapshot.dominant_mood,
        mood_counts=snapshot.mood_counts,
    )


def build_activity_analysis(snapshot: AggregateSnapshot) -> Optional[ActivityAnalysis]:
    if not snapshot.activity_count:
        return None
    # sorted() is stable, so equal counts keep first-seen order
    ranked = sorted(snapshot.activity_counts, key=snapshot.activity_counts.get, reverse=True)
    return ActivityAnalysis(
        total_activities=snapshot.activity_count,
        total_minutes=snapshot.total_activity_minutes,
        average_duration=_round(snapshot.average_activity_duration),
        top_categories=ranked[:TOP_CATEGORY_COUNT],
        category_counts=snapshot.activity_counts,
        most_active_day=snapshot.most_active_day,
    )


def sleep_quality(average_hours: float) -> str:
    if average_hours < 6:
        return "poor"
    if average_hours < 7:
        return "fair"
    if average_hours <= 9:
        return "good"
    return "excessive"


def sleep_consistency(shortest: float, longest: float) -> str:
    spread = longest - shortest
    if spread <= 1:
        return "consistent"
    if spread <= 2.5:
        return "somewhat variable"
    return "irregular"


def build_sleep_analysis(snapshot: AggregateSnapshot) -> Optional[SleepAnalysis]:
    if not snapshot.sleep_count:
        return None
    return SleepAnalysis(
        average_hours=_round(snapshot.average_sleep),
        shortest_hours=snapshot.min_sleep,
        longest_hours=snapshot.max_sleep,
        quality=sleep_quality(snapshot.average_sleep),
        consistency=sleep_consistency(snapshot.min_sleep, snapshot.max_sleep),
    )


def build_stress_analysis(
    snapshot: AggregateSnapshot, mood_logs: Sequence[MoodLogEntry]
) -> Optional[StressAnalysis]:
    if not snapshot.stress_count:
        return None
    return StressAnalysis(
        average_level=_round(snapshot.average_stress),
        highest_level=snapshot.max_stress,
        high_stress_entries=snapshot.high_stress_count,
        trend=classify_stress_trend(mood_logs),
    )


def build_help_recommendation(
    snapshot: AggregateSnapshot, score: ScoreResult
) -> Optional[HelpRecommendation]:
    """
    Suggest professional support when the score is low or any check-in
    reported acute stress.
    """
    low_score = snapshot.has_mood_data and score.score < HELP_SCORE_THRESHOLD
    acute_stress = snapshot.high_stress_count > 0
    if not (low_score or acute_stress):
        return None

    reasons = []
    if low_score:
        reasons.append(f"Your wellbeing score of {score.score}/100 is lower than we'd like.")
    if acute_stress:
        times = "once" if snapshot.high_stress_count == 1 else f"{snapshot.high_stress_count} times"
        reasons.append(f"You reported very high stress {times} in this period.")
    reasons.append("Talking to a professional can help.")

    urgent = low_score and score.score < URGENT_HELP_SCORE_THRESHOLD
    return HelpRecommendation(
        reason=" ".join(reasons),
        urgency=HelpUrgency.high if urgent else HelpUrgency.moderate,
        suggested_specialties=HELP_SPECIALTIES,
    )


# =====================================================================
# SERVICE CLASS
# =====================================================================

class WellbeingReportService:
    """Generates, stores and serves wellbeing reports."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        usage_gate: Optional[UsageGate] = None,
        narrative_factory: Optional[NarrativeGeneratorFactory] = None,
    ):
        self.settings = settings or default_settings
        self.crud = crud_wellbeing_report
        self.log_store = crud_log_store
        self.usage_gate = usage_gate or UsageGate(self.settings)
        self.narratives = narrative_factory or NarrativeGeneratorFactory(self.settings)

    # =====================================================================
    # WINDOW
    # =====================================================================

    def resolve_window(
        self,
        *,
        window_days: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> Tuple[datetime, datetime]:
        """
        Turn a trailing window or an explicit start/end pair into a
        validated (start, end) in naive UTC.

        Raises:
            ValidationError: If the window is malformed or too long
        """
        now = _utc_naive(now or datetime.now(timezone.utc))
        max_days = self.settings.MAX_REPORT_LOOKBACK_DAYS

        if start is not None or end is not None:
            if start is None or end is None:
                raise ValidationError("start and end must be provided together")
            if window_days is not None:
                raise ValidationError("Use either window_days or start/end, not both")
            start, end = _utc_naive(start), _utc_naive(end)
        else:
            days = self.settings.DEFAULT_REPORT_WINDOW_DAYS if window_days is None else window_days
            if days <= 0:
                raise ValidationError("window_days must be a positive number of days")
            if days > max_days:
                raise ValidationError(f"Report window cannot exceed {max_days} days")
            end = now
            start = now - timedelta(days=days)

        if start > end:
            raise ValidationError("Report start date must not be after its end date")

        if end - start > timedelta(days=max_days):
            raise ValidationError(f"Report window cannot exceed {max_days} days")

        return start, end

    # =====================================================================
    # ASSEMBLY
    # =====================================================================

    def _narrative(
        self, plan, context: NarrativeContext, client_summary: Optional[str]
    ) -> NarrativeResult:
        if client_summary is not None:
            return NarrativeResult(text=" ".join(client_summary.split()), generated_by=GeneratedBy.client)
        return self.narratives.for_plan(plan).generate(context)

    def assemble(
        self,
        *,
        user_id: UUID,
        plan,
        start: datetime,
        end: datetime,
        mood_logs: Sequence[MoodLogEntry],
        activity_logs: Sequence[ActivityLogEntry],
        client_summary: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> WellbeingReportCreate:
        """Build the immutable report for a window of logs. Nothing is persisted here."""
        snapshot = aggregate(mood_logs, activity_logs)
        if snapshot.is_empty:
            logger.info(f"No logs between {start} and {end} for user {user_id}, building a no-data report")
            warnings.warn(
                "No mood or activity logs in the report window; using no-data defaults",
                InsufficientDataWarning,
                stacklevel=2,
            )

        trend = classify_mood_trend(mood_logs)
        score = score_snapshot(snapshot, trend)
        recommendations = build_recommendations(snapshot, score.score)

        context = NarrativeContext(
            snapshot=snapshot, trend=trend, score=score, recommendations=recommendations
        )
        narrative = self._narrative(plan, context, client_summary)
        help_recommendation = build_help_recommendation(snapshot, score)

        return WellbeingReportCreate(
            user_id=user_id,
            start_date=start,
            end_date=end,
            overall_score=score.score,
            wellbeing_level=score.level,
            trend=trend,
            summary=narrative.text,
            recommendations=recommendations,
            strengths=build_strengths(snapshot),
            areas_for_improvement=build_areas_for_improvement(snapshot),
            mood_analysis=build_mood_analysis(snapshot, trend),
            activity_analysis=build_activity_analysis(snapshot),
            sleep_analysis=build_sleep_analysis(snapshot),
            stress_analysis=build_stress_analysis(snapshot, mood_logs),
            data_points=snapshot.data_points(),
            seek_help_recommended=help_recommendation is not None,
            help_recommendation=help_recommendation,
            generated_by=narrative.generated_by,
            ai_model=narrative.model if narrative.generated_by == GeneratedBy.ai else None,
            created_at=_utc_naive(created_at or datetime.now(timezone.utc)),
        )

    # =====================================================================
    # CREATE OPERATIONS
    # =====================================================================

    def generate_report(
        self,
        db: Session,
        *,
        user: UserAuth,
        window_days: Optional[int] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        client_summary: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> WellbeingReport:
        """
        Generate and persist a new wellbeing report.

        The window is validated before any quota is touched. One unit of
        quota is then consumed before the logs are read, and it is not
        returned if anything after that point fails.

        Args:
            db: Database session
            user: Requesting user
            window_days: Trailing window ending now
            start: Explicit window start
            end: Explicit window end
            client_summary: Narrative supplied by the caller
            now: Reference time, defaults to the current UTC time

        Returns:
            Created WellbeingReport instance

        Raises:
            ValidationError: Invalid window or blank client summary
            QuotaExceededError: The plan's report limit for this month is reached
        """
        start, end = self.resolve_window(window_days=window_days, start=start, end=end, now=now)
        if client_summary is not None and not client_summary.strip():
            raise ValidationError("client_summary must not be blank")

        self.usage_gate.consume_or_raise(db, user, now)

        mood_logs = self.log_store.get_mood_logs(db, user_id=user.id, start=start, end=end)
        activity_logs = self.log_store.get_activity_logs(db, user_id=user.id, start=start, end=end)

        report_in = self.assemble(
            user_id=user.id,
            plan=user.plan,
            start=start,
            end=end,
            mood_logs=mood_logs,
            activity_logs=activity_logs,
            client_summary=client_summary,
            created_at=now,
        )
        report = self.crud.create(db, obj_in=report_in)
        logger.info(
            f"Generated wellbeing report {report.id} for user {user.id} "
            f"(score={report.overall_score}, level={report.wellbeing_level}, by={report.generated_by})"
        )
        return report

    # =====================================================================
    # READ OPERATIONS
    # =====================================================================

    def get_report(self, db: Session, *, user: UserAuth, report_id: UUID) -> WellbeingReport:
        """
        Get one of the user's reports.

        Raises:
            NotFoundError: If the report does not exist or belongs to someone else
        """
        report = self.crud.get_for_user(db, id=report_id, user_id=user.id)
        if not report:
            raise NotFoundError("Report not found")
        return report

    def get_latest_report(self, db: Session, *, user: UserAuth) -> Optional[WellbeingReport]:
        return self.crud.get_latest_for_user(db, user_id=user.id)

    def list_reports(
        self, db: Session, *, user: UserAuth, page: int = 1, limit: int = 10
    ) -> WellbeingReportList:
        total = self.crud.count_for_user(db, user_id=user.id)
        reports: List[WellbeingReport] = self.crud.get_multi_for_user(
            db, user_id=user.id, skip=(page - 1) * limit, limit=limit
        )
        return WellbeingReportList(
            reports=[WellbeingReportOut.model_validate(r) for r in reports],
            pagination=Pagination(page=page, limit=limit, total=total, pages=math.ceil(total / limit)),
        )

    def usage(self, db: Session, *, user: UserAuth, now: Optional[datetime] = None) -> UsageStatusOut:
        return self.usage_gate.usage(db, user, now)

    def render_document(self, db: Session, *, user: UserAuth, report_id: UUID) -> bytes:
        """PDF rendering of one of the user's reports."""
        report = self.get_report(db, user=user, report_id=report_id)
        logger.info(f"Rendering report {report.id} as PDF for plan {plan_name(user.plan)}")
        return render_report_pdf(WellbeingReportOut.model_validate(report))


# Create singleton instance
wellbeing_report_service = WellbeingReportService()
