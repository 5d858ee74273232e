"""
Tests for report assembly and the generate/read flow of the report service.
"""
from datetime import datetime, timedelta

import httpx
import pytest

from app.core.config import Settings
from app.core.exceptions import (
    InsufficientDataWarning,
    NotFoundError,
    QuotaExceededError,
    ValidationError,
)
from app.crud.wellbeing_report import crud_wellbeing_report
from app.models import Plan
from app.schemas.wellbeing_report import WellbeingReportOut
from app.services.narrative import NarrativeGeneratorFactory
from app.services.wellbeing_report import (
    WellbeingReportService,
    build_help_recommendation,
    sleep_consistency,
    sleep_quality,
)
from app.services.aggregator import AggregateSnapshot, aggregate
from app.services.scorer import ScoreResult, classify_level
from conftest import activity_entry, mood_entry, utc_now


NOW = datetime(2025, 3, 20, 12, 0)


def service_with_backend(handler=None, calls=None, **settings_overrides):
    """Service whose generative backend is an httpx mock."""
    settings = Settings(
        GENERATIVE_BACKEND_URL="http://narrative.test/generate",
        GENERATIVE_BACKEND_MODEL="test-model",
        **settings_overrides,
    )

    def recording(request):
        if calls is not None:
            calls.append(request)
        return handler(request)

    client = httpx.Client(transport=httpx.MockTransport(recording))
    return WellbeingReportService(
        settings=settings,
        narrative_factory=NarrativeGeneratorFactory(settings, client=client),
    )


@pytest.fixture
def service():
    return WellbeingReportService(Settings())


def assemble(service, moods, activities, plan=Plan.free, **kwargs):
    return service.assemble(
        user_id="00000000-0000-0000-0000-000000000001",
        plan=plan,
        start=NOW - timedelta(days=7),
        end=NOW,
        mood_logs=moods,
        activity_logs=activities,
        created_at=NOW,
        **kwargs,
    )


# ============================================================================
# Window resolution
# ============================================================================

class TestResolveWindow:

    def test_trailing_window_ends_now(self, service):
        start, end = service.resolve_window(window_days=14, now=NOW)
        assert end == NOW
        assert start == NOW - timedelta(days=14)

    def test_default_window(self, service):
        start, end = service.resolve_window(now=NOW)
        assert end - start == timedelta(days=7)

    def test_explicit_window(self, service):
        start, end = service.resolve_window(start=datetime(2025, 3, 1), end=datetime(2025, 3, 10), now=NOW)
        assert (start, end) == (datetime(2025, 3, 1), datetime(2025, 3, 10))

    @pytest.mark.parametrize("kwargs", [
        {"window_days": 0},
        {"window_days": -3},
        {"window_days": 91},
        {"window_days": 1_000_000},
        {"start": datetime(2025, 3, 10), "end": datetime(2025, 3, 1)},
        {"start": datetime(2024, 1, 1), "end": datetime(2025, 3, 1)},
        {"start": datetime(2025, 3, 1)},
        {"window_days": 5, "start": datetime(2025, 3, 1), "end": datetime(2025, 3, 2)},
    ])
    def test_invalid_windows(self, service, kwargs):
        with pytest.raises(ValidationError):
            service.resolve_window(now=NOW, **kwargs)


# ============================================================================
# Assembly
# ============================================================================

class TestAssemble:

    def test_worked_example(self, service, worked_example_logs):
        report = assemble(service, *worked_example_logs)

        assert report.mood_analysis.average_score == 7.0
        assert report.trend == "improving"
        assert report.overall_score == 75
        assert report.wellbeing_level == "good"
        assert [(r.title, r.priority) for r in report.recommendations] == [("Increase Activity", "medium")]
        assert report.generated_by == "fallback"
        assert report.ai_model is None
        assert report.seek_help_recommended is False
        assert report.activity_analysis.total_minutes == 30
        assert report.sleep_analysis is None
        assert report.stress_analysis is None
        assert report.strengths == ["Maintaining positive mood states"]
        assert report.areas_for_improvement == ["Increasing physical activity"]

    def test_empty_window_produces_no_data_report(self, service):
        with pytest.warns(InsufficientDataWarning):
            report = assemble(service, [], [])

        assert report.wellbeing_level == "no_data"
        assert report.overall_score == 50
        assert report.trend == "stable"
        assert "Start logging" in report.summary
        assert report.mood_analysis is None
        assert report.activity_analysis is None
        assert [r.title for r in report.recommendations] == ["Increase Activity", "Start Tracking Your Mood"]
        assert report.data_points["total_mood_logs"] == 0

    def test_deterministic(self, service, worked_example_logs):
        first = assemble(service, *worked_example_logs)
        second = assemble(service, *worked_example_logs)

        assert first == second

    def test_analysis_sections(self, service):
        moods = [
            mood_entry(3, day=1, mood="anxious", stress=8, sleep=5.0),
            mood_entry(4, day=2, mood="anxious", stress=9, sleep=6.0),
            mood_entry(3, day=3, mood="sad", stress=7, sleep=5.5),
        ]
        report = assemble(service, moods, [])

        assert report.mood_analysis.dominant_mood == "anxious"
        assert report.mood_analysis.mood_counts == {"anxious": 2, "sad": 1}
        assert report.sleep_analysis.quality == "poor"
        assert report.sleep_analysis.consistency == "consistent"
        assert report.stress_analysis.high_stress_entries == 2
        assert report.stress_analysis.highest_level == 9
        assert report.seek_help_recommended is True
        assert report.help_recommendation.urgency == "high"
        assert report.help_recommendation.suggested_specialties == ["mental_health", "counseling"]

    def test_client_summary_skips_backends(self, worked_example_logs):
        calls = []
        service = service_with_backend(lambda r: httpx.Response(200, json={"text": "model"}), calls)

        report = assemble(service, *worked_example_logs, plan=Plan.pro, client_summary="  Written\n on device. ")

        assert report.summary == "Written on device."
        assert report.generated_by == "client"
        assert report.ai_model is None
        assert calls == []

    def test_generative_backend_for_paid_plan(self, worked_example_logs):
        service = service_with_backend(lambda r: httpx.Response(200, json={"text": "A solid week."}))

        report = assemble(service, *worked_example_logs, plan=Plan.pro)

        assert report.summary == "A solid week."
        assert report.generated_by == "ai"
        assert report.ai_model == "test-model"

    def test_free_plan_never_calls_backend(self, worked_example_logs):
        calls = []
        service = service_with_backend(lambda r: httpx.Response(200, json={"text": "x"}), calls)

        report = assemble(service, *worked_example_logs, plan=Plan.free)

        assert report.generated_by == "fallback"
        assert calls == []

    def test_backend_failure_falls_back(self, service, worked_example_logs):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        failing = service_with_backend(handler)
        report = assemble(failing, *worked_example_logs, plan=Plan.pro)

        assert report.generated_by == "fallback"
        assert report.summary == assemble(service, *worked_example_logs).summary

    def test_unexpected_backend_error_falls_back(self, worked_example_logs):
        def handler(request):
            raise httpx.InvalidURL("bad url")

        report = assemble(service_with_backend(handler), *worked_example_logs, plan=Plan.pro)

        assert report.generated_by == "fallback"
        assert report.ai_model is None
        assert report.summary


class TestHelpRecommendation:

    def test_not_recommended_for_healthy_window(self):
        snap = aggregate([mood_entry(8, day=d, stress=3) for d in range(1, 4)], [])
        assert build_help_recommendation(snap, ScoreResult(80, classify_level(80))) is None

    def test_acute_stress_alone_is_moderate(self):
        snap = aggregate([mood_entry(7, day=1, stress=8)], [])
        help_rec = build_help_recommendation(snap, ScoreResult(66, classify_level(66)))

        assert help_rec.urgency == "moderate"
        assert "once" in help_rec.reason

    def test_low_score_between_30_and_40_is_moderate(self):
        snap = AggregateSnapshot(mood_count=3, average_mood=3.5)
        assert build_help_recommendation(snap, ScoreResult(35, classify_level(35))).urgency == "moderate"

    def test_no_mood_data_is_never_flagged_for_score(self):
        assert build_help_recommendation(AggregateSnapshot(), ScoreResult(50, classify_level(50))) is None


class TestSleepLabels:

    @pytest.mark.parametrize("hours,label", [(5.9, "poor"), (6.0, "fair"), (7.0, "good"), (9.0, "good"), (9.5, "excessive")])
    def test_quality(self, hours, label):
        assert sleep_quality(hours) == label

    @pytest.mark.parametrize("shortest,longest,label", [(7, 8, "consistent"), (6, 8.5, "somewhat variable"), (4, 9, "irregular")])
    def test_consistency(self, shortest, longest, label):
        assert sleep_consistency(shortest, longest) == label


# ============================================================================
# Generate and read
# ============================================================================

class TestGenerateReport:

    def test_persists_report(self, db, user, service, add_mood, add_activity, recent):
        for ts, score in zip(recent, [6, 6, 7, 8, 8]):
            add_mood(user, score, ts)
        add_activity(user, 30, recent[2])

        report = service.generate_report(db, user=user, window_days=7)

        assert report.id is not None
        assert report.overall_score == 75
        assert report.wellbeing_level == "good"
        assert report.recommendations[0]["title"] == "Increase Activity"
        assert crud_wellbeing_report.count_for_user(db, user_id=user.id) == 1
        assert service.usage(db, user=user).used == 1

    def test_logs_outside_window_are_ignored(self, db, user, service, add_mood):
        add_mood(user, 2, utc_now() - timedelta(days=20))
        add_mood(user, 9, utc_now() - timedelta(days=1))

        report = service.generate_report(db, user=user, window_days=7)

        assert report.mood_analysis["total_logs"] == 1
        assert report.mood_analysis["average_score"] == 9.0

    def test_other_users_logs_are_ignored(self, db, make_user, service, add_mood):
        owner, other = make_user(), make_user()
        add_mood(other, 9, utc_now() - timedelta(days=1))

        with pytest.warns(InsufficientDataWarning):
            report = service.generate_report(db, user=owner)

        assert report.wellbeing_level == "no_data"

    def test_second_report_on_free_plan_is_denied(self, db, user, service):
        with pytest.warns(InsufficientDataWarning):
            service.generate_report(db, user=user)

        with pytest.raises(QuotaExceededError) as excinfo:
            service.generate_report(db, user=user)

        assert excinfo.value.limit == 1
        assert excinfo.value.used == 1
        assert crud_wellbeing_report.count_for_user(db, user_id=user.id) == 1

    def test_invalid_window_does_not_consume_quota(self, db, user, service):
        with pytest.raises(ValidationError):
            service.generate_report(db, user=user, start=datetime(2025, 3, 10), end=datetime(2025, 3, 1))
        with pytest.raises(ValidationError):
            service.generate_report(db, user=user, client_summary="   ")

        assert service.usage(db, user=user).used == 0

    def test_quota_is_consumed_before_logs_are_read(self, db, user, service):
        class BrokenLogStore:
            def get_mood_logs(self, *args, **kwargs):
                raise RuntimeError("log store offline")

            get_activity_logs = get_mood_logs

        service.log_store = BrokenLogStore()

        with pytest.raises(RuntimeError):
            service.generate_report(db, user=user)

        assert service.usage(db, user=user).used == 1
        assert crud_wellbeing_report.count_for_user(db, user_id=user.id) == 0

    def test_each_request_creates_a_new_report(self, db, make_user, service, add_mood):
        user = make_user(plan=Plan.pro)
        add_mood(user, 7, utc_now() - timedelta(days=1))

        first = service.generate_report(db, user=user)
        second = service.generate_report(db, user=user)

        assert first.id != second.id
        assert crud_wellbeing_report.count_for_user(db, user_id=user.id) == 2


class TestReadReports:

    def test_get_report_scoped_to_owner(self, db, make_user, service, add_mood):
        owner, stranger = make_user(), make_user()
        add_mood(owner, 7, utc_now() - timedelta(days=1))
        report = service.generate_report(db, user=owner)

        assert service.get_report(db, user=owner, report_id=report.id).id == report.id
        with pytest.raises(NotFoundError):
            service.get_report(db, user=stranger, report_id=report.id)

    def test_latest_and_list(self, db, make_user, service, add_mood):
        user = make_user(plan=Plan.team)
        add_mood(user, 7, utc_now() - timedelta(days=1))

        assert service.get_latest_report(db, user=user) is None

        ids = [
            service.generate_report(db, user=user, now=utc_now() + timedelta(seconds=i)).id
            for i in range(3)
        ]

        assert service.get_latest_report(db, user=user).id == ids[-1]

        page = service.list_reports(db, user=user, page=1, limit=2)
        assert [r.id for r in page.reports] == [ids[2], ids[1]]
        assert page.pagination.total == 3
        assert page.pagination.pages == 2

        last = service.list_reports(db, user=user, page=2, limit=2)
        assert [r.id for r in last.reports] == [ids[0]]

    def test_stored_report_round_trips_to_schema(self, db, user, service, add_mood, add_activity, recent):
        add_mood(user, 6, recent[0], stress=7, sleep=6.5)
        add_activity(user, 45, recent[1])
        report = service.generate_report(db, user=user)

        out = WellbeingReportOut.model_validate(report)

        assert out.stress_analysis.average_level == 7.0
        assert out.activity_analysis.most_active_day == recent[1].date()
        assert out.recommendations[0].title
        assert out.strengths
        assert out.areas_for_improvement
