"""
Tests for the per-plan monthly report quota.
"""
import threading
from datetime import date, datetime, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import Base, Settings
from app.core.exceptions import QuotaExceededError
from app.crud.user_auth import crud_user_auth
from app.models import Plan
from app.services.usage_gate import UsageGate, billing_period


MARCH = datetime(2025, 3, 14, 12, 0)
APRIL = datetime(2025, 4, 1, 0, 30)


@pytest.fixture
def gate():
    return UsageGate(Settings())


class TestBillingPeriod:

    def test_first_day_of_month(self):
        assert billing_period(MARCH) == date(2025, 3, 1)

    def test_aware_times_use_utc(self):
        late_evening = datetime(2025, 3, 31, 23, 30, tzinfo=timezone.utc)
        assert billing_period(late_evening) == date(2025, 3, 1)


class TestLimits:

    @pytest.mark.parametrize("plan,limit", [
        (Plan.free, 1),
        (Plan.starter, 3),
        (Plan.pro, None),
        (Plan.premium, None),
        (Plan.team, None),
        ("enterprise", 1),
    ])
    def test_default_plan_limits(self, gate, plan, limit):
        assert gate.limit_for(plan) == limit


class TestConsume:

    def test_exactly_limit_generations_pass(self, db, make_user, gate):
        user = make_user(plan=Plan.starter)

        results = [gate.try_consume(db, user, MARCH) for _ in range(5)]

        assert results == [True, True, True, False, False]
        assert gate.usage(db, user, MARCH).used == 3

    def test_denial_raises_with_plan_details(self, db, user, gate):
        gate.consume_or_raise(db, user, MARCH)

        with pytest.raises(QuotaExceededError) as excinfo:
            gate.consume_or_raise(db, user, MARCH)

        assert excinfo.value.plan == "free"
        assert excinfo.value.limit == 1
        assert excinfo.value.used == 1
        assert "free plan limit of 1" in str(excinfo.value)
        # denial does not change the counter
        assert gate.usage(db, user, MARCH).used == 1

    def test_unlimited_plan_never_denied(self, db, make_user, gate):
        user = make_user(plan=Plan.pro)

        assert all(gate.try_consume(db, user, MARCH) for _ in range(20))
        status = gate.usage(db, user, MARCH)
        assert status.used == 20
        assert status.limit is None
        assert status.remaining is None

    def test_new_month_starts_a_new_counter(self, db, user, gate):
        assert gate.try_consume(db, user, MARCH)
        assert not gate.try_consume(db, user, MARCH)

        assert gate.try_consume(db, user, APRIL)
        assert gate.usage(db, user, MARCH).used == 1
        assert gate.usage(db, user, APRIL).used == 1

    def test_counters_are_per_user(self, db, make_user, gate):
        first, second = make_user(), make_user()

        assert gate.try_consume(db, first, MARCH)
        assert gate.try_consume(db, second, MARCH)

    def test_usage_before_any_generation(self, db, make_user, gate):
        user = make_user(plan=Plan.starter)
        status = gate.usage(db, user, MARCH)

        assert status.plan == "starter"
        assert status.period_start == date(2025, 3, 1)
        assert status.used == 0
        assert status.limit == 3
        assert status.remaining == 3

    def test_custom_limits_from_settings(self, db, user):
        gate = UsageGate(Settings(PLAN_REPORT_LIMITS={"free": 2}))

        assert gate.try_consume(db, user, MARCH)
        assert gate.try_consume(db, user, MARCH)
        assert not gate.try_consume(db, user, MARCH)


class TestConcurrentConsume:
    """Parallel requests from one user can never exceed the plan limit."""

    def test_limit_holds_under_concurrency(self, tmp_path):
        engine = create_engine(
            f"sqlite:///{tmp_path / 'usage.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        Base.metadata.create_all(bind=engine)
        Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

        with Session() as session:
            user_id = crud_user_auth.create(session, email="racer@example.com", plan=Plan.starter).id

        gate = UsageGate(Settings())
        workers = 8
        barrier = threading.Barrier(workers)
        results = []
        errors = []
        lock = threading.Lock()

        def worker():
            with Session() as session:
                user = crud_user_auth.get(session, id=user_id)
                barrier.wait()
                try:
                    consumed = gate.try_consume(session, user, MARCH)
                except Exception as exc:  # surfaced through the assertion below
                    with lock:
                        errors.append(exc)
                    return
                with lock:
                    results.append(consumed)

        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert results.count(True) == 3
        assert results.count(False) == workers - 3

        with Session() as session:
            user = crud_user_auth.get(session, id=user_id)
            assert gate.usage(session, user, MARCH).used == 3

        engine.dispose()
