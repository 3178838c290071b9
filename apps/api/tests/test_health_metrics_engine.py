"""
End-to-end tests for the Daily Metrics Engine

Full bundle computation, the composite main score and its evidence gate,
star metrics, score history and range invariants over noisy input.
"""

import itertools
import logging
import random
from dataclasses import replace
from datetime import timedelta

import pytest

from services.health_metrics import (
    MAIN_SCORE_WEIGHTS,
    DataReliability,
    HealthRecord,
    InvalidWindowError,
    MetricTrend,
    TimePeriod,
    calculate_daily_metrics,
    calculate_score_history,
    calculate_star_metrics,
    compute_main_score,
    select_star_metrics,
)
from fixtures.health_record_fixtures import (
    END_DATE,
    make_empty_record,
    make_history_from,
    make_record,
    make_steady_history,
)


def _expected_steady_scores():
    """Formula oracle for 28 identical steady days scored with the same day as today."""
    sleep_readiness = 75 + (7.5 - 7.0) / 1.5 * 25
    sleep_energy = 70 + (7.5 - 7.0) / 1.5 * 25
    recovery_readiness = (70 * 0.35 + 70 * 0.25 + sleep_readiness * 0.30) / 0.90
    nervous_system = 80 * 0.65 + 70 * 0.35
    sleep_quality = 47.5 + 22 + 17
    energy = recovery_readiness * 0.5 + sleep_energy * 0.3 + 70 * 0.2 + 3
    activity = 100.0
    load_balance = 95.0
    main = (
        recovery_readiness * 0.25
        + sleep_quality * 0.20
        + nervous_system * 0.20
        + energy * 0.15
        + activity * 0.10
        + load_balance * 0.10
    )
    return {
        "recovery_readiness": recovery_readiness,
        "nervous_system_balance": nervous_system,
        "sleep_quality": sleep_quality,
        "energy_forecast": energy,
        "activity_score": activity,
        "load_balance": load_balance,
        "main_score": main,
    }


@pytest.fixture
def steady_bundle(steady_history, steady_today):
    return calculate_daily_metrics(steady_today, steady_history, TimePeriod.DAY)


class TestSteadyScenario:
    """28 identical days: HRV 50, RHR 60, 7.5h sleep, 9000 steps, 30 min exercise."""

    def test_weighted_inputs_match_formula(self, steady_bundle):
        expected = _expected_steady_scores()
        for metric_id in MAIN_SCORE_WEIGHTS:
            assert steady_bundle.metric(metric_id).value == pytest.approx(expected[metric_id])

    def test_main_score(self, steady_bundle):
        expected = _expected_steady_scores()["main_score"]
        assert steady_bundle.main_score == pytest.approx(expected)
        assert 80 < steady_bundle.main_score < 85

    def test_nervous_system_balance(self, steady_bundle):
        nsb = steady_bundle.nervous_system_balance
        assert nsb.hrv_component == pytest.approx(80)
        assert nsb.reliability == DataReliability.MEDIUM
        assert nsb.trend == MetricTrend.STABLE

    def test_sleep_quality_in_the_80s(self, steady_bundle):
        assert 80 <= steady_bundle.sleep_quality.value < 90

    def test_daily_goals_complete(self, steady_bundle):
        assert steady_bundle.daily_goals.value == pytest.approx(100)

    def test_secondary_metrics(self, steady_bundle):
        assert steady_bundle.recovery_debt.value == pytest.approx(41.25)
        assert steady_bundle.stress_load_index.value == pytest.approx(0)
        assert steady_bundle.sleep_consistency.value == pytest.approx(90)
        assert steady_bundle.sleep_highlight.value == pytest.approx(7.5)
        assert steady_bundle.training_strain.value == pytest.approx(3.0)
        assert steady_bundle.cardio_fitness_trend.value == pytest.approx(0)
        assert steady_bundle.workout_readiness.value == pytest.approx(
            (steady_bundle.recovery_readiness.value
             + steady_bundle.sleep_quality.value
             + steady_bundle.nervous_system_balance.value) / 3
        )

    def test_all_fifteen_metrics(self, steady_bundle):
        ids = [m.metric_id for m in steady_bundle.all_metrics]
        assert len(ids) == 15
        assert len(set(ids)) == 15
        assert all(m.value is not None for m in steady_bundle.all_metrics)

    def test_unknown_metric_id(self, steady_bundle):
        with pytest.raises(KeyError):
            steady_bundle.metric("vo2_peak")

    def test_to_dict(self, steady_bundle):
        data = steady_bundle.to_dict()
        assert data["main_score"] == pytest.approx(steady_bundle.main_score)
        sleep = data["metrics"]["sleep_highlight"]
        assert sleep["category"] == "sleep"
        assert sleep["reliability"] == "high"
        assert len(sleep["daily_entries"]) == 7
        assert sleep["daily_entries"][-1]["date"] == END_DATE.isoformat()
        assert data["metrics"]["nervous_system_balance"]["trend"] == "stable"

    def test_deterministic(self, steady_history, steady_today, steady_bundle):
        again = calculate_daily_metrics(steady_today, steady_history)
        assert again == steady_bundle


class TestSparseScenarios:

    def test_two_days_of_data(self):
        history = make_steady_history(days=2)
        bundle = calculate_daily_metrics(history[-1], history)
        assert bundle.sleep_consistency.value is None
        assert bundle.sleep_consistency.reliability == DataReliability.INSUFFICIENT
        assert bundle.load_balance.reliability == DataReliability.INSUFFICIENT

    def test_today_without_sleep(self, steady_history):
        today = make_empty_record(END_DATE + timedelta(days=1), sleep_hours=0.0)
        bundle = calculate_daily_metrics(today, steady_history)
        assert bundle.sleep_quality.value is None
        assert bundle.recovery_readiness.value is None
        assert bundle.energy_forecast.value is None
        assert bundle.energy_forecast.reliability == DataReliability.LOW

    def test_energy_uses_defaults_when_readiness_present(self, steady_history):
        today = make_empty_record(END_DATE + timedelta(days=1), resting_heart_rate=60.0)
        bundle = calculate_daily_metrics(today, steady_history)
        assert bundle.recovery_readiness.value == pytest.approx(70)
        assert bundle.energy_forecast.sleep_score == 60
        assert bundle.energy_forecast.hrv_score == 60
        assert bundle.energy_forecast.value == pytest.approx(35 + 18 + 12)

    def test_recovery_debt_skips_invalid_nights(self):
        history = make_history_from(
            [{"sleep_hours": 0.0}] * 4
            + [{"sleep_hours": 8.0, "exercise_minutes": 0.0}] * 3
        )
        bundle = calculate_daily_metrics(history[-1], history)
        assert bundle.recovery_debt.valid_days == 3
        assert bundle.recovery_debt.reliability == DataReliability.MEDIUM

    def test_nothing_at_all(self):
        bundle = calculate_daily_metrics(None, [])
        assert bundle.main_score is None
        assert bundle.training_strain.value == 0.0
        computed = [m.metric_id for m in bundle.all_metrics if m.value is not None]
        assert computed == ["training_strain"]

    def test_unknown_period(self, steady_history):
        with pytest.raises(InvalidWindowError):
            calculate_daily_metrics(None, steady_history, "fortnight")


class TestPeriods:

    def test_week_scores_aggregate(self, steady_history):
        bundle = calculate_daily_metrics(None, steady_history, TimePeriod.WEEK)
        # 7 x 30 minutes folded into one record
        assert bundle.training_strain.value == pytest.approx(10.0)
        assert bundle.energy_forecast.activity_adjustment == -5
        assert bundle.daily_goals.value == pytest.approx(100)
        assert bundle.main_score is not None

    def test_month_ignores_today(self):
        history = make_steady_history(days=90)
        today = make_record(END_DATE, steps=1.0)
        bundle = calculate_daily_metrics(today, history, "month")
        assert bundle.activity_score.steps_ratio == pytest.approx(30.0)
        assert bundle.sleep_highlight.value == pytest.approx(7.5)
        assert len(bundle.sleep_highlight.daily_entries) == 30


class TestCompositeGate:
    """The main score needs at least three of its six inputs."""

    @staticmethod
    def _keep_only(bundle, keep):
        changes = {
            metric_id: replace(getattr(bundle, metric_id), value=None)
            for metric_id in MAIN_SCORE_WEIGHTS
            if metric_id not in keep
        }
        return replace(bundle, **changes)

    @pytest.mark.parametrize("size", range(0, 7))
    def test_every_combination(self, steady_bundle, size):
        for keep in itertools.combinations(MAIN_SCORE_WEIGHTS, size):
            bundle = self._keep_only(steady_bundle, keep)
            score = compute_main_score(bundle)
            if size < 3:
                assert score is None, keep
            else:
                assert score is not None, keep
                assert 0 <= score <= 100

    def test_renormalized_over_present_inputs(self, steady_bundle):
        keep = ("recovery_readiness", "activity_score", "load_balance")
        bundle = self._keep_only(steady_bundle, keep)
        rr = steady_bundle.recovery_readiness.value
        expected = (rr * 0.25 + 100 * 0.10 + 95 * 0.10) / 0.45
        assert bundle.main_score == pytest.approx(expected)

    def test_weights_sum_to_one(self):
        assert sum(MAIN_SCORE_WEIGHTS.values()) == pytest.approx(1.0)


class TestStarMetrics:

    def test_fixed_projection(self, steady_bundle):
        star = select_star_metrics(steady_bundle, monthly_consistency=82.0)
        assert star.nervous_system_balance is steady_bundle.nervous_system_balance
        assert star.recovery_debt is steady_bundle.recovery_debt
        assert star.energy_forecast is steady_bundle.energy_forecast
        assert star.workout_readiness is steady_bundle.workout_readiness
        assert star.consistency_score == 82.0

    def test_from_history(self, steady_history, steady_today):
        star = calculate_star_metrics(steady_today, steady_history)
        assert star.consistency_score is None
        assert [m.metric_id for m in star.all_metrics] == [
            "nervous_system_balance",
            "recovery_debt",
            "energy_forecast",
            "workout_readiness",
        ]
        assert set(star.to_dict()["metrics"]) == {m.metric_id for m in star.all_metrics}


class TestScoreHistory:

    def test_last_seven_days(self):
        history = make_steady_history(days=10)
        entries = calculate_score_history(history, days=7)
        assert len(entries) == 7
        assert [e.date for e in entries] == [r.date for r in history[-7:]]
        assert entries[-1].day_label == "Sat"
        assert all(e.main_score is not None for e in entries)

    def test_each_day_scored_as_of_that_day(self):
        history = make_steady_history(days=21) + [
            make_record(END_DATE + timedelta(days=1), sleep_hours=5.0),
        ]
        entries = calculate_score_history(history, days=2)
        live = calculate_daily_metrics(history[-2], history[:-1])
        assert entries[0].main_score == pytest.approx(live.main_score)
        assert entries[1].value_for("sleep_quality") < entries[0].value_for("sleep_quality")

    def test_value_lookup_aliases(self):
        entries = calculate_score_history(make_steady_history(days=7), days=1)
        entry = entries[0]
        assert entry.value_for("health_score") == entry.main_score
        assert entry.value_for("main_score") == entry.main_score
        assert entry.value_for("sleep_highlight") == entry.metric_values["sleep_quality"]
        assert entry.value_for("unknown") is None
        assert entry.to_dict()["date"] == END_DATE.isoformat()

    def test_short_history(self):
        assert len(calculate_score_history(make_steady_history(days=3), days=7)) == 3

    def test_zero_days(self):
        assert calculate_score_history(make_steady_history(days=3), days=0) == []

    def test_negative_days_rejected(self):
        with pytest.raises(InvalidWindowError):
            calculate_score_history(make_steady_history(days=3), days=-1)


class TestRangeInvariants:
    """Every present value stays inside its documented range on noisy input."""

    RANGES = {
        "recovery_debt": (-50, 50),
        "training_strain": (0, 10),
        "sleep_highlight": (0, 24),
    }
    UNBOUNDED = {"cardio_fitness_trend"}

    @staticmethod
    def _noisy_history(seed, days=90):
        rng = random.Random(seed)

        def sample(low, high):
            roll = rng.random()
            if roll < 0.1:
                return None
            if roll < 0.15:
                return 0.0
            if roll < 0.17:
                return float("nan")
            return rng.uniform(low, high)

        return [
            HealthRecord(
                date=END_DATE - timedelta(days=days - 1 - i),
                steps=sample(0, 30000),
                active_energy=sample(0, 2000),
                exercise_minutes=sample(0, 240),
                stand_hours=sample(0, 18),
                heart_rate_variability=sample(10, 150),
                resting_heart_rate=sample(35, 100),
                vo2_max=sample(20, 70),
                sleep_hours=sample(2, 12),
                sleep_deep_hours=sample(0, 3),
                sleep_rem_hours=sample(0, 3),
            )
            for i in range(days)
        ]

    @pytest.mark.parametrize("seed", range(10))
    @pytest.mark.parametrize("period", list(TimePeriod))
    def test_values_in_range(self, seed, period):
        history = self._noisy_history(seed)
        bundle = calculate_daily_metrics(history[-1], history, period)
        for metric in bundle.all_metrics:
            if metric.value is None or metric.metric_id in self.UNBOUNDED:
                continue
            low, high = self.RANGES.get(metric.metric_id, (0, 100))
            assert low <= metric.value <= high, metric.metric_id
        if bundle.main_score is not None:
            assert 0 <= bundle.main_score <= 100


class TestLogging:

    def test_summary_logged(self, steady_history, steady_today, caplog):
        with caplog.at_level(logging.INFO, logger="services.health_metrics.engine"):
            calculate_daily_metrics(steady_today, steady_history)
        assert "15/15 metrics computed" in caplog.text
