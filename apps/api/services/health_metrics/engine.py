"""
Daily Metrics Engine

Orchestrates one bundle computation:

    history ──> Sample Aggregator ──> windows
                                        ↓
                       fifteen Metric Calculators
                                        ↓
                  DailyMetricsBundle (+ main score, star projection)

Pure and synchronous: no I/O and no state between calls, so callers may
fan out across days or users freely. Caching is the caller's concern.
"""

import logging
from typing import List, Optional, Sequence

from . import calculators
from .aggregator import InvalidWindowError, TimePeriod, build_windows, slice_window
from .composite import select_star_metrics
from .models import DailyMetricsBundle, DailyScoreEntry, HealthRecord, StarMetrics

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_DAYS = 7


def calculate_daily_metrics(
    today: Optional[HealthRecord],
    history: Sequence[HealthRecord],
    period=TimePeriod.DAY,
) -> DailyMetricsBundle:
    """
    Compute all fifteen metrics for one day, week or month.

    Args:
        today: The day being scored (used for the day period)
        history: Per-day records ordered oldest -> newest, up to 90 days
        period: day, week or month; selects window sizes and whether the
            period record is `today` or an aggregate of recent days

    Returns:
        DailyMetricsBundle; its main_score is None below three contributing metrics
    """
    windows = build_windows(history, period, today)
    current = windows.period_record

    nervous_system = calculators.calculate_nervous_system_balance(windows.primary, windows.tertiary)
    recovery_readiness = calculators.calculate_recovery_readiness(current, windows.primary)
    sleep_quality = calculators.calculate_sleep_quality(current)

    bundle = DailyMetricsBundle(
        nervous_system_balance=nervous_system,
        recovery_readiness=recovery_readiness,
        recovery_debt=calculators.calculate_recovery_debt(windows.primary),
        stress_load_index=calculators.calculate_stress_load_index(
            current, windows.primary, windows.tertiary
        ),
        morning_freshness=calculators.calculate_morning_freshness(current, windows.tertiary),
        sleep_quality=sleep_quality,
        sleep_consistency=calculators.calculate_sleep_consistency(windows.secondary),
        sleep_highlight=calculators.calculate_sleep_highlight(windows.primary),
        training_strain=calculators.calculate_training_strain(current),
        load_balance=calculators.calculate_load_balance(windows.primary, windows.tertiary),
        energy_forecast=calculators.calculate_energy_forecast(current, recovery_readiness),
        workout_readiness=calculators.calculate_workout_readiness(
            nervous_system, sleep_quality, recovery_readiness
        ),
        activity_score=calculators.calculate_activity_score(current, windows.baseline),
        daily_goals=calculators.calculate_daily_goals(current),
        cardio_fitness_trend=calculators.calculate_cardio_fitness_trend(
            windows.primary, windows.tertiary
        ),
    )

    computed = sum(1 for m in bundle.all_metrics if m.value is not None)
    logger.info(
        f"Health metrics ({windows.period.value}): {computed}/15 metrics computed "
        f"from {len(history)} records, main_score={bundle.main_score}",
        extra={
            "extra_fields": {
                "period": windows.period.value,
                "metrics_computed": computed,
                "record_count": len(history),
            }
        }
    )
    if logger.isEnabledFor(logging.DEBUG):
        for metric in bundle.all_metrics:
            logger.debug(
                f"  {metric.metric_id}: value={metric.value} "
                f"reliability={metric.reliability.value}"
            )

    return bundle


def calculate_star_metrics(
    today: Optional[HealthRecord],
    history: Sequence[HealthRecord],
    period=TimePeriod.DAY,
    monthly_consistency: Optional[float] = None,
) -> StarMetrics:
    bundle = calculate_daily_metrics(today, history, period)
    return select_star_metrics(bundle, monthly_consistency)


def calculate_score_history(
    history: Sequence[HealthRecord],
    days: int = DEFAULT_HISTORY_DAYS,
) -> List[DailyScoreEntry]:
    """
    Per-day scores for the last `days` records, oldest first.

    Each day is scored as its own "today" against the history up to and
    including that day, exactly as it would have been scored live.
    """
    if days < 0:
        raise InvalidWindowError(f"History length must be non-negative, got {days}")

    records = tuple(history)
    recent = slice_window(records, days)
    start = len(records) - len(recent)

    entries = []
    for offset, day in enumerate(recent):
        visible = records[: start + offset + 1]
        bundle = calculate_daily_metrics(day, visible, TimePeriod.DAY)
        entries.append(DailyScoreEntry(
            date=day.date,
            day_label=day.date.strftime("%a") if day.date is not None else None,
            main_score=bundle.main_score,
            metric_values={m.metric_id: m.value for m in bundle.all_metrics},
        ))

    return entries
