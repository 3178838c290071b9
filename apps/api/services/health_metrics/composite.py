"""
Composite Scorer

Main score = weighted average of six metrics, re-normalized over the ones
that have a value. Fewer than three contributing metrics yields no score.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import DailyMetricsBundle, StarMetrics

MAIN_SCORE_WEIGHTS = {
    "recovery_readiness": 0.25,
    "sleep_quality": 0.20,
    "nervous_system_balance": 0.20,
    "energy_forecast": 0.15,
    "activity_score": 0.10,
    "load_balance": 0.10,
}

MIN_CONTRIBUTING_METRICS = 3


def compute_main_score(bundle: "DailyMetricsBundle") -> Optional[float]:
    weighted_sum = 0.0
    total_weight = 0.0
    contributing = 0

    for metric_id, weight in MAIN_SCORE_WEIGHTS.items():
        value = getattr(bundle, metric_id).value
        if value is None:
            continue
        weighted_sum += value * weight
        total_weight += weight
        contributing += 1

    if contributing < MIN_CONTRIBUTING_METRICS or total_weight <= 0:
        return None
    return max(0.0, min(100.0, weighted_sum / total_weight))


def select_star_metrics(
    bundle: "DailyMetricsBundle",
    monthly_consistency: Optional[float] = None,
) -> "StarMetrics":
    """Fixed highlight projection; the consistency score comes from the caller."""
    from .models import StarMetrics

    return StarMetrics(
        nervous_system_balance=bundle.nervous_system_balance,
        recovery_debt=bundle.recovery_debt,
        energy_forecast=bundle.energy_forecast,
        workout_readiness=bundle.workout_readiness,
        consistency_score=monthly_consistency,
    )
