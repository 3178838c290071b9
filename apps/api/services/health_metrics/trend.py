"""Trend classification of a recent window against its baseline."""

from typing import Optional

from .models import MetricTrend

# Relative change inside +/-5% counts as noise
TREND_DEADZONE = 0.05


def classify_trend(
    recent: Optional[float],
    baseline: Optional[float],
    higher_is_better: bool,
) -> Optional[MetricTrend]:
    if recent is None or baseline is None or baseline <= 0:
        return None

    change = (recent - baseline) / baseline
    if change > TREND_DEADZONE:
        return MetricTrend.IMPROVING if higher_is_better else MetricTrend.DECLINING
    if change < -TREND_DEADZONE:
        return MetricTrend.DECLINING if higher_is_better else MetricTrend.IMPROVING
    return MetricTrend.STABLE
