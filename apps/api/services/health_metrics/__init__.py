"""
Health Metrics Module

Turns raw per-day health samples into fifteen normalized, weighted,
reliability-annotated indicators and a composite daily score.

This module provides:
1. Sample aggregation into rolling windows and period records
2. Statistics primitives (normalize, average, stdDev, 3-point interpolation)
3. Reliability grading and trend classification
4. Fifteen metric calculators
5. Composite main score and the star-metric projection

Design Principles:
- Missing data is None end to end, never 0
- Too little evidence yields None plus an explicit reliability grade
- Pure functions, recomputed from scratch on every call
"""

from .aggregator import (
    InvalidWindowError,
    MetricWindows,
    TimePeriod,
    aggregate_period,
    build_windows,
    slice_window,
    window_sizes,
)
from .composite import MAIN_SCORE_WEIGHTS, compute_main_score, select_star_metrics
from .engine import calculate_daily_metrics, calculate_score_history, calculate_star_metrics
from .models import (
    DailyMetricsBundle,
    DailyScoreEntry,
    DataReliability,
    HealthRecord,
    LoadZone,
    MetricCategory,
    MetricResult,
    MetricTrend,
    RangeLevel,
    StarMetrics,
    WorkoutReadinessLevel,
)

__all__ = [
    'InvalidWindowError',
    'MetricWindows',
    'TimePeriod',
    'aggregate_period',
    'build_windows',
    'slice_window',
    'window_sizes',
    'MAIN_SCORE_WEIGHTS',
    'compute_main_score',
    'select_star_metrics',
    'calculate_daily_metrics',
    'calculate_score_history',
    'calculate_star_metrics',
    'DailyMetricsBundle',
    'DailyScoreEntry',
    'DataReliability',
    'HealthRecord',
    'LoadZone',
    'MetricCategory',
    'MetricResult',
    'MetricTrend',
    'RangeLevel',
    'StarMetrics',
    'WorkoutReadinessLevel',
]
