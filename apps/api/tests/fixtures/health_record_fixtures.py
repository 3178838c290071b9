"""Deterministic HealthRecord builders for health metrics tests.

All histories are ordered oldest -> newest and end on END_DATE.
"""
from dataclasses import replace
from datetime import date, timedelta
from typing import List

from services.health_metrics import HealthRecord

END_DATE = date(2026, 3, 28)  # a Saturday

STEADY_DAY = dict(
    steps=9000.0,
    active_energy=500.0,
    exercise_minutes=30.0,
    stand_hours=12.0,
    heart_rate_variability=50.0,
    resting_heart_rate=60.0,
    vo2_max=40.0,
    sleep_hours=7.5,
)


def make_record(day: date = END_DATE, **overrides) -> HealthRecord:
    """A steady day; pass overrides (None for absent) to change fields."""
    values = dict(STEADY_DAY)
    values.update(overrides)
    return HealthRecord(date=day, **values)


def make_empty_record(day: date = END_DATE, **values) -> HealthRecord:
    """A day with only the given fields recorded."""
    return HealthRecord(date=day, **values)


def dates_ending(end: date, days: int) -> List[date]:
    return [end - timedelta(days=days - 1 - i) for i in range(days)]


def make_steady_history(days: int = 28, end: date = END_DATE, **overrides) -> List[HealthRecord]:
    return [make_record(d, **overrides) for d in dates_ending(end, days)]


def make_history_from(values: List[dict], end: date = END_DATE) -> List[HealthRecord]:
    """One sparse record per dict, oldest first."""
    return [
        make_empty_record(d, **v)
        for d, v in zip(dates_ending(end, len(values)), values)
    ]


def with_fields(records: List[HealthRecord], **overrides) -> List[HealthRecord]:
    return [replace(r, **overrides) for r in records]
