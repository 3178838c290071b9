"""
Sample Aggregator

Slices an ordered (oldest -> newest) history into the rolling windows each
period reads, and collapses week/month periods into a single period record:
- Cumulative fields (steps, active energy, exercise minutes) are summed
- Rate/level fields (sleep, HRV, RHR, VO2max, stand hours) are averaged
- A field with no valid samples stays None, never 0
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Sequence, Tuple

from .models import HealthRecord
from .stats import average, valid_values


class InvalidWindowError(ValueError):
    """Raised for window requests that violate the engine's input contract."""


class TimePeriod(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


# (primary, secondary, tertiary) window sizes in days
WINDOW_SIZES: Dict[TimePeriod, Tuple[int, int, int]] = {
    TimePeriod.DAY: (7, 14, 28),
    TimePeriod.WEEK: (7, 28, 56),
    TimePeriod.MONTH: (30, 60, 90),
}

# Records folded into the period record
PERIOD_AGGREGATE_DAYS: Dict[TimePeriod, int] = {
    TimePeriod.WEEK: 7,
    TimePeriod.MONTH: 30,
}

# Longest lookback any calculator reads (activity baseline)
BASELINE_WINDOW_DAYS = 90

SUMMED_FIELDS = ("steps", "active_energy", "exercise_minutes")
AVERAGED_FIELDS = (
    "sleep_hours",
    "sleep_deep_hours",
    "sleep_rem_hours",
    "heart_rate_variability",
    "resting_heart_rate",
    "vo2_max",
    "stand_hours",
)

Window = Tuple[HealthRecord, ...]


@dataclass(frozen=True)
class MetricWindows:
    """Read-only views over the history, sized for one period."""
    period: TimePeriod
    period_record: HealthRecord
    primary: Window
    secondary: Window
    tertiary: Window
    baseline: Window


def parse_period(period) -> TimePeriod:
    if isinstance(period, TimePeriod):
        return period
    try:
        return TimePeriod(period)
    except ValueError:
        raise InvalidWindowError(f"Unknown period: {period!r}") from None


def window_sizes(period) -> Tuple[int, int, int]:
    return WINDOW_SIZES[parse_period(period)]


def slice_window(history: Sequence[HealthRecord], days: int) -> Window:
    """
    Most recent `days` records, oldest first.

    A history shorter than `days` is returned whole.
    """
    if days < 0:
        raise InvalidWindowError(f"Window size must be non-negative, got {days}")
    if days == 0:
        return ()
    return tuple(history)[-days:]


def aggregate_period(records: Sequence[HealthRecord]) -> HealthRecord:
    """Collapse several days into one period record."""
    if not records:
        return HealthRecord()

    values = {}
    for name in SUMMED_FIELDS:
        samples = valid_values(getattr(r, name) for r in records)
        values[name] = sum(samples) if samples else None
    for name in AVERAGED_FIELDS:
        values[name] = average(valid_values(getattr(r, name) for r in records))

    return HealthRecord(date=records[-1].date, **values)


def build_windows(
    history: Sequence[HealthRecord],
    period=TimePeriod.DAY,
    today: Optional[HealthRecord] = None,
) -> MetricWindows:
    """
    Build every window the calculators read for one period.

    For the day period the period record is `today` (an empty record when
    not supplied); week and month fold their most recent 7 / 30 records.
    """
    period = parse_period(period)
    primary, secondary, tertiary = WINDOW_SIZES[period]

    if period == TimePeriod.DAY:
        period_record = today if today is not None else HealthRecord()
    else:
        period_record = aggregate_period(
            slice_window(history, PERIOD_AGGREGATE_DAYS[period])
        )

    return MetricWindows(
        period=period,
        period_record=period_record,
        primary=slice_window(history, primary),
        secondary=slice_window(history, secondary),
        tertiary=slice_window(history, tertiary),
        baseline=slice_window(history, max(BASELINE_WINDOW_DAYS, tertiary)),
    )
