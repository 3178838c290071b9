"""
Data models for the health metrics engine.

Design Principles:
- Every physiological field is optional; "no data" stays None end to end
- Results are immutable snapshots, recomputed from scratch on every call
- The metric set is closed: fifteen concrete result types sharing one base
"""

from dataclasses import dataclass, field, fields
import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple

from .composite import compute_main_score


@dataclass(frozen=True)
class HealthRecord:
    """One calendar day of raw health samples."""
    date: Optional[datetime.date] = None
    steps: Optional[float] = None
    active_energy: Optional[float] = None          # kcal
    exercise_minutes: Optional[float] = None
    stand_hours: Optional[float] = None
    heart_rate_variability: Optional[float] = None  # ms
    resting_heart_rate: Optional[float] = None      # bpm
    vo2_max: Optional[float] = None
    sleep_hours: Optional[float] = None
    sleep_deep_hours: Optional[float] = None
    sleep_rem_hours: Optional[float] = None


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class DataReliability(str, Enum):
    """How much data backed a computed value, independent of its magnitude."""
    INSUFFICIENT = "insufficient"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def confidence_score(self) -> float:
        return _CONFIDENCE_SCORES[self]


_CONFIDENCE_SCORES = {
    DataReliability.INSUFFICIENT: 0.0,
    DataReliability.LOW: 0.5,
    DataReliability.MEDIUM: 0.75,
    DataReliability.HIGH: 1.0,
}


class MetricTrend(str, Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class MetricCategory(str, Enum):
    RECOVERY = "recovery"
    SLEEP = "sleep"
    STRESS = "stress"
    LOAD = "load"
    PERFORMANCE = "performance"
    HABIT = "habit"


class RangeLevel(str, Enum):
    """Five 20-point bands over a score scale."""
    VERY_LOW = "very_low"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"

    @classmethod
    def from_score(cls, score: float, lower: float = 0.0, upper: float = 100.0) -> "RangeLevel":
        normalized = (score - lower) / (upper - lower) * 100
        if normalized < 20:
            return cls.VERY_LOW
        if normalized < 40:
            return cls.LOW
        if normalized < 60:
            return cls.MEDIUM
        if normalized < 80:
            return cls.HIGH
        return cls.VERY_HIGH


class LoadZone(str, Enum):
    """Acute:chronic workload ratio zones."""
    DETRAINING = "detraining"       # < 0.8
    OPTIMAL = "optimal"             # 0.8 - 1.3
    OVERREACHING = "overreaching"   # 1.3 - 1.5
    DANGER = "danger"               # >= 1.5

    @classmethod
    def from_ratio(cls, ratio: float) -> "LoadZone":
        if ratio < 0.8:
            return cls.DETRAINING
        if ratio < 1.3:
            return cls.OPTIMAL
        if ratio < 1.5:
            return cls.OVERREACHING
        return cls.DANGER


class WorkoutReadinessLevel(str, Enum):
    SKIP = "skip"
    LIGHT = "light"
    MODERATE = "moderate"
    FULL = "full"
    PUSH = "push"

    @classmethod
    def from_score(cls, score: float) -> "WorkoutReadinessLevel":
        if score < 20:
            return cls.SKIP
        if score < 40:
            return cls.LIGHT
        if score < 60:
            return cls.MODERATE
        if score < 80:
            return cls.FULL
        return cls.PUSH


# ---------------------------------------------------------------------------
# Metric results
# ---------------------------------------------------------------------------

def _serialize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, tuple):
        return [_serialize(v) for v in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


@dataclass(frozen=True)
class MetricResult:
    """
    Shared shape of every computed metric.

    value is None when the metric cannot be computed; consumers must show
    an explicit unknown rather than 0.
    """
    metric_id: ClassVar[str] = ""
    category: ClassVar[MetricCategory]

    value: Optional[float]
    reliability: DataReliability
    trend: Optional[MetricTrend] = None

    @property
    def has_value(self) -> bool:
        return self.value is not None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.metric_id,
            "category": self.category.value,
        }
        for f in fields(self):
            data[f.name] = _serialize(getattr(self, f.name))
        return data


class _ScoredMetric:
    """Mixin for metrics on a 0-100 scale."""

    @property
    def level(self) -> Optional[RangeLevel]:
        if self.value is None:
            return None
        return RangeLevel.from_score(self.value)


@dataclass(frozen=True)
class NervousSystemBalance(_ScoredMetric, MetricResult):
    metric_id: ClassVar[str] = "nervous_system_balance"
    category: ClassVar[MetricCategory] = MetricCategory.RECOVERY

    hrv_component: Optional[float] = None
    rhr_component: Optional[float] = None


@dataclass(frozen=True)
class RecoveryReadiness(_ScoredMetric, MetricResult):
    metric_id: ClassVar[str] = "recovery_readiness"
    category: ClassVar[MetricCategory] = MetricCategory.RECOVERY

    hrv_score: Optional[float] = None
    rhr_score: Optional[float] = None
    sleep_score: Optional[float] = None


@dataclass(frozen=True)
class RecoveryDebt(MetricResult):
    """Average daily recovery balance, -50 (deficit) to +50 (surplus)."""
    metric_id: ClassVar[str] = "recovery_debt"
    category: ClassVar[MetricCategory] = MetricCategory.RECOVERY

    valid_days: int = 0

    @property
    def is_in_surplus(self) -> bool:
        return self.value is not None and self.value > 0


@dataclass(frozen=True)
class StressLoadIndex(_ScoredMetric, MetricResult):
    """Higher value means more physiological stress."""
    metric_id: ClassVar[str] = "stress_load_index"
    category: ClassVar[MetricCategory] = MetricCategory.STRESS

    hrv_depression: Optional[float] = None
    rhr_elevation: Optional[float] = None
    sleep_deficit: Optional[float] = None


@dataclass(frozen=True)
class MorningFreshness(_ScoredMetric, MetricResult):
    metric_id: ClassVar[str] = "morning_freshness"
    category: ClassVar[MetricCategory] = MetricCategory.RECOVERY

    sleep_score: Optional[float] = None
    rhr_delta_score: Optional[float] = None
    hrv_ratio_score: Optional[float] = None


@dataclass(frozen=True)
class SleepQuality(_ScoredMetric, MetricResult):
    metric_id: ClassVar[str] = "sleep_quality"
    category: ClassVar[MetricCategory] = MetricCategory.SLEEP

    duration_hours: Optional[float] = None
    deep_percent: Optional[float] = None
    rem_percent: Optional[float] = None
    duration_score: Optional[float] = None       # out of 50
    consistency_score: Optional[float] = None    # out of 30
    disturbance_score: Optional[float] = None    # out of 20


@dataclass(frozen=True)
class SleepConsistency(_ScoredMetric, MetricResult):
    metric_id: ClassVar[str] = "sleep_consistency"
    category: ClassVar[MetricCategory] = MetricCategory.HABIT

    duration_std_dev_minutes: Optional[float] = None
    sample_count: int = 0


@dataclass(frozen=True)
class DailySleepEntry:
    """One bar of the weekly sleep chart."""
    date: Optional[datetime.date]
    hours: Optional[float]
    day_label: Optional[str]  # Mon, Tue, ...

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": _serialize(self.date),
            "hours": self.hours,
            "day_label": self.day_label,
        }


@dataclass(frozen=True)
class SleepHighlight(MetricResult):
    """value is the average nightly sleep in hours."""
    metric_id: ClassVar[str] = "sleep_highlight"
    category: ClassVar[MetricCategory] = MetricCategory.SLEEP

    daily_entries: Tuple[DailySleepEntry, ...] = ()
    target_hours: float = 7.5
    debt_hours: Optional[float] = None

    @property
    def is_below_target(self) -> bool:
        return self.value is not None and self.value < self.target_hours


@dataclass(frozen=True)
class TrainingStrain(MetricResult):
    """Strain on a 0-10 scale."""
    metric_id: ClassVar[str] = "training_strain"
    category: ClassVar[MetricCategory] = MetricCategory.LOAD

    @property
    def level(self) -> Optional[RangeLevel]:
        if self.value is None:
            return None
        return RangeLevel.from_score(self.value, upper=10.0)


@dataclass(frozen=True)
class LoadBalance(_ScoredMetric, MetricResult):
    metric_id: ClassVar[str] = "load_balance"
    category: ClassVar[MetricCategory] = MetricCategory.LOAD

    acwr: Optional[float] = None
    acute_load: Optional[float] = None
    chronic_load: Optional[float] = None

    @property
    def zone(self) -> Optional[LoadZone]:
        if self.acwr is None:
            return None
        return LoadZone.from_ratio(self.acwr)


@dataclass(frozen=True)
class EnergyForecast(_ScoredMetric, MetricResult):
    metric_id: ClassVar[str] = "energy_forecast"
    category: ClassVar[MetricCategory] = MetricCategory.PERFORMANCE

    readiness_contribution: Optional[float] = None
    sleep_score: Optional[float] = None
    hrv_score: Optional[float] = None
    activity_adjustment: Optional[float] = None


@dataclass(frozen=True)
class WorkoutReadiness(_ScoredMetric, MetricResult):
    metric_id: ClassVar[str] = "workout_readiness"
    category: ClassVar[MetricCategory] = MetricCategory.PERFORMANCE

    recovery_component: Optional[float] = None
    sleep_component: Optional[float] = None
    autonomic_component: Optional[float] = None

    @property
    def readiness_level(self) -> Optional[WorkoutReadinessLevel]:
        if self.value is None:
            return None
        return WorkoutReadinessLevel.from_score(self.value)


@dataclass(frozen=True)
class ActivityScore(_ScoredMetric, MetricResult):
    metric_id: ClassVar[str] = "activity_score"
    category: ClassVar[MetricCategory] = MetricCategory.HABIT

    steps_ratio: Optional[float] = None
    consistency_score: Optional[float] = None
    baseline_steps: Optional[float] = None


@dataclass(frozen=True)
class DailyGoals(MetricResult):
    """value is average goal completion in percent."""
    metric_id: ClassVar[str] = "daily_goals"
    category: ClassVar[MetricCategory] = MetricCategory.HABIT

    move_percent: Optional[float] = None
    exercise_percent: Optional[float] = None
    stand_percent: Optional[float] = None


@dataclass(frozen=True)
class CardioFitnessTrend(MetricResult):
    """value is the percent change of recent VO2max against its baseline."""
    metric_id: ClassVar[str] = "cardio_fitness_trend"
    category: ClassVar[MetricCategory] = MetricCategory.PERFORMANCE

    vo2max_recent: Optional[float] = None
    vo2max_baseline: Optional[float] = None


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DailyMetricsBundle:
    """The fifteen metrics computed for one input set."""

    # Recovery domain
    nervous_system_balance: NervousSystemBalance
    recovery_readiness: RecoveryReadiness
    recovery_debt: RecoveryDebt
    stress_load_index: StressLoadIndex
    morning_freshness: MorningFreshness

    # Sleep domain
    sleep_quality: SleepQuality
    sleep_consistency: SleepConsistency
    sleep_highlight: SleepHighlight

    # Load / performance domain
    training_strain: TrainingStrain
    load_balance: LoadBalance
    energy_forecast: EnergyForecast
    workout_readiness: WorkoutReadiness

    # Activity / habit domain
    activity_score: ActivityScore
    daily_goals: DailyGoals
    cardio_fitness_trend: CardioFitnessTrend

    @property
    def main_score(self) -> Optional[float]:
        """Composite 0-100 score, None below the minimum-evidence gate."""
        return compute_main_score(self)

    @property
    def all_metrics(self) -> Tuple[MetricResult, ...]:
        return tuple(getattr(self, f.name) for f in fields(self))

    def metric(self, metric_id: str) -> MetricResult:
        for result in self.all_metrics:
            if result.metric_id == metric_id:
                return result
        raise KeyError(f"Unknown metric id: {metric_id}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "main_score": self.main_score,
            "metrics": {m.metric_id: m.to_dict() for m in self.all_metrics},
        }


@dataclass(frozen=True)
class StarMetrics:
    """Fixed highlight projection of a bundle."""
    nervous_system_balance: NervousSystemBalance
    recovery_debt: RecoveryDebt
    energy_forecast: EnergyForecast
    workout_readiness: WorkoutReadiness
    consistency_score: Optional[float] = None  # monthly, supplied by caller

    @property
    def all_metrics(self) -> Tuple[MetricResult, ...]:
        return (
            self.nervous_system_balance,
            self.recovery_debt,
            self.energy_forecast,
            self.workout_readiness,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metrics": {m.metric_id: m.to_dict() for m in self.all_metrics},
            "consistency_score": self.consistency_score,
        }


@dataclass(frozen=True)
class DailyScoreEntry:
    """One day of the score history chart."""
    date: Optional[datetime.date]
    day_label: Optional[str]
    main_score: Optional[float]
    metric_values: Dict[str, Optional[float]] = field(default_factory=dict)

    def value_for(self, metric_id: str) -> Optional[float]:
        if metric_id in ("main_score", "health_score"):
            return self.main_score
        if metric_id == "sleep_highlight":
            return self.metric_values.get("sleep_quality")
        return self.metric_values.get(metric_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": _serialize(self.date),
            "day_label": self.day_label,
            "main_score": self.main_score,
            "metrics": dict(self.metric_values),
        }
