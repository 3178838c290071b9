"""
Metric Calculators

Fifteen pure functions, one per metric. Each takes the period record and/or
the windows it needs and returns a typed MetricResult.

Conventions:
- Every raw sample passes through normalize() before use
- Missing components are excluded from weighted combinations and the
  weights are re-normalized over what was used
- Scores are clamped to their documented range after combination, never before
"""

from typing import Optional, Sequence

from .models import (
    ActivityScore,
    CardioFitnessTrend,
    DailyGoals,
    DailySleepEntry,
    DataReliability,
    EnergyForecast,
    HealthRecord,
    LoadBalance,
    MetricTrend,
    MorningFreshness,
    NervousSystemBalance,
    RecoveryDebt,
    RecoveryReadiness,
    SleepConsistency,
    SleepHighlight,
    SleepQuality,
    StressLoadIndex,
    TrainingStrain,
    WorkoutReadiness,
)
from .reliability import grade_reliability
from .stats import (
    average,
    clamp,
    interpolate,
    normalize,
    standard_deviation,
    valid_values,
    weighted_average,
)
from .trend import classify_trend

SLEEP_TARGET_HOURS = 7.5
STEPS_GOAL = 8000
MOVE_GOAL_KCAL = 500.0
EXERCISE_GOAL_MINUTES = 30.0
STAND_GOAL_HOURS = 12.0
MAX_STRAIN = 10.0

# Sleep-quality sub-score defaults and optimal stage bands
SLEEP_CONSISTENCY_DEFAULT = 28.0
SLEEP_CONSISTENCY_MAX = 30.0
SLEEP_DISTURBANCE_DEFAULT = 17.0
DEEP_SLEEP_BAND = (10.0, 25.0)   # percent of total sleep
REM_SLEEP_BAND = (15.0, 30.0)

# Cardio fitness deadzone, in percent
CARDIO_TREND_THRESHOLD = 2.0


def exercise_strain(minutes: Optional[float]) -> float:
    """About 3 strain points per 30 exercise minutes, capped at 10."""
    minutes = normalize(minutes)
    if minutes is None:
        return 0.0
    return min(MAX_STRAIN, minutes / 30.0 * 3.0)


def _window_average(window: Sequence[HealthRecord], field_name: str) -> Optional[float]:
    return average(valid_values(getattr(r, field_name) for r in window))


# ---------------------------------------------------------------------------
# Recovery domain
# ---------------------------------------------------------------------------

def calculate_nervous_system_balance(
    last7: Sequence[HealthRecord],
    last28: Sequence[HealthRecord],
) -> NervousSystemBalance:
    """
    Autonomic balance from recent HRV and RHR against their 28-day baseline.

    HRV 7d/28d ratio: 0.75 -> 30, 1.0 -> 80, 1.2 -> 95
    RHR 28d-7d delta: -5 -> 30, 0 -> 70, +5 -> 95 (a falling RHR is good)
    Combined 65/35, or whichever single component exists.
    """
    hrv7 = _window_average(last7, "heart_rate_variability")
    hrv28 = _window_average(last28, "heart_rate_variability")
    rhr7 = _window_average(last7, "resting_heart_rate")
    rhr28 = _window_average(last28, "resting_heart_rate")

    hrv_component = None
    if hrv7 is not None and hrv28 is not None and hrv28 > 0:
        hrv_component = interpolate(hrv7 / hrv28, (0.75, 30), (1.0, 80), (1.2, 95))

    rhr_component = None
    if rhr7 is not None and rhr28 is not None and rhr28 > 0:
        rhr_component = interpolate(rhr28 - rhr7, (-5, 30), (0, 70), (5, 95))

    score = weighted_average([(hrv_component, 0.65), (rhr_component, 0.35)])

    data_days = sum(
        1 for r in last7
        if normalize(r.heart_rate_variability) is not None
        or normalize(r.resting_heart_rate) is not None
    )

    return NervousSystemBalance(
        value=clamp(score, 0, 100) if score is not None else None,
        reliability=grade_reliability(data_days, minimum=5, good=14),
        trend=classify_trend(hrv7, hrv28, higher_is_better=True),
        hrv_component=hrv_component,
        rhr_component=rhr_component,
    )


def calculate_recovery_readiness(
    today: HealthRecord,
    last7: Sequence[HealthRecord],
) -> RecoveryReadiness:
    """
    Today's HRV and RHR against the 7-day baseline, plus last night's sleep.

    Weights: HRV 35%, RHR 25%, sleep 30%, re-normalized over what exists.
    """
    hrv = normalize(today.heart_rate_variability)
    rhr = normalize(today.resting_heart_rate)
    sleep_hours = normalize(today.sleep_hours)

    hrv_baseline = _window_average(last7, "heart_rate_variability")
    rhr_baseline = _window_average(last7, "resting_heart_rate")

    hrv_score = None
    if hrv is not None and hrv_baseline is not None and hrv_baseline > 0:
        hrv_score = interpolate(hrv / hrv_baseline, (0.7, 20), (1.0, 70), (1.3, 100))

    # Lower RHR than baseline is better
    rhr_score = None
    if rhr is not None and rhr_baseline is not None and rhr_baseline > 0:
        rhr_score = interpolate(rhr / rhr_baseline, (0.85, 100), (1.0, 70), (1.15, 20))

    sleep_score = None
    if sleep_hours is not None:
        sleep_score = interpolate(sleep_hours, (5.0, 30), (7.0, 75), (8.5, 100))

    score = weighted_average([
        (hrv_score, 0.35),
        (rhr_score, 0.25),
        (sleep_score, 0.30),
    ])

    inputs = sum(1 for v in (hrv, rhr, sleep_hours) if v is not None)
    if inputs >= 3:
        reliability = DataReliability.HIGH
    elif inputs == 2:
        reliability = DataReliability.MEDIUM
    else:
        reliability = DataReliability.LOW

    return RecoveryReadiness(
        value=clamp(score, 0, 100) if score is not None else None,
        reliability=reliability,
        hrv_score=hrv_score,
        rhr_score=rhr_score,
        sleep_score=sleep_score,
    )


def calculate_recovery_debt(last7: Sequence[HealthRecord]) -> RecoveryDebt:
    """
    Average daily recovery balance over the last week.

    Each day with sleep scores its readiness from sleep (5h -> 30, 7h -> 65,
    9h -> 90) and pays 10 points per strain point. Days without sleep are
    skipped entirely.
    """
    balances = []
    for day in last7:
        sleep = normalize(day.sleep_hours)
        if sleep is None or sleep <= 0:
            continue
        day_readiness = interpolate(sleep, (5.0, 30), (7.0, 65), (9.0, 90))
        minutes = normalize(day.exercise_minutes) or 0.0
        strain = minutes / 30.0 * 3.0
        balances.append(day_readiness - strain * 10)

    reliability = grade_reliability(len(balances), minimum=3, good=7)
    debt = average(balances)

    return RecoveryDebt(
        value=clamp(debt, -50, 50) if debt is not None else None,
        reliability=reliability,
        valid_days=len(balances),
    )


def calculate_stress_load_index(
    today: HealthRecord,
    last7: Sequence[HealthRecord],
    last28: Sequence[HealthRecord],
) -> StressLoadIndex:
    """
    Physiological stress from HRV depression, RHR elevation and sleep deficit.

    Weights: HRV 40%, RHR 30%, sleep 30%. Higher means more stress.
    """
    hrv_baseline = _window_average(last28, "heart_rate_variability")
    rhr_baseline = _window_average(last28, "resting_heart_rate")

    hrv_depression = None
    today_hrv = normalize(today.heart_rate_variability)
    if today_hrv is not None and hrv_baseline is not None and hrv_baseline > 0:
        hrv_depression = max(0.0, (1 - today_hrv / hrv_baseline) * 100)

    rhr_elevation = None
    today_rhr = normalize(today.resting_heart_rate)
    if today_rhr is not None and rhr_baseline is not None and rhr_baseline > 0:
        rhr_elevation = max(0.0, (today_rhr / rhr_baseline - 1) * 100)

    sleep_deficit = None
    sleep_hours = normalize(today.sleep_hours)
    if sleep_hours is not None:
        sleep_deficit = max(0.0, (SLEEP_TARGET_HOURS - sleep_hours) / SLEEP_TARGET_HOURS * 100)

    score = weighted_average([
        (hrv_depression, 0.4),
        (rhr_elevation, 0.3),
        (sleep_deficit, 0.3),
    ])
    components = sum(1 for c in (hrv_depression, rhr_elevation, sleep_deficit) if c is not None)

    return StressLoadIndex(
        value=clamp(score, 0, 100) if score is not None else None,
        reliability=grade_reliability(components, minimum=1, good=3),
        trend=classify_trend(
            _window_average(last7, "resting_heart_rate"),
            rhr_baseline,
            higher_is_better=False,
        ),
        hrv_depression=hrv_depression,
        rhr_elevation=rhr_elevation,
        sleep_deficit=sleep_deficit,
    )


def calculate_morning_freshness(
    today: HealthRecord,
    last28: Sequence[HealthRecord],
) -> MorningFreshness:
    """
    How fresh the morning should feel. Sleep is mandatory (weight 0.5);
    RHR delta and HRV ratio against the 28-day baseline add 0.25 each.
    """
    sleep_score = None
    hours = normalize(today.sleep_hours)
    if hours is not None:
        sleep_score = interpolate(hours, (5.0, 30), (7.0, 70), (8.5, 95))

    rhr_delta_score = None
    rhr_baseline = _window_average(last28, "resting_heart_rate")
    today_rhr = normalize(today.resting_heart_rate)
    if today_rhr is not None and rhr_baseline is not None:
        rhr_delta_score = interpolate(rhr_baseline - today_rhr, (-5, 20), (0, 60), (5, 95))

    hrv_ratio_score = None
    hrv_baseline = _window_average(last28, "heart_rate_variability")
    today_hrv = normalize(today.heart_rate_variability)
    if today_hrv is not None and hrv_baseline is not None and hrv_baseline > 0:
        hrv_ratio_score = interpolate(today_hrv / hrv_baseline, (0.75, 20), (1.0, 70), (1.25, 95))

    score = None
    if sleep_score is not None:
        score = weighted_average([
            (sleep_score, 0.5),
            (rhr_delta_score, 0.25),
            (hrv_ratio_score, 0.25),
        ])

    components = sum(1 for c in (sleep_score, rhr_delta_score, hrv_ratio_score) if c is not None)

    return MorningFreshness(
        value=clamp(score, 0, 100) if score is not None else None,
        reliability=grade_reliability(components, minimum=1, good=3),
        sleep_score=sleep_score,
        rhr_delta_score=rhr_delta_score,
        hrv_ratio_score=hrv_ratio_score,
    )


# ---------------------------------------------------------------------------
# Sleep domain
# ---------------------------------------------------------------------------

def sleep_duration_score(hours: float) -> float:
    """Duration points out of 50."""
    if hours >= 8:
        return 50.0
    if hours >= 7:
        return 45 + 5 * (hours - 7)
    if hours >= 6:
        return 35 + 10 * (hours - 6)
    if hours >= 5:
        return 20 + 15 * (hours - 5)
    return 4 * hours


def _in_band(percent: Optional[float], band) -> bool:
    return percent is not None and band[0] <= percent <= band[1]


def sleep_consistency_score(deep_percent: Optional[float], rem_percent: Optional[float]) -> float:
    """
    Stage-balance points out of 30.

    Starts at 28; each stage inside its optimal band adds 1, each stage
    outside it (or unmeasured) removes 3.
    """
    score = SLEEP_CONSISTENCY_DEFAULT
    for percent, band in ((deep_percent, DEEP_SLEEP_BAND), (rem_percent, REM_SLEEP_BAND)):
        score += 1 if _in_band(percent, band) else -3
    return clamp(score, 0, SLEEP_CONSISTENCY_MAX)


def sleep_disturbance_score(
    duration: float,
    deep: Optional[float],
    rem: Optional[float],
) -> float:
    """
    Disturbance points out of 20, from the restorative (deep + REM) share.

    Without both stages the default of 17 stands.
    """
    if deep is None or rem is None:
        return SLEEP_DISTURBANCE_DEFAULT
    restorative = (deep + rem) / duration
    if restorative >= 0.40:
        return 19.0
    if restorative >= 0.30:
        return 17.0
    if restorative >= 0.20:
        return 15.0
    return 13.0


def calculate_sleep_quality(today: HealthRecord) -> SleepQuality:
    """Duration (50) + stage consistency (30) + disturbance (20)."""
    duration = normalize(today.sleep_hours)
    deep = normalize(today.sleep_deep_hours)
    rem = normalize(today.sleep_rem_hours)

    data_count = sum(1 for v in (duration, deep, rem) if v is not None)
    reliability = grade_reliability(data_count, minimum=1, good=3)

    if duration is None or duration <= 0:
        return SleepQuality(
            value=None,
            reliability=reliability,
            duration_hours=duration,
        )

    deep_percent = deep / duration * 100 if deep is not None else None
    rem_percent = rem / duration * 100 if rem is not None else None

    duration_score = sleep_duration_score(duration)
    consistency_score = sleep_consistency_score(deep_percent, rem_percent)
    disturbance_score = sleep_disturbance_score(duration, deep, rem)

    total = duration_score + consistency_score + disturbance_score

    return SleepQuality(
        value=clamp(total, 0, 100),
        reliability=reliability,
        duration_hours=duration,
        deep_percent=deep_percent,
        rem_percent=rem_percent,
        duration_score=duration_score,
        consistency_score=consistency_score,
        disturbance_score=disturbance_score,
    )


def calculate_sleep_consistency(last14: Sequence[HealthRecord]) -> SleepConsistency:
    """
    Night-to-night regularity of sleep duration.

    Population stdDev: 0.5h -> 90, 1h -> 70, 2h -> 40. Needs 5 nights.
    """
    durations = valid_values(r.sleep_hours for r in last14)

    if len(durations) < 5:
        return SleepConsistency(
            value=None,
            reliability=DataReliability.INSUFFICIENT,
            sample_count=len(durations),
        )

    std_dev = standard_deviation(durations)
    score = interpolate(std_dev, (0.5, 90), (1.0, 70), (2.0, 40))

    return SleepConsistency(
        value=clamp(score, 0, 100),
        reliability=grade_reliability(len(durations), minimum=5, good=10),
        duration_std_dev_minutes=std_dev * 60,
        sample_count=len(durations),
    )


def calculate_sleep_highlight(last7: Sequence[HealthRecord]) -> SleepHighlight:
    """Weekly sleep chart with the average over nights that have data."""
    entries = []
    valid_hours = []
    for day in last7:
        hours = normalize(day.sleep_hours)
        entries.append(DailySleepEntry(
            date=day.date,
            hours=hours,
            day_label=day.date.strftime("%a") if day.date is not None else None,
        ))
        if hours is not None and hours > 0:
            valid_hours.append(hours)

    debt_hours = None
    if valid_hours:
        debt_hours = sum(SLEEP_TARGET_HOURS - h for h in valid_hours)

    return SleepHighlight(
        value=average(valid_hours),
        reliability=grade_reliability(len(valid_hours), minimum=3, good=7),
        daily_entries=tuple(entries),
        target_hours=SLEEP_TARGET_HOURS,
        debt_hours=debt_hours,
    )


# ---------------------------------------------------------------------------
# Load / performance domain
# ---------------------------------------------------------------------------

def calculate_training_strain(today: HealthRecord) -> TrainingStrain:
    """Always computable: no exercise is zero strain."""
    minutes = normalize(today.exercise_minutes)
    strain = clamp(exercise_strain(minutes), 0, MAX_STRAIN)
    has_workout = minutes is not None and minutes > 0

    return TrainingStrain(
        value=strain,
        reliability=DataReliability.HIGH if has_workout else DataReliability.MEDIUM,
    )


def _acwr_score(ratio: float) -> float:
    """Peaks at 95 for a 1.0 ratio; tapers below 0.8, drops fast above 1.5."""
    if ratio < 0.8:
        return interpolate(ratio, (0.4, 40), (0.6, 60), (0.8, 85))
    if ratio <= 1.3:
        return interpolate(ratio, (0.8, 85), (1.0, 95), (1.3, 85))
    return interpolate(ratio, (1.3, 85), (1.5, 50), (2.0, 20))


def calculate_load_balance(
    last7: Sequence[HealthRecord],
    last28: Sequence[HealthRecord],
) -> LoadBalance:
    """
    Acute:chronic workload ratio (ACWR) from daily exercise strain.

    A chronic load at or below 0.1 means no training base; the balance then
    defaults to 70 with a neutral 1.0 ratio.
    """
    if not last7 or not last28:
        return LoadBalance(value=None, reliability=DataReliability.INSUFFICIENT)

    acute_strains = [exercise_strain(r.exercise_minutes) for r in last7]
    chronic_strains = [exercise_strain(r.exercise_minutes) for r in last28]

    acute = sum(acute_strains) / len(acute_strains)
    chronic = sum(chronic_strains) / len(chronic_strains)

    if chronic > 0.1:
        acwr = acute / chronic
        score = _acwr_score(acwr)
    else:
        acwr = 1.0
        score = 70.0

    training_days = sum(1 for s in chronic_strains if s > 0)

    return LoadBalance(
        value=clamp(score, 0, 100),
        reliability=grade_reliability(training_days, minimum=7, good=21),
        acwr=acwr,
        acute_load=acute,
        chronic_load=chronic,
    )


def calculate_energy_forecast(
    today: HealthRecord,
    recovery_readiness: RecoveryReadiness,
) -> EnergyForecast:
    """
    Expected energy for the day: 50% readiness, 30% sleep, 20% HRV, plus a
    small activity adjustment. Missing sleep or HRV falls back to 60.
    """
    readiness = recovery_readiness.value
    if readiness is None:
        return EnergyForecast(value=None, reliability=DataReliability.LOW)

    hours = normalize(today.sleep_hours)
    if hours is not None:
        sleep_score = interpolate(hours, (5.0, 30), (7.0, 70), (8.5, 95))
    else:
        sleep_score = 60.0

    hrv = normalize(today.heart_rate_variability)
    if hrv is not None:
        hrv_score = interpolate(hrv, (25, 40), (50, 70), (80, 95))
    else:
        hrv_score = 60.0

    minutes = normalize(today.exercise_minutes)
    if minutes is not None and minutes > 90:
        adjustment = -5.0
    elif minutes is not None and 0 < minutes <= 60:
        adjustment = 3.0
    else:
        adjustment = 0.0

    score = readiness * 0.5 + sleep_score * 0.3 + hrv_score * 0.2 + adjustment

    return EnergyForecast(
        value=clamp(score, 0, 100),
        reliability=DataReliability.HIGH,
        readiness_contribution=readiness,
        sleep_score=sleep_score,
        hrv_score=hrv_score,
        activity_adjustment=adjustment,
    )


def calculate_workout_readiness(
    nervous_system: NervousSystemBalance,
    sleep_quality: SleepQuality,
    recovery_readiness: RecoveryReadiness,
) -> WorkoutReadiness:
    """Plain average of readiness, sleep quality and autonomic balance; needs two."""
    components = (recovery_readiness.value, sleep_quality.value, nervous_system.value)
    present = [c for c in components if c is not None]

    if len(present) < 2:
        return WorkoutReadiness(value=None, reliability=DataReliability.LOW)

    score = sum(present) / len(present)

    return WorkoutReadiness(
        value=clamp(score, 0, 100),
        reliability=grade_reliability(len(present), minimum=1, good=3),
        recovery_component=recovery_readiness.value,
        sleep_component=sleep_quality.value,
        autonomic_component=nervous_system.value,
    )


# ---------------------------------------------------------------------------
# Activity / habit domain
# ---------------------------------------------------------------------------

def calculate_activity_score(
    today: HealthRecord,
    last90: Sequence[HealthRecord],
) -> ActivityScore:
    """
    Today's steps against the 90-day baseline (70%) plus how many of the last
    7 days hit 8000 steps (30%).

    The baseline skips zero-step days (non-wear) while the 7-day goal check
    counts them as missed.
    """
    step_days = [s for s in valid_values(r.steps for r in last90) if s > 0]
    baseline = average(step_days)

    steps_ratio = None
    today_steps = normalize(today.steps)
    if today_steps is not None and baseline is not None and baseline > 0:
        steps_ratio = today_steps / baseline

    last7 = tuple(last90)[-7:]
    days_met_goal = sum(1 for r in last7 if (normalize(r.steps) or 0) >= STEPS_GOAL)
    consistency_score = days_met_goal / 7.0 * 100

    score = None
    if steps_ratio is not None:
        score = min(100.0, steps_ratio * 100) * 0.7 + consistency_score * 0.3

    recent = average([s for s in valid_values(r.steps for r in last7) if s > 0])

    return ActivityScore(
        value=clamp(score, 0, 100) if score is not None else None,
        reliability=grade_reliability(len(step_days), minimum=14, good=60),
        trend=classify_trend(recent, baseline, higher_is_better=True),
        steps_ratio=steps_ratio,
        consistency_score=consistency_score,
        baseline_steps=baseline,
    )


def _goal_percent(value: Optional[float], goal: float) -> Optional[float]:
    value = normalize(value)
    if value is None:
        return None
    return clamp(value / goal * 100, 0, 100)


def calculate_daily_goals(today: HealthRecord) -> DailyGoals:
    """
    Move (500 kcal), exercise (30 min) and stand (12 h) completion.

    The value averages all three goals; an unrecorded goal contributes no
    progress. None when nothing was recorded at all.
    """
    move = _goal_percent(today.active_energy, MOVE_GOAL_KCAL)
    exercise = _goal_percent(today.exercise_minutes, EXERCISE_GOAL_MINUTES)
    stand = _goal_percent(today.stand_hours, STAND_GOAL_HOURS)

    recorded = [p for p in (move, exercise, stand) if p is not None]
    value = sum(recorded) / 3 if recorded else None

    return DailyGoals(
        value=value,
        reliability=grade_reliability(len(recorded), minimum=1, good=3),
        move_percent=move,
        exercise_percent=exercise,
        stand_percent=stand,
    )


def calculate_cardio_fitness_trend(
    last7: Sequence[HealthRecord],
    last28: Sequence[HealthRecord],
) -> CardioFitnessTrend:
    """VO2max 7-day vs 28-day average; value is the percent change."""
    recent = _window_average(last7, "vo2_max")
    baseline = _window_average(last28, "vo2_max")

    percent_change = None
    trend = None
    if recent is not None and baseline is not None and baseline > 0:
        percent_change = (recent - baseline) / baseline * 100
        if percent_change > CARDIO_TREND_THRESHOLD:
            trend = MetricTrend.IMPROVING
        elif percent_change < -CARDIO_TREND_THRESHOLD:
            trend = MetricTrend.DECLINING
        else:
            trend = MetricTrend.STABLE

    samples = len(valid_values(r.vo2_max for r in last28))

    return CardioFitnessTrend(
        value=percent_change,
        reliability=grade_reliability(samples, minimum=3, good=10),
        trend=trend,
        vo2max_recent=recent,
        vo2max_baseline=baseline,
    )
