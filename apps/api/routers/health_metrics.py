"""
Health Metrics API Router

Endpoints for the daily scoring engine:
- Fifteen daily/weekly/monthly metrics with the composite main score
- Star-metric highlights
- Per-day score history for charting

The engine is stateless; every request is scored from the records it carries.
"""

from fastapi import APIRouter
from typing import Dict
import logging

from core.config import settings
from core.exceptions import ValidationError
from schemas import DailyMetricsRequest, ScoreHistoryRequest
from services.health_metrics import (
    InvalidWindowError,
    calculate_daily_metrics,
    calculate_score_history,
    select_star_metrics,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/health-metrics", tags=["Health Metrics"])


def _check_history_length(count: int) -> None:
    limit = settings.HEALTH_METRICS_MAX_HISTORY_RECORDS
    if count > limit:
        raise ValidationError(
            f"History has {count} records; at most {limit} are accepted",
            field="history",
        )


@router.post("/daily")
def compute_daily_metrics(request: DailyMetricsRequest) -> Dict:
    """
    Compute the metric bundle for a day, week or month.

    Metrics without enough data come back with value null and an
    insufficient/low reliability; the main score is null below three
    contributing metrics.
    """
    _check_history_length(len(request.history))

    history = [r.to_record() for r in request.history]
    today = request.today.to_record() if request.today else None

    try:
        bundle = calculate_daily_metrics(today, history, request.period)
    except InvalidWindowError as e:
        raise ValidationError(str(e), field="period")

    response = {
        'period': request.period.value,
        'record_count': len(history),
        **bundle.to_dict(),
    }

    if request.include_star_metrics:
        star = select_star_metrics(bundle, request.monthly_consistency)
        response['star_metrics'] = star.to_dict()

    return response


@router.post("/history")
def compute_score_history(request: ScoreHistoryRequest) -> Dict:
    """Per-day main score and metric values for the most recent days."""
    _check_history_length(len(request.history))

    days = request.days if request.days is not None else settings.HEALTH_METRICS_SCORE_HISTORY_DAYS
    history = [r.to_record() for r in request.history]

    try:
        entries = calculate_score_history(history, days)
    except InvalidWindowError as e:
        raise ValidationError(str(e), field="days")

    logger.debug(f"Score history: {len(entries)} days from {len(history)} records")

    return {
        'days': days,
        'entries': [e.to_dict() for e in entries],
    }
