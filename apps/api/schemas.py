from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
import datetime

from services.health_metrics import HealthRecord, TimePeriod


class HealthRecordIn(BaseModel):
    """One day of raw samples. Zero or missing fields mean "no data"."""
    model_config = ConfigDict(extra="ignore")

    date: Optional[datetime.date] = None
    steps: Optional[float] = None
    active_energy: Optional[float] = None
    exercise_minutes: Optional[float] = None
    stand_hours: Optional[float] = None
    heart_rate_variability: Optional[float] = None
    resting_heart_rate: Optional[float] = None
    vo2_max: Optional[float] = None
    sleep_hours: Optional[float] = None
    sleep_deep_hours: Optional[float] = None
    sleep_rem_hours: Optional[float] = None

    def to_record(self) -> HealthRecord:
        return HealthRecord(**self.model_dump())


class DailyMetricsRequest(BaseModel):
    today: Optional[HealthRecordIn] = None
    history: List[HealthRecordIn] = Field(default_factory=list)  # oldest -> newest
    period: TimePeriod = TimePeriod.DAY
    monthly_consistency: Optional[float] = Field(default=None, ge=0, le=100)
    include_star_metrics: bool = False


class ScoreHistoryRequest(BaseModel):
    history: List[HealthRecordIn] = Field(default_factory=list)
    days: Optional[int] = Field(default=None, le=90)
