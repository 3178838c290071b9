"""Reliability grading from data sufficiency."""

from .models import DataReliability


def grade_reliability(data_points: int, minimum: int, good: int) -> DataReliability:
    """
    Map a count of valid data points to a confidence grade.

    Below minimum is insufficient, below good // 2 is low, below good is
    medium, anything else is high.
    """
    if data_points < minimum:
        return DataReliability.INSUFFICIENT
    if data_points < good // 2:
        return DataReliability.LOW
    if data_points < good:
        return DataReliability.MEDIUM
    return DataReliability.HIGH
