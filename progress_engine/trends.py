"""Rate-of-change and dispersion statistics shared by every predictor."""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from typing import Optional, Sequence, Tuple

from .constants import DAYS_PER_WEEK, MAX_ETA_DAYS

# (date, value) pairs ordered by date ascending
Sample = Tuple[datetime, float]

SECONDS_PER_WEEK = DAYS_PER_WEEK * 24 * 60 * 60


def weeks_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / SECONDS_PER_WEEK


def weekly_rate(series: Sequence[Sample]) -> float:
    """
    Linear rate of change per week between the first and last sample.

    Returns 0.0 for fewer than two samples or when both ends share a timestamp.
    """
    if len(series) < 2:
        return 0.0
    (first_date, first_value), (last_date, last_value) = series[0], series[-1]
    weeks = weeks_between(first_date, last_date)
    if weeks <= 0:
        return 0.0
    return (last_value - first_value) / weeks


def eta_after_days(days: Optional[float], now: datetime, max_days: float = MAX_ETA_DAYS) -> Optional[datetime]:
    """``now`` plus ``days``; None when the wait is unknown or longer than ``max_days``."""
    if days is None or days > max_days:
        return None
    return now + timedelta(days=days)


def variance(values: Sequence[float]) -> float:
    """Population variance; 0.0 for empty input."""
    n = len(values)
    if n == 0:
        return 0.0
    mean_val = sum(values) / n
    return sum((x - mean_val) ** 2 for x in values) / n


def std_dev(values: Sequence[float]) -> float:
    """Population standard deviation; 0.0 for empty input."""
    return math.sqrt(variance(values))


__all__ = [
    "Sample",
    "weeks_between",
    "weekly_rate",
    "eta_after_days",
    "variance",
    "std_dev",
]
