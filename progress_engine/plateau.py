"""Stagnation risk from recent weight and training-volume variance."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Sequence

from .constants import (
    OVERTRAINING_SESSION_LIMIT,
    OVERTRAINING_WINDOW_DAYS,
    PLATEAU_OFFSET_DAYS,
    PLATEAU_VOLUME_VARIANCE,
    PLATEAU_WEIGHT_RATE,
    PLATEAU_WEIGHT_VARIANCE,
    PLATEAU_WINDOW,
)
from .models import BodyMetricEntry, PlateauPrediction, PlateauRisk, WorkoutEntry
from .trends import variance, weekly_rate
from .weight import weight_series

logger = logging.getLogger(__name__)

WEIGHT_STAGNATION_FACTOR = 'Weight has been stable for 2+ weeks'
VOLUME_STAGNATION_FACTOR = 'Training volume has been consistent'
OVERTRAINING_FACTOR = 'High training frequency may lead to overtraining'

GENERAL_PREVENTION_STRATEGIES = (
    'Change exercise selection every 4-6 weeks',
    'Ensure adequate protein and sleep',
    'Track non-scale victories',
)


def sessions_in_window(workouts: Sequence[WorkoutEntry], now: datetime, days: int = OVERTRAINING_WINDOW_DAYS) -> int:
    window_start = now - timedelta(days=days)
    return sum(1 for w in workouts if window_start <= w.date <= now)


def predict_plateau(
    body_metrics: Sequence[BodyMetricEntry],
    workouts: Sequence[WorkoutEntry],
    now: datetime,
    window: int = PLATEAU_WINDOW,
    weight_variance_threshold: float = PLATEAU_WEIGHT_VARIANCE,
    weight_rate_threshold: float = PLATEAU_WEIGHT_RATE,
    volume_variance_threshold: float = PLATEAU_VOLUME_VARIANCE,
) -> PlateauPrediction:
    """
    Classifies plateau risk from the last ``window`` weigh-ins and sessions.

    High: recent weight is both low-variance and flat.
    Medium: otherwise, when recent training volume barely varies.
    Fewer than two samples read as zero variance and zero trend, so a user
    without history is flagged like a stalled one.
    Overtraining (more than five sessions in 30 days) is reported as an extra
    factor without changing the classification.
    """
    recent_series = weight_series(body_metrics)[-window:]
    recent_weights = [weight for _, weight in recent_series]
    recent_volumes = [w.volume or 0.0 for w in sorted(workouts, key=lambda w: w.date)[-window:]]

    weight_variance = variance(recent_weights)
    recent_rate = weekly_rate(recent_series)
    volume_variance = variance(recent_volumes)

    risk = PlateauRisk.LOW
    factors: List[str] = []
    strategies: List[str] = []

    if weight_variance < weight_variance_threshold and abs(recent_rate) < weight_rate_threshold:
        risk = PlateauRisk.HIGH
        factors.append(WEIGHT_STAGNATION_FACTOR)
        strategies.append('Implement refeed days or diet breaks')

    if volume_variance < volume_variance_threshold:
        if risk is PlateauRisk.LOW:
            risk = PlateauRisk.MEDIUM
        factors.append(VOLUME_STAGNATION_FACTOR)
        strategies.append('Vary training intensity and volume')

    recent_sessions = sessions_in_window(workouts, now)
    if recent_sessions > OVERTRAINING_SESSION_LIMIT:
        factors.append(OVERTRAINING_FACTOR)
        strategies.append('Schedule deload week')

    estimated_date = None
    if risk is not PlateauRisk.LOW:
        estimated_date = now + timedelta(days=PLATEAU_OFFSET_DAYS[risk.value])

    strategies.extend(GENERAL_PREVENTION_STRATEGIES)

    logger.debug(
        f"Plateau risk {risk.value}: weight variance {weight_variance:.3f}, rate {recent_rate:.3f} kg/wk, "
        f"volume variance {volume_variance:.1f}, {recent_sessions} sessions in {OVERTRAINING_WINDOW_DAYS} days"
    )

    return PlateauPrediction(
        plateau_risk=risk,
        plateau_factors=factors,
        prevention_strategies=strategies,
        estimated_plateau_date=estimated_date,
    )
