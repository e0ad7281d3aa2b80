"""Body-weight projection using decayed, adherence-adjusted linear extrapolation."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import List, Sequence, Tuple

from .constants import (
    ADHERENCE_BLEND_WEIGHT,
    CONFIDENCE_Z_SCORE,
    CONSISTENCY_BLEND_WEIGHT,
    HEADLINE_DAYS_LONG,
    HEADLINE_DAYS_SHORT,
    MAX_DECAY_SHARE,
    PROJECTION_HORIZON_DAYS,
    PROJECTION_STEP_DAYS,
    WEIGHT_CONFIDENCE_DECAY,
    WEIGHT_CONFIDENCE_FLOOR,
)
from .models import BodyMetricEntry, WeightPoint, WeightPrediction
from .trends import Sample, std_dev, weekly_rate

logger = logging.getLogger(__name__)


def _clamp_unit(value: float) -> float:
    return max(0.0, min(value, 1.0))


def weight_series(body_metrics: Sequence[BodyMetricEntry]) -> List[Sample]:
    return [(m.date, m.weight) for m in sorted(body_metrics, key=lambda m: m.date)]


def body_fat_series(body_metrics: Sequence[BodyMetricEntry]) -> List[Sample]:
    return [
        (m.date, m.body_fat_percentage)
        for m in sorted(body_metrics, key=lambda m: m.date)
        if m.body_fat_percentage is not None
    ]


def reliability_factor(adherence_rate: float, consistency_score: float) -> float:
    """Blend of adherence (0-1) and consistency (0-100) used to discount the raw trend."""
    return (
        _clamp_unit(adherence_rate) * ADHERENCE_BLEND_WEIGHT
        + _clamp_unit(consistency_score / 100.0) * CONSISTENCY_BLEND_WEIGHT
    )


def decay_factor(days_elapsed: int, horizon_days: int = PROJECTION_HORIZON_DAYS) -> float:
    """log(days+1)/log(horizon): grows from 0 towards 1 as the projection reaches the horizon."""
    if horizon_days <= 1:
        return 1.0
    return math.log(days_elapsed + 1) / math.log(horizon_days)


def point_confidence(days_elapsed: int, horizon_days: int = PROJECTION_HORIZON_DAYS) -> float:
    if horizon_days <= 0:
        return WEIGHT_CONFIDENCE_FLOOR
    return max(WEIGHT_CONFIDENCE_FLOOR, 1.0 - (days_elapsed / horizon_days) * WEIGHT_CONFIDENCE_DECAY)


def _nearest(points: Sequence[Tuple[int, WeightPoint]], target_days: int, fallback: float) -> float:
    if not points:
        return fallback
    # min() keeps the earliest point on ties
    _, point = min(points, key=lambda item: abs(item[0] - target_days))
    return point.weight


def predict_weight(
    body_metrics: Sequence[BodyMetricEntry],
    current_weight: float,
    adherence_rate: float,
    consistency_score: float,
    now: datetime,
    horizon_days: int = PROJECTION_HORIZON_DAYS,
    step_days: int = PROJECTION_STEP_DAYS,
    max_decay_share: float = MAX_DECAY_SHARE,
) -> WeightPrediction:
    """
    Projects body weight in fixed steps up to ``horizon_days``.

    The historical weekly rate is scaled by the reliability blend of adherence
    and consistency. Each weekly increment shrinks by up to ``max_decay_share``
    as the horizon grows, so the projection never changes direction.

    Args:
        body_metrics: Logged body-metric entries (any order).
        current_weight: Starting point of the projection, in kg.
        adherence_rate: Fraction of days with qualifying actions (0-1).
        consistency_score: Upstream regularity score (0-100).
        now: Reference time for projected dates.

    Returns:
        A WeightPrediction with the projected points, 30/90-day headline figures,
        the adjusted weekly rate and a 95% interval around the 90-day estimate.
    """
    series = weight_series(body_metrics)
    base_rate = weekly_rate(series)
    adjusted_rate = base_rate * reliability_factor(adherence_rate, consistency_score)

    projected: List[Tuple[int, WeightPoint]] = []
    running_weight = current_weight
    for days in range(step_days, horizon_days + 1, step_days):
        weekly_change = adjusted_rate * (1 - decay_factor(days, horizon_days) * max_decay_share)
        running_weight += weekly_change
        projected.append((
            days,
            WeightPoint(
                date=now + timedelta(days=days),
                weight=running_weight,
                confidence=point_confidence(days, horizon_days),
            ),
        ))

    expected_30 = _nearest(projected, HEADLINE_DAYS_SHORT, current_weight)
    expected_90 = _nearest(projected, HEADLINE_DAYS_LONG, current_weight)

    spread = std_dev([weight for _, weight in series]) * CONFIDENCE_Z_SCORE

    logger.debug(
        f"Weight trend: base {base_rate:.3f} kg/wk, adjusted {adjusted_rate:.3f} kg/wk, "
        f"90-day estimate {expected_90:.2f} kg (+/- {spread:.2f})"
    )

    return WeightPrediction(
        predicted_weight=[point for _, point in projected],
        expected_weight_in_30_days=expected_30,
        expected_weight_in_90_days=expected_90,
        rate_of_change=adjusted_rate,
        confidence_interval=(expected_90 - spread, expected_90 + spread),
    )
