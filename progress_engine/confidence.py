from __future__ import annotations

from typing import Dict

from .constants import (
    ADHERENCE_CONFIDENCE_WEIGHT,
    CONSISTENCY_CONFIDENCE_WEIGHT,
    DATA_CONFIDENCE_WEIGHT,
    DATA_POINT_WEIGHTS,
    DATA_POINTS_FOR_FULL_CONFIDENCE,
)
from .models import CurrentMetrics, HistoricalData


def _clamp_unit(value: float) -> float:
    return max(0.0, min(value, 1.0))


def weighted_data_points(historical_data: HistoricalData, weights: Dict[str, float] = DATA_POINT_WEIGHTS) -> float:
    return (
        len(historical_data.workouts) * weights['workouts']
        + len(historical_data.nutrition) * weights['nutrition']
        + len(historical_data.body_metrics) * weights['body_metrics']
    )


def calculate_confidence(historical_data: HistoricalData, current_metrics: CurrentMetrics) -> float:
    """Overall confidence in [0, 1] from data volume, consistency and adherence."""
    data_confidence = min(1.0, weighted_data_points(historical_data) / DATA_POINTS_FOR_FULL_CONFIDENCE)
    consistency_confidence = _clamp_unit(current_metrics.consistency_score / 100.0)
    adherence_confidence = _clamp_unit(historical_data.adherence_rate)
    confidence = (
        data_confidence * DATA_CONFIDENCE_WEIGHT
        + consistency_confidence * CONSISTENCY_CONFIDENCE_WEIGHT
        + adherence_confidence * ADHERENCE_CONFIDENCE_WEIGHT
    )
    return _clamp_unit(confidence)
