"""
Entry point of the prediction engine.

``generate_predictions`` is a pure function of its input and the reference
time: it holds no state between calls and performs no I/O, so callers can run
it for many users in parallel (one call per user).
"""
from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Optional

from .confidence import calculate_confidence
from .errors import InvalidPredictionInput
from .goals import evaluate_goals
from .milestones import predict_milestones
from .models import CurrentMetrics, PredictionInput, PredictionResult, to_utc
from .plateau import predict_plateau
from .recommendations import generate_recommendations
from .strength import predict_strength
from .trends import weekly_rate
from .weight import predict_weight, weight_series

logger = logging.getLogger(__name__)


def _is_finite_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def validate_input(prediction_input: PredictionInput) -> None:
    """Raises InvalidPredictionInput when required fields are missing or not usable numbers."""
    if not isinstance(prediction_input, PredictionInput):
        raise InvalidPredictionInput("Expected a PredictionInput")
    metrics = prediction_input.current_metrics
    if not isinstance(metrics, CurrentMetrics):
        raise InvalidPredictionInput("'currentMetrics' is required")
    if not _is_finite_number(metrics.weight) or metrics.weight <= 0:
        raise InvalidPredictionInput("'currentMetrics.weight' must be a positive number")
    if not _is_finite_number(metrics.consistency_score):
        raise InvalidPredictionInput("'currentMetrics.consistencyScore' must be a number")
    if not _is_finite_number(prediction_input.historical_data.adherence_rate):
        raise InvalidPredictionInput("'historicalData.adherenceRate' must be a number")
    if prediction_input.goals is None:
        raise InvalidPredictionInput("'goals' is required")


def generate_predictions(prediction_input: PredictionInput, now: Optional[datetime] = None) -> PredictionResult:
    """
    Runs every predictor for one user and assembles the combined result.

    Args:
        prediction_input: Logged history, current snapshot, goals and context.
        now: Reference time for all projected dates. Defaults to the current
             UTC time; pass a fixed value for reproducible output.

    Raises:
        InvalidPredictionInput: If the input is missing required fields.
    """
    validate_input(prediction_input)
    now = to_utc(now) if now is not None else datetime.now(timezone.utc)

    history = prediction_input.historical_data
    metrics = prediction_input.current_metrics
    goals = prediction_input.goals

    if not 0.0 <= history.adherence_rate <= 1.0 or not 0.0 <= metrics.consistency_score <= 100.0:
        logger.warning(
            f"User {prediction_input.user_id}: adherence {history.adherence_rate} or consistency "
            f"{metrics.consistency_score} out of range; values will be clamped"
        )

    raw_weight_rate = weekly_rate(weight_series(history.body_metrics))

    weight_prediction = predict_weight(
        history.body_metrics, metrics.weight, history.adherence_rate, metrics.consistency_score, now
    )
    strength_prediction = predict_strength(
        metrics.current_strength_levels, history.workouts, prediction_input.experience, now
    )
    goal_achievement = evaluate_goals(
        metrics, goals, raw_weight_rate, history.body_metrics, strength_prediction, history.adherence_rate, now
    )
    plateau_prediction = predict_plateau(history.body_metrics, history.workouts, now)
    milestones = predict_milestones(
        metrics.weight,
        raw_weight_rate,
        metrics.current_strength_levels,
        history.workouts,
        history.current_streak,
        history.adherence_rate,
        now,
    )
    recommendations = generate_recommendations(
        goals.type,
        metrics.consistency_score,
        prediction_input.experience,
        weight_prediction,
        goal_achievement,
        plateau_prediction,
    )
    confidence = calculate_confidence(history, metrics)

    logger.info(
        f"Predictions for user {prediction_input.user_id}: trajectory {goal_achievement.current_trajectory.value}, "
        f"plateau risk {plateau_prediction.plateau_risk.value}, {len(milestones)} milestones, "
        f"confidence {confidence:.2f}"
    )

    return PredictionResult(
        weight_prediction=weight_prediction,
        strength_prediction=strength_prediction,
        goal_achievement=goal_achievement,
        plateau_prediction=plateau_prediction,
        milestones=milestones,
        recommendations=recommendations,
        confidence=confidence,
    )


def predict_from_payload(payload, now: Optional[datetime] = None) -> PredictionResult:
    """Parses a JSON-shaped payload and runs ``generate_predictions`` on it."""
    return generate_predictions(PredictionInput.from_dict(payload), now=now)
