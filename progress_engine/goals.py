"""Maps weight, body-fat and strength trajectories onto the user's declared goals."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from .constants import (
    ALTERNATIVE_TIMELINE_DAYS,
    ALTERNATIVE_TIMELINE_PROBABILITY,
    DAYS_PER_MONTH,
    DAYS_PER_WEEK,
    MAX_SUCCESS_PROBABILITY,
    MUSCLE_GAIN_RATE_THRESHOLD,
    PROBABILITY_ADHERENCE_WEIGHT,
    PROBABILITY_BASE,
    PROBABILITY_CONSISTENCY_WEIGHT,
    TRAJECTORY_AHEAD_RATIO,
    TRAJECTORY_BEHIND_RATIO,
    TRAJECTORY_ON_TRACK_RATIO,
    TREND_EPSILON,
    WEIGHT_LOSS_RATE_THRESHOLD,
)
from .models import (
    BodyMetricEntry,
    CurrentMetrics,
    GoalAchievementPrediction,
    GoalType,
    StrengthPrediction,
    Trajectory,
    UserGoals,
)
from .strength import months_to_reach
from .trends import eta_after_days, weekly_rate
from .weight import body_fat_series

logger = logging.getLogger(__name__)

NO_GOALS_MESSAGE = "No goals set: add a target weight, body fat or strength goal"
NO_PROGRESS_MESSAGE = "No progress detected - review your approach"


def success_probability(adherence_rate: float, consistency_score: float) -> float:
    probability = (
        adherence_rate * PROBABILITY_ADHERENCE_WEIGHT
        + (consistency_score / 100.0) * PROBABILITY_CONSISTENCY_WEIGHT
        + PROBABILITY_BASE
    )
    return max(0.0, min(probability, MAX_SUCCESS_PROBABILITY))


def eta_from_trend(current: float, target: float, rate_per_week: float, now: datetime) -> Optional[datetime]:
    """Date at which ``target`` is reached at ``rate_per_week``; None for a near-zero trend or an unbounded wait."""
    if abs(rate_per_week) <= TREND_EPSILON:
        return None
    weeks_needed = abs((target - current) / rate_per_week)
    return eta_after_days(weeks_needed * DAYS_PER_WEEK, now)


def classify_trajectory(estimated: datetime, target_date: datetime, now: datetime) -> Trajectory:
    """Ratio of time-to-estimate over time-to-deadline mapped to a pacing class."""
    target_seconds = (target_date - now).total_seconds()
    if target_seconds <= 0:
        return Trajectory.OFF_TRACK
    ratio = (estimated - now).total_seconds() / target_seconds
    if ratio < TRAJECTORY_AHEAD_RATIO:
        return Trajectory.AHEAD
    if ratio < TRAJECTORY_ON_TRACK_RATIO:
        return Trajectory.ON_TRACK
    if ratio < TRAJECTORY_BEHIND_RATIO:
        return Trajectory.BEHIND
    return Trajectory.OFF_TRACK


def alternative_timeline(estimated: Optional[datetime], probability: float) -> Optional[datetime]:
    """Hedged date pushed out in proportion to the chance of missing the estimate."""
    if estimated is None or probability > ALTERNATIVE_TIMELINE_PROBABILITY:
        return None
    return estimated + timedelta(days=ALTERNATIVE_TIMELINE_DAYS * (1 - probability))


def _goal_type_adjustments(goal_type: GoalType, weight_rate: float) -> List[str]:
    if goal_type is GoalType.WEIGHT_LOSS and weight_rate > WEIGHT_LOSS_RATE_THRESHOLD:
        return [
            'Increase caloric deficit by 200-300 calories',
            'Add 2-3 cardio sessions per week',
        ]
    if goal_type is GoalType.MUSCLE_GAIN and weight_rate < MUSCLE_GAIN_RATE_THRESHOLD:
        return [
            'Increase protein intake to 2g per kg body weight',
            'Ensure progressive overload in training',
        ]
    return []


def evaluate_goals(
    current_metrics: CurrentMetrics,
    goals: UserGoals,
    weight_rate: float,
    body_metrics: Sequence[BodyMetricEntry],
    strength_prediction: StrengthPrediction,
    adherence_rate: float,
    now: datetime,
) -> GoalAchievementPrediction:
    """
    Estimates when the user's targets will be met and how likely that is.

    Every declared target (weight, body fat, per-exercise loads) gets its own
    estimate; the goal as a whole is met on the latest of them. Any target
    without measurable progress makes the whole goal "off_track".
    """
    if not goals.has_targets:
        return GoalAchievementPrediction(
            estimated_achievement_date=None,
            probability_of_success=0.0,
            current_trajectory=Trajectory.OFF_TRACK,
            adjustments_needed=[NO_GOALS_MESSAGE],
        )

    estimates: List[datetime] = []
    stalled: List[str] = []

    if goals.target_weight is not None:
        eta = eta_from_trend(current_metrics.weight, goals.target_weight, weight_rate, now)
        if eta is None:
            stalled.append('weight')
        else:
            estimates.append(eta)

    if goals.target_body_fat is not None:
        series = body_fat_series(body_metrics)
        current_bf = current_metrics.body_fat_percentage
        if current_bf is None and series:
            current_bf = series[-1][1]
        eta = None
        if current_bf is not None:
            eta = eta_from_trend(current_bf, goals.target_body_fat, weekly_rate(series), now)
        if eta is None:
            stalled.append('body fat')
        else:
            estimates.append(eta)

    for exercise, target in (goals.strength_goals or {}).items():
        current = current_metrics.current_strength_levels.get(exercise)
        rate = strength_prediction.progression_rate.get(exercise)
        months = months_to_reach(current, target, rate) if current is not None and rate is not None else None
        eta = eta_after_days(months * DAYS_PER_MONTH if months is not None else None, now)
        if eta is None:
            stalled.append(exercise)
        else:
            estimates.append(eta)

    estimated_date: Optional[datetime] = None
    probability = 0.0
    trajectory = Trajectory.ON_TRACK
    adjustments: List[str] = []

    if stalled:
        logger.debug(f"Goal evaluation: no measurable progress towards {', '.join(stalled)}")
        trajectory = Trajectory.OFF_TRACK
        adjustments.append(NO_PROGRESS_MESSAGE)
    else:
        estimated_date = max(estimates)
        probability = success_probability(adherence_rate, current_metrics.consistency_score)
        if goals.target_date is not None:
            trajectory = classify_trajectory(estimated_date, goals.target_date, now)
            if trajectory is Trajectory.BEHIND:
                adjustments.extend(['Increase workout frequency', 'Improve dietary adherence'])
            elif trajectory is Trajectory.OFF_TRACK:
                adjustments.extend(['Significant changes needed to meet goal', 'Consider adjusting target date'])

    adjustments.extend(_goal_type_adjustments(goals.type, weight_rate))

    return GoalAchievementPrediction(
        estimated_achievement_date=estimated_date,
        probability_of_success=probability,
        current_trajectory=trajectory,
        adjustments_needed=adjustments,
        alternative_timeline=alternative_timeline(estimated_date, probability),
    )
