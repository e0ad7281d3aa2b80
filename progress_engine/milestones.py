"""Upcoming weight, strength and streak milestones with predicted arrival dates."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from .constants import (
    DAYS_PER_MONTH,
    DAYS_PER_WEEK,
    MONTHS_PER_YEAR,
    STREAK_ADHERENCE_SCALE,
    STREAK_MILESTONE_CONFIDENCE_FLOOR,
    STREAK_MILESTONES,
    STRENGTH_MILESTONE_CONFIDENCE_FLOOR,
    STRENGTH_MILESTONE_LADDER,
    WEEKS_PER_YEAR,
    WEIGHT_MILESTONE_CONFIDENCE_FLOOR,
    WEIGHT_MILESTONE_STEPS,
)
from .models import MilestonePrediction, StrengthLevels, WorkoutEntry
from .strength import extract_exercise_history, monthly_progression_rate, months_to_reach
from .trends import eta_after_days

logger = logging.getLogger(__name__)


def next_strength_milestone(current: float, ladder: Sequence[float] = STRENGTH_MILESTONE_LADDER) -> Optional[float]:
    return next((rung for rung in ladder if rung > current), None)


def weight_milestones(current_weight: float, weight_rate: float, now: datetime) -> List[MilestonePrediction]:
    """Round-number targets below the current weight; only while the trend is downward."""
    if weight_rate >= 0:
        return []

    milestones: List[MilestonePrediction] = []
    seen = set()
    for step in WEIGHT_MILESTONE_STEPS:
        target = int(math.floor(current_weight / step) * step)
        if target >= current_weight or target in seen:
            continue
        seen.add(target)
        weeks_needed = (current_weight - target) / abs(weight_rate)
        predicted_date = eta_after_days(weeks_needed * DAYS_PER_WEEK, now)
        if predicted_date is None:
            continue
        milestones.append(MilestonePrediction(
            milestone=f"Reach {target}kg",
            predicted_date=predicted_date,
            confidence=max(WEIGHT_MILESTONE_CONFIDENCE_FLOOR, 1 - weeks_needed / WEEKS_PER_YEAR),
            requirements=[
                'Maintain current calorie deficit',
                'Continue workout routine',
                f"Average {abs(weight_rate):.2f}kg loss per week",
            ],
        ))
    return milestones


def strength_milestones(
    current_levels: StrengthLevels,
    workouts: Sequence[WorkoutEntry],
    now: datetime,
) -> List[MilestonePrediction]:
    """Next ladder rung per lift, dated by the logged progression rate without experience scaling."""
    milestones: List[MilestonePrediction] = []
    for exercise, current in current_levels.items():
        if not current or current <= 0:
            continue
        target = next_strength_milestone(current)
        if target is None:
            continue
        rate = monthly_progression_rate(extract_exercise_history(workouts, exercise), current, now)
        months_needed = months_to_reach(current, target, rate)
        predicted_date = eta_after_days(months_needed * DAYS_PER_MONTH if months_needed is not None else None, now)
        if predicted_date is None:
            logger.debug(f"Milestone {exercise} {target}kg unreachable at rate {rate}")
            continue
        milestones.append(MilestonePrediction(
            milestone=f"{exercise}: {target}kg",
            predicted_date=predicted_date,
            confidence=max(STRENGTH_MILESTONE_CONFIDENCE_FLOOR, 1 - months_needed / MONTHS_PER_YEAR),
            requirements=['Progressive overload', 'Adequate protein intake', 'Consistent training'],
        ))
    return milestones


def streak_milestones(current_streak: int, adherence_rate: float, now: datetime) -> List[MilestonePrediction]:
    confidence = max(STREAK_MILESTONE_CONFIDENCE_FLOOR, min(1.0, adherence_rate * STREAK_ADHERENCE_SCALE))
    return [
        MilestonePrediction(
            milestone=f"{days} day streak",
            predicted_date=now + timedelta(days=days - current_streak),
            confidence=confidence,
            requirements=['Daily logging', 'Maintain motivation', 'Build sustainable habits'],
        )
        for days in STREAK_MILESTONES
        if days > current_streak
    ]


def predict_milestones(
    current_weight: float,
    weight_rate: float,
    current_levels: StrengthLevels,
    workouts: Sequence[WorkoutEntry],
    current_streak: int,
    adherence_rate: float,
    now: datetime,
) -> List[MilestonePrediction]:
    """All upcoming milestones, earliest first."""
    milestones = (
        weight_milestones(current_weight, weight_rate, now)
        + strength_milestones(current_levels, workouts, now)
        + streak_milestones(current_streak, adherence_rate, now)
    )
    return sorted(milestones, key=lambda m: m.predicted_date)
