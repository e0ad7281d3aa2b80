"""Per-exercise load progression with experience scaling and diminishing returns."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence

from .constants import (
    DAYS_PER_MONTH,
    DEFAULT_EXPERIENCE_MULTIPLIER,
    DEFAULT_MONTHLY_PROGRESSION_PCT,
    DIMINISHING_RETURNS_STEP,
    EXPERIENCE_MULTIPLIERS,
    STRENGTH_PROJECTION_MONTHS,
)
from .models import ExperienceLevel, StrengthLevels, StrengthPoint, StrengthPrediction, WorkoutEntry
from .trends import Sample

logger = logging.getLogger(__name__)


def extract_exercise_history(workouts: Sequence[WorkoutEntry], exercise: str) -> List[Sample]:
    """Loads logged for ``exercise``, matched case-insensitively by name containment."""
    needle = exercise.lower()
    history: List[Sample] = []
    for workout in workouts:
        for entry in workout.exercises:
            if needle in entry.name.lower() and entry.weight:
                history.append((workout.date, entry.weight))
    return sorted(history, key=lambda sample: sample[0])


def monthly_progression_rate(
    history: Sequence[Sample],
    current: float,
    now: datetime,
    default_rate: float = DEFAULT_MONTHLY_PROGRESSION_PCT,
) -> float:
    """
    Percentage load growth per 30-day month, from the first logged load to ``current``.

    Sparse history (fewer than two samples), a non-positive starting load or no
    elapsed time fall back to ``default_rate``.
    """
    if len(history) < 2:
        return default_rate
    first_date, first_load = history[0]
    if first_load <= 0:
        return default_rate
    months = (now - first_date).total_seconds() / (DAYS_PER_MONTH * 24 * 60 * 60)
    if months <= 0:
        return default_rate
    return ((current - first_load) / first_load) * 100.0 / months


def experience_multiplier(
    experience: Optional[ExperienceLevel],
    multipliers: Dict[str, float] = EXPERIENCE_MULTIPLIERS,
) -> float:
    if experience is None:
        return DEFAULT_EXPERIENCE_MULTIPLIER
    return multipliers.get(experience.value, DEFAULT_EXPERIENCE_MULTIPLIER)


def diminishing_factor(month_index: int, step: float = DIMINISHING_RETURNS_STEP) -> float:
    return 1.0 / (1.0 + month_index * step)


def months_to_reach(current: float, target: float, monthly_rate: float) -> Optional[float]:
    """
    Months of compounding at ``monthly_rate`` percent needed to move ``current`` to ``target``.

    Returns 0.0 when the target is already met and None when it is unreachable
    (non-positive load or rate).
    """
    if target <= current:
        return 0.0
    if current <= 0 or monthly_rate <= 0:
        return None
    return math.log(target / current) / math.log(1 + monthly_rate / 100.0)


def predict_strength(
    current_levels: StrengthLevels,
    workouts: Sequence[WorkoutEntry],
    experience: Optional[ExperienceLevel],
    now: datetime,
    months: int = STRENGTH_PROJECTION_MONTHS,
    default_rate: float = DEFAULT_MONTHLY_PROGRESSION_PCT,
    multipliers: Dict[str, float] = EXPERIENCE_MULTIPLIERS,
) -> StrengthPrediction:
    multiplier = experience_multiplier(experience, multipliers)
    predicted: Dict[str, List[StrengthPoint]] = {}
    gains_30: StrengthLevels = {}
    gains_90: StrengthLevels = {}
    rates: Dict[str, float] = {}

    for exercise, current in current_levels.items():
        if current is None or current <= 0:
            logger.debug(f"Skipping strength projection for '{exercise}': no current load")
            continue

        history = extract_exercise_history(workouts, exercise)
        rate = monthly_progression_rate(history, current, now, default_rate) * multiplier
        rates[exercise] = rate

        points: List[StrengthPoint] = []
        load = current
        for month in range(1, months + 1):
            load *= max(0.0, 1 + rate * diminishing_factor(month) / 100.0)
            points.append(StrengthPoint(date=now + timedelta(days=DAYS_PER_MONTH * month), weight=load))
        predicted[exercise] = points

        gains_30[exercise] = points[0].weight if len(points) >= 1 else current
        gains_90[exercise] = points[2].weight if len(points) >= 3 else current

        logger.debug(
            f"Strength '{exercise}': {len(history)} logged loads, rate {rate:.2f}%/month "
            f"(x{multiplier}), 90-day load {gains_90[exercise]:.1f}"
        )

    return StrengthPrediction(
        predicted_strength=predicted,
        expected_gains_in_30_days=gains_30,
        expected_gains_in_90_days=gains_90,
        progression_rate=rates,
    )
