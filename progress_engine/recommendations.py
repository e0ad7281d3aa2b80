"""Rule-based guidance composed from the individual predictions."""

from __future__ import annotations

from typing import List, Optional

from .constants import MUSCLE_GAIN_RATE_THRESHOLD, WEIGHT_LOSS_RATE_THRESHOLD
from .models import (
    ExperienceLevel,
    GoalAchievementPrediction,
    GoalType,
    PlateauPrediction,
    PlateauRisk,
    Trajectory,
    WeightPrediction,
)

LOW_CONSISTENCY_SCORE = 70

ADVANCED_TIPS = [
    'Consider periodization in your training',
    'Implement advanced techniques like drop sets or clusters',
]

EXPERIENCE_TIPS = {
    ExperienceLevel.BEGINNER: [
        'Focus on form and technique over weight progression',
        'Allow adequate recovery between sessions',
    ],
    ExperienceLevel.ADVANCED: ADVANCED_TIPS,
    ExperienceLevel.ELITE: ADVANCED_TIPS,
}


def generate_recommendations(
    goal_type: GoalType,
    consistency_score: float,
    experience: Optional[ExperienceLevel],
    weight_prediction: WeightPrediction,
    goal_achievement: GoalAchievementPrediction,
    plateau_prediction: PlateauPrediction,
) -> List[str]:
    """
    Evaluates every rule in a fixed order; each rule that fires appends its advice.

    The output depends only on the arguments, so identical inputs always give
    the same ordered list.
    """
    recommendations: List[str] = []
    rate = weight_prediction.rate_of_change

    if goal_type is GoalType.WEIGHT_LOSS and rate > WEIGHT_LOSS_RATE_THRESHOLD:
        recommendations.append('Increase caloric deficit by 200-300 calories for faster weight loss')
    elif goal_type is GoalType.MUSCLE_GAIN and rate < MUSCLE_GAIN_RATE_THRESHOLD:
        recommendations.append('Increase caloric surplus by 200-300 calories for muscle growth')

    if plateau_prediction.plateau_risk is PlateauRisk.HIGH:
        recommendations.append('Schedule a deload week to prevent plateau')
        recommendations.append('Consider changing your workout routine')

    if goal_achievement.current_trajectory is Trajectory.BEHIND:
        recommendations.append('Increase workout frequency by 1-2 sessions per week')
        recommendations.append('Review and tighten nutrition tracking')

    if consistency_score < LOW_CONSISTENCY_SCORE:
        recommendations.append('Focus on building consistent habits before intensity')
        recommendations.append('Set smaller, daily goals to improve adherence')

    if experience is not None:
        recommendations.extend(EXPERIENCE_TIPS.get(experience, []))

    return recommendations
