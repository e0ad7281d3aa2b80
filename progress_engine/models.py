"""
Typed records consumed and produced by the prediction engine.

Inputs are immutable snapshots assembled by the caller from its own log store.
``PredictionInput.from_dict`` accepts the JSON shape used by the HTTP API
(camelCase or snake_case keys) and raises ``InvalidPredictionInput`` for
malformed payloads. Outputs expose ``to_dict`` for JSON responses.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import InvalidPredictionInput

# Exercise name -> current best load (kg). Absent lifts are simply not keys.
StrengthLevels = Dict[str, float]


class GoalType(Enum):
    WEIGHT_LOSS = 'weight_loss'
    MUSCLE_GAIN = 'muscle_gain'
    STRENGTH = 'strength'
    ENDURANCE = 'endurance'
    MAINTENANCE = 'maintenance'


class ExperienceLevel(Enum):
    BEGINNER = 'beginner'
    INTERMEDIATE = 'intermediate'
    ADVANCED = 'advanced'
    ELITE = 'elite'


class Trajectory(Enum):
    """Pacing of progress relative to the user's goal."""
    AHEAD = 'ahead'
    ON_TRACK = 'on_track'
    BEHIND = 'behind'
    OFF_TRACK = 'off_track'


class PlateauRisk(Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'


# --- Parsing helpers ---

def _field(payload: Dict[str, Any], snake: str, camel: Optional[str] = None, default: Any = None) -> Any:
    value = payload.get(snake)
    if value is None and camel:
        value = payload.get(camel)
    return default if value is None else value


def to_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Any, name: str) -> datetime:
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            return to_utc(datetime.fromisoformat(text))
        except ValueError:
            pass
    raise InvalidPredictionInput(f"'{name}' must be an ISO-8601 date, got {value!r}")


def _optional_datetime(value: Any, name: str) -> Optional[datetime]:
    return None if value is None else parse_datetime(value, name)


def _number(value: Any, name: str) -> float:
    # bool is an int subclass; a flag is never a measurement
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise InvalidPredictionInput(f"'{name}' must be numeric, got {value!r}")
    try:
        return float(value)
    except ValueError:
        raise InvalidPredictionInput(f"'{name}' must be numeric, got {value!r}") from None


def _optional_number(value: Any, name: str) -> Optional[float]:
    return None if value is None else _number(value, name)


def _mapping(value: Any, name: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidPredictionInput(f"'{name}' must be an object")
    return value


def _records(value: Any, name: str) -> List[Dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise InvalidPredictionInput(f"'{name}' must be a list of objects")
    return value


def _enum(enum_cls, value: Any, name: str):
    if value is None:
        return None
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        allowed = ', '.join(member.value for member in enum_cls)
        raise InvalidPredictionInput(f"'{name}' must be one of: {allowed}") from None


def parse_strength_levels(value: Any, name: str) -> StrengthLevels:
    levels: StrengthLevels = {}
    for exercise, load in _mapping(value, name).items():
        if load is None:
            continue
        levels[str(exercise)] = _number(load, f"{name}.{exercise}")
    return levels


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# --- Historical records ---

@dataclass(frozen=True)
class ExerciseEntry:
    name: str
    sets: int = 0
    reps: int = 0
    weight: Optional[float] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'ExerciseEntry':
        name = payload.get('name')
        if not name:
            raise InvalidPredictionInput("Exercise entries require a 'name'")
        return cls(
            name=str(name),
            sets=int(_number(payload.get('sets') or 0, 'sets')),
            reps=int(_number(payload.get('reps') or 0, 'reps')),
            weight=_optional_number(payload.get('weight'), 'weight'),
        )


@dataclass(frozen=True)
class WorkoutEntry:
    date: datetime
    type: str = 'strength'
    duration: float = 0.0
    volume: Optional[float] = None
    intensity: Optional[float] = None
    exercises: Tuple[ExerciseEntry, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'date', to_utc(self.date))

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'WorkoutEntry':
        return cls(
            date=parse_datetime(payload.get('date'), 'workouts.date'),
            type=str(payload.get('type', 'strength')),
            duration=_number(payload.get('duration') or 0, 'workouts.duration'),
            volume=_optional_number(payload.get('volume'), 'workouts.volume'),
            intensity=_optional_number(payload.get('intensity'), 'workouts.intensity'),
            exercises=tuple(ExerciseEntry.from_dict(e) for e in _records(payload.get('exercises'), 'workouts.exercises')),
        )


@dataclass(frozen=True)
class NutritionEntry:
    date: datetime
    calories: float = 0.0
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    adherence_to_goal: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'date', to_utc(self.date))

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'NutritionEntry':
        return cls(
            date=parse_datetime(payload.get('date'), 'nutrition.date'),
            calories=_number(payload.get('calories') or 0, 'nutrition.calories'),
            protein=_number(payload.get('protein') or 0, 'nutrition.protein'),
            carbs=_number(payload.get('carbs') or 0, 'nutrition.carbs'),
            fat=_number(payload.get('fat') or 0, 'nutrition.fat'),
            adherence_to_goal=_number(_field(payload, 'adherence_to_goal', 'adherenceToGoal', 0), 'nutrition.adherenceToGoal'),
        )


@dataclass(frozen=True)
class BodyMetricEntry:
    date: datetime
    weight: float
    body_fat_percentage: Optional[float] = None
    measurements: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'date', to_utc(self.date))

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'BodyMetricEntry':
        if payload.get('weight') is None:
            raise InvalidPredictionInput("Body metric entries require a 'weight'")
        measurements = {
            key: _number(val, f"measurements.{key}")
            for key, val in _mapping(payload.get('measurements'), 'bodyMetrics.measurements').items()
            if val is not None
        }
        return cls(
            date=parse_datetime(payload.get('date'), 'bodyMetrics.date'),
            weight=_number(payload['weight'], 'bodyMetrics.weight'),
            body_fat_percentage=_optional_number(
                _field(payload, 'body_fat_percentage', 'bodyFatPercentage'), 'bodyMetrics.bodyFatPercentage'
            ),
            measurements=measurements,
        )


@dataclass(frozen=True)
class HistoricalData:
    """Logged history. Series are kept sorted by date ascending."""
    workouts: Tuple[WorkoutEntry, ...] = ()
    nutrition: Tuple[NutritionEntry, ...] = ()
    body_metrics: Tuple[BodyMetricEntry, ...] = ()
    adherence_rate: float = 0.0
    streak_history: Tuple[int, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'workouts', tuple(sorted(self.workouts, key=lambda w: w.date)))
        object.__setattr__(self, 'nutrition', tuple(sorted(self.nutrition, key=lambda n: n.date)))
        object.__setattr__(self, 'body_metrics', tuple(sorted(self.body_metrics, key=lambda m: m.date)))
        object.__setattr__(self, 'streak_history', tuple(self.streak_history))

    @property
    def current_streak(self) -> int:
        return self.streak_history[-1] if self.streak_history else 0

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'HistoricalData':
        streaks = _field(payload, 'streak_history', 'streakHistory') or []
        if not isinstance(streaks, list):
            raise InvalidPredictionInput("'streakHistory' must be a list of integers")
        return cls(
            workouts=tuple(WorkoutEntry.from_dict(w) for w in _records(payload.get('workouts'), 'workouts')),
            nutrition=tuple(NutritionEntry.from_dict(n) for n in _records(payload.get('nutrition'), 'nutrition')),
            body_metrics=tuple(
                BodyMetricEntry.from_dict(m)
                for m in _records(_field(payload, 'body_metrics', 'bodyMetrics'), 'bodyMetrics')
            ),
            adherence_rate=_number(_field(payload, 'adherence_rate', 'adherenceRate', 0), 'adherenceRate'),
            streak_history=tuple(int(_number(s, 'streakHistory')) for s in streaks),
        )


# --- Current state, goals and context ---

@dataclass(frozen=True)
class CurrentMetrics:
    weight: float
    body_fat_percentage: Optional[float] = None
    current_strength_levels: StrengthLevels = field(default_factory=dict)
    average_calories_daily: float = 0.0
    average_protein_daily: float = 0.0
    workout_frequency: float = 0.0
    consistency_score: float = 0.0

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'CurrentMetrics':
        if payload.get('weight') is None:
            raise InvalidPredictionInput("'currentMetrics.weight' is required")
        return cls(
            weight=_number(payload['weight'], 'currentMetrics.weight'),
            body_fat_percentage=_optional_number(
                _field(payload, 'body_fat_percentage', 'bodyFatPercentage'), 'currentMetrics.bodyFatPercentage'
            ),
            current_strength_levels=parse_strength_levels(
                _field(payload, 'current_strength_levels', 'currentStrengthLevels'), 'currentStrengthLevels'
            ),
            average_calories_daily=_number(
                _field(payload, 'average_calories_daily', 'averageCaloriesDaily', 0), 'averageCaloriesDaily'
            ),
            average_protein_daily=_number(
                _field(payload, 'average_protein_daily', 'averageProteinDaily', 0), 'averageProteinDaily'
            ),
            workout_frequency=_number(_field(payload, 'workout_frequency', 'workoutFrequency', 0), 'workoutFrequency'),
            consistency_score=_number(_field(payload, 'consistency_score', 'consistencyScore', 0), 'consistencyScore'),
        )


@dataclass(frozen=True)
class UserGoals:
    type: GoalType
    target_weight: Optional[float] = None
    target_body_fat: Optional[float] = None
    target_date: Optional[datetime] = None
    strength_goals: Optional[StrengthLevels] = None
    specific_goals: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.target_date is not None:
            object.__setattr__(self, 'target_date', to_utc(self.target_date))

    @property
    def has_targets(self) -> bool:
        return (
            self.target_weight is not None
            or self.target_body_fat is not None
            or bool(self.strength_goals)
        )

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'UserGoals':
        goal_type = _enum(GoalType, payload.get('type'), 'goals.type')
        if goal_type is None:
            raise InvalidPredictionInput("'goals.type' is required")
        strength_goals = _field(payload, 'strength_goals', 'strengthGoals')
        return cls(
            type=goal_type,
            target_weight=_optional_number(_field(payload, 'target_weight', 'targetWeight'), 'goals.targetWeight'),
            target_body_fat=_optional_number(_field(payload, 'target_body_fat', 'targetBodyFat'), 'goals.targetBodyFat'),
            target_date=_optional_datetime(_field(payload, 'target_date', 'targetDate'), 'goals.targetDate'),
            strength_goals=(
                parse_strength_levels(strength_goals, 'goals.strengthGoals') if strength_goals is not None else None
            ),
            specific_goals=tuple(str(g) for g in (_field(payload, 'specific_goals', 'specificGoals') or [])),
        )


@dataclass(frozen=True)
class ContextFactors:
    age: Optional[int] = None
    gender: Optional[str] = None
    height: Optional[float] = None
    activity_level: Optional[str] = None
    experience: Optional[ExperienceLevel] = None
    injuries: Tuple[str, ...] = ()
    lifestyle: Optional[str] = None
    sleep_quality: Optional[float] = None
    stress_level: Optional[float] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> 'ContextFactors':
        age = _optional_number(payload.get('age'), 'contextFactors.age')
        return cls(
            age=int(age) if age is not None else None,
            gender=payload.get('gender'),
            height=_optional_number(payload.get('height'), 'contextFactors.height'),
            activity_level=_field(payload, 'activity_level', 'activityLevel'),
            experience=_enum(ExperienceLevel, payload.get('experience'), 'contextFactors.experience'),
            injuries=tuple(str(i) for i in (payload.get('injuries') or [])),
            lifestyle=payload.get('lifestyle'),
            sleep_quality=_optional_number(_field(payload, 'sleep_quality', 'sleepQuality'), 'contextFactors.sleepQuality'),
            stress_level=_optional_number(_field(payload, 'stress_level', 'stressLevel'), 'contextFactors.stressLevel'),
        )


@dataclass(frozen=True)
class PredictionInput:
    user_id: str
    historical_data: HistoricalData
    current_metrics: CurrentMetrics
    goals: UserGoals
    context_factors: Optional[ContextFactors] = None

    @property
    def experience(self) -> Optional[ExperienceLevel]:
        return self.context_factors.experience if self.context_factors else None

    @classmethod
    def from_dict(cls, payload: Any) -> 'PredictionInput':
        if not isinstance(payload, dict):
            raise InvalidPredictionInput("Prediction input must be a JSON object")
        current_metrics = _field(payload, 'current_metrics', 'currentMetrics')
        if current_metrics is None:
            raise InvalidPredictionInput("'currentMetrics' is required")
        goals = payload.get('goals')
        if goals is None:
            raise InvalidPredictionInput("'goals' is required")
        context = _field(payload, 'context_factors', 'contextFactors')
        return cls(
            user_id=str(_field(payload, 'user_id', 'userId', '')),
            historical_data=HistoricalData.from_dict(
                _mapping(_field(payload, 'historical_data', 'historicalData'), 'historicalData')
            ),
            current_metrics=CurrentMetrics.from_dict(_mapping(current_metrics, 'currentMetrics')),
            goals=UserGoals.from_dict(_mapping(goals, 'goals')),
            context_factors=ContextFactors.from_dict(_mapping(context, 'contextFactors')) if context is not None else None,
        )


# --- Outputs ---

@dataclass(frozen=True)
class WeightPoint:
    date: datetime
    weight: float
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {'date': _iso(self.date), 'weight': round(self.weight, 2), 'confidence': round(self.confidence, 3)}


@dataclass(frozen=True)
class WeightPrediction:
    predicted_weight: List[WeightPoint]
    expected_weight_in_30_days: float
    expected_weight_in_90_days: float
    rate_of_change: float  # kg per week, adherence adjusted
    confidence_interval: Tuple[float, float]

    def to_dict(self) -> Dict[str, Any]:
        lower, upper = self.confidence_interval
        return {
            'predicted_weight': [p.to_dict() for p in self.predicted_weight],
            'expected_weight_in_30_days': round(self.expected_weight_in_30_days, 2),
            'expected_weight_in_90_days': round(self.expected_weight_in_90_days, 2),
            'rate_of_change': round(self.rate_of_change, 4),
            'confidence_interval': {'lower': round(lower, 2), 'upper': round(upper, 2)},
        }


@dataclass(frozen=True)
class StrengthPoint:
    date: datetime
    weight: float

    def to_dict(self) -> Dict[str, Any]:
        return {'date': _iso(self.date), 'weight': round(self.weight, 2)}


@dataclass(frozen=True)
class StrengthPrediction:
    predicted_strength: Dict[str, List[StrengthPoint]]
    expected_gains_in_30_days: StrengthLevels
    expected_gains_in_90_days: StrengthLevels
    progression_rate: Dict[str, float]  # percent per month

    def to_dict(self) -> Dict[str, Any]:
        return {
            'predicted_strength': {
                exercise: [p.to_dict() for p in points] for exercise, points in self.predicted_strength.items()
            },
            'expected_gains_in_30_days': {k: round(v, 2) for k, v in self.expected_gains_in_30_days.items()},
            'expected_gains_in_90_days': {k: round(v, 2) for k, v in self.expected_gains_in_90_days.items()},
            'progression_rate': {k: round(v, 3) for k, v in self.progression_rate.items()},
        }


@dataclass(frozen=True)
class GoalAchievementPrediction:
    estimated_achievement_date: Optional[datetime]
    probability_of_success: float
    current_trajectory: Trajectory
    adjustments_needed: List[str]
    alternative_timeline: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'estimated_achievement_date': _iso(self.estimated_achievement_date),
            'probability_of_success': round(self.probability_of_success, 3),
            'current_trajectory': self.current_trajectory.value,
            'adjustments_needed': list(self.adjustments_needed),
            'alternative_timeline': _iso(self.alternative_timeline),
        }


@dataclass(frozen=True)
class PlateauPrediction:
    plateau_risk: PlateauRisk
    plateau_factors: List[str]
    prevention_strategies: List[str]
    estimated_plateau_date: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'plateau_risk': self.plateau_risk.value,
            'estimated_plateau_date': _iso(self.estimated_plateau_date),
            'plateau_factors': list(self.plateau_factors),
            'prevention_strategies': list(self.prevention_strategies),
        }


@dataclass(frozen=True)
class MilestonePrediction:
    milestone: str
    predicted_date: datetime
    confidence: float
    requirements: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'milestone': self.milestone,
            'predicted_date': _iso(self.predicted_date),
            'confidence': round(self.confidence, 3),
            'requirements': list(self.requirements),
        }


@dataclass(frozen=True)
class PredictionResult:
    weight_prediction: WeightPrediction
    strength_prediction: StrengthPrediction
    goal_achievement: GoalAchievementPrediction
    plateau_prediction: PlateauPrediction
    milestones: List[MilestonePrediction]
    recommendations: List[str]
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'weight_prediction': self.weight_prediction.to_dict(),
            'strength_prediction': self.strength_prediction.to_dict(),
            'goal_achievement': self.goal_achievement.to_dict(),
            'plateau_prediction': self.plateau_prediction.to_dict(),
            'milestones': [m.to_dict() for m in self.milestones],
            'recommendations': list(self.recommendations),
            'confidence': round(self.confidence, 3),
        }
