import copy
import pytest
from datetime import datetime, timezone

from progress_engine.errors import InvalidPredictionInput, PredictionError
from progress_engine.models import (
    ExperienceLevel,
    GoalType,
    PredictionInput,
    parse_datetime,
)


def test_camel_case_payload_is_parsed(sample_payload, now):
    parsed = PredictionInput.from_dict(sample_payload)

    assert parsed.user_id == "user-123"
    assert parsed.goals.type is GoalType.WEIGHT_LOSS
    assert parsed.goals.target_weight == 70.0
    assert parsed.experience is ExperienceLevel.INTERMEDIATE
    assert parsed.context_factors.age == 34
    assert parsed.current_metrics.consistency_score == 85
    assert parsed.historical_data.adherence_rate == 0.9
    assert parsed.historical_data.current_streak == 45
    assert parsed.historical_data.body_metrics[-1].date == now
    assert parsed.historical_data.body_metrics[0].body_fat_percentage == 25.0
    assert parsed.historical_data.workouts[0].exercises[0].name == "Bench Press"
    assert parsed.historical_data.nutrition[0].adherence_to_goal == 0.9


def test_snake_case_keys_are_accepted():
    parsed = PredictionInput.from_dict({
        "user_id": "u1",
        "historical_data": {"body_metrics": [{"date": "2024-05-01", "weight": 81}], "adherence_rate": 0.5},
        "current_metrics": {"weight": 80, "consistency_score": 70},
        "goals": {"type": "maintenance", "target_weight": 79},
    })

    assert parsed.user_id == "u1"
    assert parsed.historical_data.body_metrics[0].weight == 81.0
    assert parsed.historical_data.adherence_rate == 0.5
    assert parsed.current_metrics.consistency_score == 70
    assert parsed.goals.target_weight == 79
    assert parsed.context_factors is None
    assert parsed.experience is None


def test_null_strength_levels_are_dropped(sample_payload):
    parsed = PredictionInput.from_dict(sample_payload)
    assert parsed.current_metrics.current_strength_levels == {"bench": 60.0}


def test_history_is_sorted_by_date(sample_payload):
    payload = copy.deepcopy(sample_payload)
    payload["historicalData"]["bodyMetrics"].reverse()
    payload["historicalData"]["workouts"].reverse()

    parsed = PredictionInput.from_dict(payload)

    metric_dates = [m.date for m in parsed.historical_data.body_metrics]
    workout_dates = [w.date for w in parsed.historical_data.workouts]
    assert metric_dates == sorted(metric_dates)
    assert workout_dates == sorted(workout_dates)


def test_goal_type_is_case_insensitive(sample_payload):
    payload = copy.deepcopy(sample_payload)
    payload["goals"]["type"] = "Muscle_Gain"
    assert PredictionInput.from_dict(payload).goals.type is GoalType.MUSCLE_GAIN


@pytest.mark.parametrize("mutate, message", [
    (lambda p: p.pop("currentMetrics"), "currentMetrics"),
    (lambda p: p.pop("goals"), "goals"),
    (lambda p: p["currentMetrics"].pop("weight"), "weight"),
    (lambda p: p["goals"].update(type="bulk"), "goals.type"),
    (lambda p: p["goals"].pop("type"), "goals.type"),
    (lambda p: p["goals"].update(targetDate="next tuesday"), "goals.targetDate"),
    (lambda p: p["currentMetrics"].update(weight="heavy"), "currentMetrics.weight"),
    (lambda p: p["currentMetrics"].update(weight=True), "currentMetrics.weight"),
    (lambda p: p["historicalData"].update(workouts={"date": "2024-01-01"}), "workouts"),
    (lambda p: p["historicalData"]["bodyMetrics"][0].pop("weight"), "weight"),
    (lambda p: p["contextFactors"].update(experience="guru"), "experience"),
])
def test_malformed_payloads_raise(sample_payload, mutate, message):
    payload = copy.deepcopy(sample_payload)
    mutate(payload)

    with pytest.raises(InvalidPredictionInput) as excinfo:
        PredictionInput.from_dict(payload)
    assert message in str(excinfo.value)


def test_non_object_payload_raises():
    with pytest.raises(InvalidPredictionInput):
        PredictionInput.from_dict(["not", "an", "object"])


def test_invalid_input_is_a_prediction_error_and_value_error():
    assert issubclass(InvalidPredictionInput, PredictionError)
    assert issubclass(InvalidPredictionInput, ValueError)


def test_parse_datetime_normalizes_to_utc():
    assert parse_datetime("2024-06-01T12:00:00Z", "d") == datetime(2024, 6, 1, 12, tzinfo=timezone.utc)
    assert parse_datetime("2024-06-01T14:00:00+02:00", "d") == datetime(2024, 6, 1, 12, tzinfo=timezone.utc)
    assert parse_datetime(datetime(2024, 6, 1, 12), "d").tzinfo is timezone.utc
    assert parse_datetime("2024-06-01", "d") == datetime(2024, 6, 1, tzinfo=timezone.utc)


def test_result_serializes_enums_and_dates(sample_payload, now):
    from progress_engine.predictor import predict_from_payload

    body = predict_from_payload(sample_payload, now=now).to_dict()

    assert body["goal_achievement"]["current_trajectory"] == "ahead"
    assert body["plateau_prediction"]["plateau_risk"] == "low"
    assert body["weight_prediction"]["predicted_weight"][0]["date"] == "2024-06-08T12:00:00+00:00"
    assert set(body["weight_prediction"]["confidence_interval"]) == {"lower", "upper"}


def test_records_built_in_code_are_normalized_to_utc():
    from progress_engine.models import BodyMetricEntry, NutritionEntry, UserGoals, WorkoutEntry

    naive = datetime(2024, 6, 1, 12, 0)
    expected = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

    assert WorkoutEntry(date=naive).date == expected
    assert NutritionEntry(date=naive).date == expected
    assert BodyMetricEntry(date=naive, weight=80.0).date.tzinfo is timezone.utc
    assert UserGoals(GoalType.WEIGHT_LOSS, target_date=naive).target_date == expected
    assert UserGoals(GoalType.MAINTENANCE).target_date is None
