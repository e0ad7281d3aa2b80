import copy
import math
import pytest
from datetime import datetime, timedelta, timezone

from progress_engine.errors import InvalidPredictionInput
from progress_engine.goals import NO_GOALS_MESSAGE
from progress_engine.models import (
    BodyMetricEntry,
    CurrentMetrics,
    GoalType,
    HistoricalData,
    PlateauRisk,
    PredictionInput,
    Trajectory,
    UserGoals,
    WorkoutEntry,
)
from progress_engine.predictor import generate_predictions, predict_from_payload


def test_steady_weight_loss_user(sample_payload, now):
    result = predict_from_payload(sample_payload, now=now)

    weight = result.weight_prediction
    assert len(weight.predicted_weight) == 25
    assert weight.predicted_weight[0].date == now + timedelta(days=7)
    assert weight.rate_of_change < 0
    assert weight.expected_weight_in_90_days < weight.expected_weight_in_30_days < 78.0

    goal = result.goal_achievement
    assert goal.current_trajectory in (Trajectory.ON_TRACK, Trajectory.AHEAD)
    assert 0.79 <= goal.probability_of_success <= 0.95
    assert abs((goal.estimated_achievement_date - (now + timedelta(weeks=16))).total_seconds()) < 1

    assert result.plateau_prediction.plateau_risk is PlateauRisk.LOW
    assert set(result.strength_prediction.predicted_strength) == {"bench"}
    assert result.confidence == pytest.approx(0.5498)


def test_milestones_are_sorted_by_date(sample_payload, now):
    result = predict_from_payload(sample_payload, now=now)

    dates = [m.predicted_date for m in result.milestones]
    assert dates == sorted(dates)
    names = {m.milestone for m in result.milestones}
    assert {"Reach 75kg", "Reach 70kg", "bench: 80kg", "60 day streak"} <= names


def test_user_without_goals(sample_payload, now):
    payload = copy.deepcopy(sample_payload)
    payload["goals"] = {"type": "maintenance"}

    goal = predict_from_payload(payload, now=now).goal_achievement

    assert goal.estimated_achievement_date is None
    assert goal.probability_of_success == 0
    assert any("no goals set" in a.lower() for a in goal.adjustments_needed)


def test_minimal_input_produces_full_result(now):
    result = predict_from_payload(
        {"currentMetrics": {"weight": 72}, "goals": {"type": "endurance"}}, now=now
    )

    assert result.weight_prediction.rate_of_change == 0
    assert result.weight_prediction.expected_weight_in_90_days == pytest.approx(72.0)
    assert result.strength_prediction.predicted_strength == {}
    assert result.plateau_prediction.plateau_risk is PlateauRisk.HIGH
    assert 0.0 <= result.confidence <= 1.0
    assert [m.milestone for m in result.milestones][0] == "30 day streak"


def test_predictions_are_deterministic(sample_payload, now):
    first = predict_from_payload(sample_payload, now=now)
    second = predict_from_payload(copy.deepcopy(sample_payload), now=now)

    assert first == second
    assert first.to_dict() == second.to_dict()


def test_naive_reference_time_is_treated_as_utc(sample_payload, now):
    aware = predict_from_payload(sample_payload, now=now)
    naive = predict_from_payload(sample_payload, now=datetime(2024, 6, 1, 12, 0))
    assert aware == naive


@pytest.mark.parametrize("adherence, consistency", [(5.0, 400), (-2.0, -50), (0.0, 0)])
def test_scores_stay_in_unit_range(sample_payload, now, adherence, consistency):
    payload = copy.deepcopy(sample_payload)
    payload["historicalData"]["adherenceRate"] = adherence
    payload["currentMetrics"]["consistencyScore"] = consistency

    result = predict_from_payload(payload, now=now)

    assert 0.0 <= result.confidence <= 1.0
    assert 0.0 <= result.goal_achievement.probability_of_success <= 0.95
    for point in result.weight_prediction.predicted_weight:
        assert 0.3 <= point.confidence <= 1.0


@pytest.mark.parametrize("weight", [0, -70, "nan", float("inf")])
def test_unusable_weight_is_rejected(sample_payload, now, weight):
    payload = copy.deepcopy(sample_payload)
    payload["currentMetrics"]["weight"] = weight

    with pytest.raises(InvalidPredictionInput):
        predict_from_payload(payload, now=now)


def test_generate_predictions_rejects_wrong_type(now):
    with pytest.raises(InvalidPredictionInput):
        generate_predictions({"currentMetrics": {"weight": 80}}, now=now)


def test_generate_predictions_accepts_parsed_input(sample_payload, now):
    parsed = PredictionInput.from_dict(sample_payload)
    result = generate_predictions(parsed, now=now)
    assert not any(math.isnan(p.weight) for p in result.weight_prediction.predicted_weight)


def test_records_built_with_naive_dates(now):
    # Callers building records in code may pass naive datetimes; they are UTC
    naive_now = now.replace(tzinfo=None)
    history = HistoricalData(
        workouts=(
            WorkoutEntry(date=naive_now - timedelta(days=30), volume=1000.0),
            WorkoutEntry(date=naive_now - timedelta(days=2), volume=1400.0),
        ),
        body_metrics=(
            BodyMetricEntry(date=naive_now - timedelta(days=28), weight=80.0),
            BodyMetricEntry(date=naive_now, weight=78.0),
        ),
        adherence_rate=0.9,
    )
    parsed = PredictionInput(
        user_id="user-naive",
        historical_data=history,
        current_metrics=CurrentMetrics(weight=78.0, consistency_score=85),
        goals=UserGoals(GoalType.WEIGHT_LOSS, target_weight=70.0, target_date=naive_now + timedelta(days=200)),
    )

    result = generate_predictions(parsed, now=now)

    assert history.workouts[0].date.tzinfo is timezone.utc
    assert result.goal_achievement.current_trajectory is Trajectory.AHEAD
    assert result.weight_prediction.rate_of_change < 0


def test_glacial_lift_progress_degrades_instead_of_failing(sample_payload, now):
    payload = copy.deepcopy(sample_payload)
    payload["historicalData"]["workouts"] = [
        {"date": (now - timedelta(days=360)).isoformat(), "exercises": [{"name": "Bench Press", "weight": 99.999}]},
        {"date": (now - timedelta(days=1)).isoformat(), "exercises": [{"name": "Bench Press", "weight": 100.0}]},
    ]
    payload["currentMetrics"]["currentStrengthLevels"] = {"bench": 100.0}
    payload["contextFactors"]["experience"] = "elite"
    payload["goals"] = {"type": "strength", "strengthGoals": {"bench": 300.0}}

    result = predict_from_payload(payload, now=now)

    assert result.goal_achievement.current_trajectory is Trajectory.OFF_TRACK
    assert result.goal_achievement.estimated_achievement_date is None
    assert not any(m.milestone.startswith("bench") for m in result.milestones)


@pytest.mark.parametrize("experience", ["beginner", "elite"])
def test_strength_milestone_ignores_experience_scaling(sample_payload, now, experience):
    payload = copy.deepcopy(sample_payload)
    payload["historicalData"]["workouts"] = []
    payload["contextFactors"]["experience"] = experience

    result = predict_from_payload(payload, now=now)

    bench = next(m for m in result.milestones if m.milestone == "bench: 80kg")
    expected_days = math.log(80 / 60) / math.log(1.02) * 30
    assert (bench.predicted_date - now).total_seconds() == pytest.approx(expected_days * 86400, abs=1)
