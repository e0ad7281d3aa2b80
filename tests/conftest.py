import pytest
import os
import sys
from datetime import datetime, timedelta, timezone

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

from progress_engine.app import app

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def client():
    app.config.update(TESTING=True)
    with app.test_client() as client:
        yield client


@pytest.fixture()
def now():
    return NOW


@pytest.fixture()
def sample_payload():
    """A realistic camelCase request body: four weeks of steady weight loss."""
    return {
        "userId": "user-123",
        "historicalData": {
            "workouts": [
                {
                    "date": (NOW - timedelta(days=days)).isoformat(),
                    "type": "strength",
                    "duration": 60,
                    "volume": volume,
                    "exercises": [{"name": "Bench Press", "sets": 3, "reps": 5, "weight": load}],
                }
                for days, volume, load in [(56, 4000, 50.0), (42, 4600, 52.5), (28, 3900, 55.0), (14, 5200, 57.5)]
            ],
            "nutrition": [
                {"date": (NOW - timedelta(days=d)).isoformat(), "calories": 2100, "protein": 150,
                 "carbs": 200, "fat": 70, "adherenceToGoal": 0.9}
                for d in range(0, 28, 2)
            ],
            "bodyMetrics": [
                {"date": (NOW - timedelta(days=28)).isoformat(), "weight": 80.0, "bodyFatPercentage": 25.0},
                {"date": NOW.isoformat(), "weight": 78.0, "bodyFatPercentage": 24.0},
            ],
            "adherenceRate": 0.9,
            "streakHistory": [5, 12, 45],
        },
        "currentMetrics": {
            "weight": 78.0,
            "bodyFatPercentage": 24.0,
            "currentStrengthLevels": {"bench": 60.0, "squat": None},
            "averageCaloriesDaily": 2100,
            "averageProteinDaily": 150,
            "workoutFrequency": 3,
            "consistencyScore": 85,
        },
        "goals": {
            "type": "weight_loss",
            "targetWeight": 70.0,
            "targetDate": (NOW + timedelta(days=200)).isoformat(),
        },
        "contextFactors": {"experience": "intermediate", "age": 34},
    }
