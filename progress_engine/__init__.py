from .errors import InvalidPredictionInput, PredictionError
from .models import PredictionInput, PredictionResult
from .predictor import generate_predictions, predict_from_payload

__all__ = [
    "InvalidPredictionInput",
    "PredictionError",
    "PredictionInput",
    "PredictionResult",
    "generate_predictions",
    "predict_from_payload",
]
