"""Exceptions raised by the prediction engine."""


class PredictionError(Exception):
    """Base class for prediction engine errors."""


class InvalidPredictionInput(PredictionError, ValueError):
    """Raised when a prediction request is missing required fields or is malformed."""
