from flask import Flask, jsonify
import os
import logging
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from redis.exceptions import RedisError
from werkzeug.exceptions import HTTPException

from .errors import InvalidPredictionInput

app = Flask(__name__)

# --- Rate Limiter Configuration ---
# Point this at redis (e.g. redis://localhost:6379/1) when running several app processes
RATELIMIT_STORAGE_URL = os.getenv("RATELIMIT_STORAGE_URL", "memory://")
PREDICTION_RATE_LIMIT = os.getenv("PREDICTION_RATE_LIMIT", "60 per hour")
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"],
    storage_uri=RATELIMIT_STORAGE_URL,
    strategy="fixed-window",
)
limiter.init_app(app)

# Configure logging
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = app.logger


@app.errorhandler(InvalidPredictionInput)
def handle_invalid_input(e):
    logger.info(f"Rejected prediction input: {e}")
    return jsonify(error=str(e)), 400


@app.errorhandler(Exception)
def handle_exception(e):
    """Generic exception handler."""
    if isinstance(e, HTTPException):
        return e
    app.logger.error(f"Unhandled exception: {e}", exc_info=True)
    if isinstance(e, RedisError):
        return jsonify(error="Prediction queue unavailable"), 503
    return jsonify(error="An internal server error occurred"), 500


# Import blueprints after the limiter and logger exist; they import both from here
from .blueprints.predictions import predictions_bp  # noqa: E402

app.register_blueprint(predictions_bp)
