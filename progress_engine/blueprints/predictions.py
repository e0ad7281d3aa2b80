from flask import Blueprint, request, jsonify
from redis.exceptions import RedisError
from rq.exceptions import NoSuchJobError

from ..app import limiter, logger, PREDICTION_RATE_LIMIT
from ..errors import InvalidPredictionInput
from ..models import PredictionInput, parse_datetime
from ..predictor import predict_from_payload, validate_input
from ..tasks import enqueue_user_prediction, fetch_job

predictions_bp = Blueprint('predictions', __name__)

MAX_BATCH_SIZE = 500


def _reference_time(data):
    """Optional 'now' override so callers can reproduce a prediction."""
    value = data.get('now')
    return parse_datetime(value, 'now') if value else None


@predictions_bp.route('/v1/predictions', methods=['POST'])
@limiter.limit(PREDICTION_RATE_LIMIT)
def create_prediction():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify(error="Request body must be a JSON object"), 400

    now = _reference_time(data)
    result = predict_from_payload(data, now=now)
    return jsonify(result.to_dict()), 200


@predictions_bp.route('/v1/predictions/batch', methods=['POST'])
@limiter.limit(PREDICTION_RATE_LIMIT)
def create_prediction_batch():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify(error="Request body must be a JSON object"), 400

    inputs = data.get('inputs')
    if not isinstance(inputs, list) or not inputs:
        return jsonify(error="'inputs' must be a non-empty list of prediction inputs"), 400
    if len(inputs) > MAX_BATCH_SIZE:
        return jsonify(error=f"At most {MAX_BATCH_SIZE} inputs per batch"), 400

    now = _reference_time(data)

    # Validate everything up front so a bad payload never leaves a half-enqueued batch
    for index, payload in enumerate(inputs):
        try:
            validate_input(PredictionInput.from_dict(payload))
        except InvalidPredictionInput as e:
            return jsonify(error=f"inputs[{index}]: {e}"), 400

    try:
        jobs = [enqueue_user_prediction(payload, now=now) for payload in inputs]
    except RedisError as e:
        logger.error(f"Failed to enqueue prediction batch: {e}", exc_info=True)
        return jsonify(error="Prediction queue unavailable"), 503

    logger.info(f"Enqueued {len(jobs)} prediction jobs")
    return jsonify(jobs=[
        {'job_id': job.id, 'user_id': job.meta.get('user_id')} for job in jobs
    ]), 202


@predictions_bp.route('/v1/predictions/jobs/<job_id>', methods=['GET'])
def get_prediction_job(job_id):
    try:
        job = fetch_job(job_id)
    except NoSuchJobError:
        return jsonify(error="Prediction job not found"), 404
    except RedisError as e:
        logger.error(f"Failed to fetch prediction job {job_id}: {e}", exc_info=True)
        return jsonify(error="Prediction queue unavailable"), 503

    status = job.get_status()
    status = getattr(status, 'value', status)
    body = {'job_id': job.id, 'user_id': job.meta.get('user_id'), 'status': status}
    if status == 'finished':
        body['result'] = job.return_value()
    elif status == 'failed':
        body['error'] = "Prediction job failed"
    return jsonify(body), 200
