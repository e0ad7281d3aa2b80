import os
import logging
from redis import Redis
from rq import Queue, get_current_job
from rq.job import Job

from .models import parse_datetime
from .predictor import predict_from_payload

logger = logging.getLogger(__name__)

# Redis connection for RQ
redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
redis_conn = Redis.from_url(redis_url)

# Default queue used by the API and worker
queue = Queue(os.getenv("PREDICTION_QUEUE", "predictions"), connection=redis_conn)

RESULT_TTL_SECONDS = int(os.getenv("PREDICTION_RESULT_TTL", "86400"))
JOB_TIMEOUT_SECONDS = 60


def enqueue_user_prediction(payload, now=None):
    """Enqueue one prediction job per user; ``now`` pins the reference time for the job."""
    user_id = str(payload.get("userId") or payload.get("user_id") or "")
    return queue.enqueue(
        run_user_prediction,
        payload,
        now.isoformat() if now is not None else None,
        result_ttl=RESULT_TTL_SECONDS,
        job_timeout=JOB_TIMEOUT_SECONDS,
        meta={"user_id": user_id},
    )


def run_user_prediction(payload, now_iso=None):
    """Generate predictions for a single user and return the JSON-ready result."""
    job = get_current_job()
    now = parse_datetime(now_iso, "now") if now_iso else None
    user_id = payload.get("userId") or payload.get("user_id")
    logger.info("Running prediction job %s for user %s", job.id if job else "-", user_id)
    result = predict_from_payload(payload, now=now)
    return result.to_dict()


def fetch_job(job_id):
    return Job.fetch(job_id, connection=redis_conn)
