import logging
import os
from rq import Worker
from .tasks import queue, redis_conn

if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    worker = Worker([queue], connection=redis_conn)
    logging.info("Starting prediction worker on queue %s", queue.name)
    worker.work()
