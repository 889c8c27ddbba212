"""
Shared client instances — Redis connection and the RQ queue.

Created lazily on first access so importing this module is always safe
(even when Redis is not reachable during tests).
"""
import logging

import redis

from planning_sync.config import REDIS_URL

logger = logging.getLogger('planning_sync.extensions')

_redis_client = None
_queue = None


def get_redis():
    """Return the process-wide Redis client."""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(REDIS_URL)
        logger.info("Redis client initialized for %s", REDIS_URL.split('@')[-1])
    return _redis_client


def get_queue():
    """Return the RQ queue sync jobs are enqueued on."""
    global _queue
    if _queue is None:
        from rq import Queue
        _queue = Queue('planning_sync', connection=get_redis())
    return _queue
