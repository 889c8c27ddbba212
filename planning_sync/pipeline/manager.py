"""
Sync manager — enqueueing and per-client serialization of sync runs.

The "run this now" trigger (HTTP API or an external scheduler) calls
launch_sync()/launch_all_syncs(); an RQ worker executes run_sync_job(). A
Redis lock per client keeps two runs for the same client from interleaving.
"""
import logging
from datetime import date
from typing import List, Optional

from redis.exceptions import LockError

from planning_sync.config import SYNC_LOCK_TIMEOUT_SECONDS, SYNC_JOB_TIMEOUT_SECONDS
from planning_sync.extensions import get_redis, get_queue
from planning_sync.pipeline.sync import SyncOrchestrator
from planning_sync.services.notifications import notify_sync_errors
from planning_sync.services.repository import SqlSyncRepository

logger = logging.getLogger('pipeline.manager')

LOCK_KEY = 'planning_sync:lock:{client_id}'

# Lock must outlive an RQ job that runs to its timeout
LOCK_GRACE_SECONDS = 300


# ── Public API ────────────────────────────────────────────────────────────────

def launch_sync(client_id: str):
    """Enqueue a sync run for one client. Returns the RQ job."""
    job = get_queue().enqueue(run_sync_job, client_id, job_timeout=SYNC_JOB_TIMEOUT_SECONDS)
    logger.info("Enqueued sync for client %s (job %s)", client_id, job.id)
    return job


def launch_all_syncs(only_due: bool = False, today: Optional[date] = None, repository=None) -> list:
    """Enqueue a sync for every active client (or only those scheduled for today)."""
    repository = repository or SqlSyncRepository()
    if only_due:
        clients = list_due_clients(repository, today or date.today())
    else:
        clients = [c for c in repository.list_clients() if c.active]
    return [launch_sync(client.id) for client in clients]


def list_due_clients(repository, today: date) -> List:
    """Active clients whose criteria schedule_day (Sunday = 0) is today's weekday."""
    weekday = (today.weekday() + 1) % 7
    due = []
    for client in repository.list_clients():
        if not client.active:
            continue
        criteria = repository.get_criteria(client.id)
        if criteria is not None and criteria.schedule_day == weekday:
            due.append(client)
    return due


# ── Job (executed by the RQ worker) ──────────────────────────────────────────

def lock_timeout() -> int:
    """Per-client lock TTL in seconds, never shorter than the RQ job timeout plus grace."""
    return max(SYNC_LOCK_TIMEOUT_SECONDS, SYNC_JOB_TIMEOUT_SECONDS + LOCK_GRACE_SECONDS)


def run_sync_job(client_id: str, orchestrator: SyncOrchestrator = None):
    """
    Run one client's sync under its Redis lock.

    Returns the SyncRun dict, or None when the client was skipped or another
    run for the same client holds the lock.
    """
    lock = get_redis().lock(LOCK_KEY.format(client_id=client_id), timeout=lock_timeout())
    if not lock.acquire(blocking=False):
        logger.warning("Sync already running for client %s, skipping", client_id)
        return None

    try:
        orchestrator = orchestrator or SyncOrchestrator()
        run = orchestrator.run_client_sync(client_id)
    finally:
        try:
            lock.release()
        except LockError:
            logger.warning("Sync lock for client %s expired before release", client_id)

    if run is None:
        return None

    if run.errors:
        try:
            client = orchestrator.repository.get_client(client_id)
        except Exception:
            logger.warning("Could not load client %s for the error notification", client_id, exc_info=True)
            client = None
        notify_sync_errors(client, run)

    return run.to_dict()
