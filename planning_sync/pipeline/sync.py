"""
Sync orchestrator — one client's run from PlanIt search to CRM delivery.

For one client:
  LOOKBACK → SEARCH → DEDUPE / KEYWORD FILTER → per lead: DETAIL → DELIVER → SAVE
  → CHECKPOINT → RUN LOG

Per-lead delivery failures are recorded on the run and the lead is still
stored, so it is never matched again. Anything unexpected is caught once at
the top and recorded as a single critical error; a SyncRun is always produced.
"""
import logging
import math
import time
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, Optional

from planning_sync.config import SYNC_DEFAULT_LOOKBACK_DAYS, SYNC_PUSH_DELAY_SECONDS
from planning_sync.models.lead import Lead
from planning_sync.models.sync_run import SyncRun
from planning_sync.utils import new_id, utcnow, as_utc

logger = logging.getLogger('pipeline.sync')

SECONDS_PER_DAY = 86400


# ── Candidate helpers ────────────────────────────────────────────────────────

def lookback_days(last_run_at: Optional[datetime], now: datetime) -> int:
    """Whole days of history to request since the last run (7 days if never run), at least 1."""
    if last_run_at is None:
        since = now - timedelta(days=SYNC_DEFAULT_LOOKBACK_DAYS)
    else:
        since = as_utc(last_run_at)
    elapsed_days = (now - since).total_seconds() / SECONDS_PER_DAY
    return max(1, math.ceil(elapsed_days))


def matches_keywords(candidate: Dict[str, Any], keywords: Optional[Iterable[str]]) -> bool:
    """Case-insensitive substring match of any keyword against description + address."""
    wanted = [k.strip().lower() for k in (keywords or []) if k and k.strip()]
    if not wanted:
        return True
    content = f"{candidate.get('description') or ''} {candidate.get('address') or ''}".lower()
    return any(keyword in content for keyword in wanted)


def candidate_reference(candidate: Dict[str, Any]) -> Optional[str]:
    return _first(candidate, 'app_ref', 'uid')


def build_lead(client_id: str, candidate: Dict[str, Any]) -> Lead:
    """New, unsynced Lead from a raw PlanIt record."""
    return Lead(
        id=new_id(),
        client_id=client_id,
        external_reference=candidate_reference(candidate),
        address=candidate.get('address') or '',
        postcode=_first(candidate, 'postcode', 'pc_district') or 'N/A',
        description=candidate.get('description') or '',
        application_type=_first(candidate, 'applic', 'app_type') or '',
        authority_name=_first(candidate, 'authority', 'area_name'),
        source_url=_first(candidate, 'url', 'link') or '',
        agent_name=None,
        agent_address=None,
        crm_contact_id=None,
        created_at=utcnow(),
        synced_at=None,
    )


def apply_detail(lead: Lead, detail: Optional[Dict[str, Any]]) -> None:
    """Copy agent name/address from a detail record; missing values stay None."""
    agent = (detail or {}).get('agent')
    if not isinstance(agent, dict):
        return
    lead.agent_name = agent.get('name') or None
    lead.agent_address = agent.get('address') or None


def _first(record, *keys):
    for key in keys:
        value = record.get(key)
        if value not in (None, ''):
            return value
    return None


# ── Orchestrator ─────────────────────────────────────────────────────────────

class SyncOrchestrator:
    """
    Runs the sync for one client at a time.

    Collaborators are injected so tests (and alternative storage) can swap them:
        repository — SyncRepository
        source     — PlanItClient-like: fetch_candidates(), fetch_detail()
        crm        — GhlClient-like: deliver()
    """

    def __init__(self, repository=None, source=None, crm=None,
                 push_delay: float = SYNC_PUSH_DELAY_SECONDS):
        if repository is None:
            from planning_sync.services.repository import SqlSyncRepository
            repository = SqlSyncRepository()
        if source is None:
            from planning_sync.services.planit import PlanItClient
            source = PlanItClient()
        if crm is None:
            from planning_sync.services.ghl import GhlClient
            crm = GhlClient()
        self.repository = repository
        self.source = source
        self.crm = crm
        self.push_delay = push_delay

    def run_client_sync(self, client_id: str) -> Optional[SyncRun]:
        """
        Sync one client. Returns the SyncRun, or None (without side effects)
        when the client is unknown, inactive, or has no criteria.

        A storage fault while loading the client or its criteria is recorded
        as a critical-error run rather than raised.
        """
        started = time.monotonic()
        log_ctx = {'client_id': client_id}

        try:
            client = self.repository.get_client(client_id)
            criteria = None
            if client is not None and client.active:
                criteria = self.repository.get_criteria(client_id)
        except Exception as e:
            logger.error("Could not load client %s", client_id, exc_info=True, extra=log_ctx)
            return self._record_run(client_id, started, 0, 0, 0, [f"Critical sync error: {e}"])

        if client is None or not client.active:
            logger.info("Client %s missing or inactive, skipping sync", client_id, extra=log_ctx)
            return None
        if criteria is None:
            logger.info("Client %s has no criteria, skipping sync", client_id, extra=log_ctx)
            return None

        errors = []
        found = created = sent = 0

        try:
            days = lookback_days(criteria.last_run_at, utcnow())
            candidates = self.source.fetch_candidates(criteria, days)
            found = len(candidates)

            known = {lead.external_reference for lead in self.repository.list_leads(client_id)}

            for candidate in candidates:
                reference = candidate_reference(candidate)
                if not reference:
                    logger.warning("Skipping application without a reference", extra=log_ctx)
                    continue
                if reference in known:
                    continue
                if not matches_keywords(candidate, criteria.keywords):
                    continue

                known.add(reference)
                created += 1
                lead = build_lead(client_id, candidate)

                detail = self.source.fetch_detail(_first(candidate, 'doc_id', 'name'))
                if detail.found:
                    apply_detail(lead, detail.data)

                try:
                    contact_id = self.crm.deliver(client, lead)
                except Exception as e:
                    errors.append(f"CRM delivery failed for {reference}: {e}")
                    logger.error("CRM delivery failed for %s: %s", reference, e,
                                 extra={**log_ctx, 'external_reference': reference})
                else:
                    lead.crm_contact_id = contact_id
                    lead.synced_at = utcnow()
                    sent += 1

                # Stored either way so a failed lead is not re-matched next run
                self.repository.save_lead(lead)

                time.sleep(self.push_delay)

            criteria.last_run_at = utcnow()
            self.repository.save_criteria(criteria)

        except Exception as e:
            logger.error("Critical error syncing client %s", client_id, exc_info=True, extra=log_ctx)
            errors.append(f"Critical sync error: {e}")

        return self._record_run(client_id, started, found, created, sent, errors)

    def _record_run(self, client_id, started, found, created, sent, errors) -> SyncRun:
        """Build the SyncRun and append it to the run log; a log write failure is only logged."""
        log_ctx = {'client_id': client_id}
        run = SyncRun(
            id=new_id(),
            client_id=client_id,
            run_at=utcnow(),
            found=found,
            created=created,
            sent=sent,
            errors=errors,
            duration_ms=int((time.monotonic() - started) * 1000),
        )

        try:
            self.repository.append_run(run)
        except Exception:
            logger.error("Could not record sync run for client %s", client_id, exc_info=True, extra=log_ctx)

        logger.info("Sync for %s: found=%d new=%d sent=%d errors=%d (%dms)",
                    client_id, found, created, sent, len(errors), run.duration_ms, extra=log_ctx)
        return run


def run_client_sync(client_id: str) -> Optional[SyncRun]:
    """Sync one client with the default repository and API clients."""
    return SyncOrchestrator().run_client_sync(client_id)
