"""
Persistence for the sync pipeline — clients, criteria, leads, run log.

SyncRepository is the interface the orchestrator depends on; SqlSyncRepository
backs it with SQLAlchemy. Each call opens and closes its own session.
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from planning_sync.database import get_session
from planning_sync.models.client import ClientAccount
from planning_sync.models.criteria import SyncCriteria
from planning_sync.models.lead import Lead
from planning_sync.models.sync_run import SyncRun

logger = logging.getLogger('services.repository')


class SyncRepository(ABC):
    """Read/write operations the sync pipeline needs from storage."""

    @abstractmethod
    def list_clients(self) -> List[ClientAccount]:
        ...

    @abstractmethod
    def get_client(self, client_id: str) -> Optional[ClientAccount]:
        ...

    @abstractmethod
    def get_criteria(self, client_id: str) -> Optional[SyncCriteria]:
        ...

    @abstractmethod
    def save_criteria(self, criteria: SyncCriteria) -> None:
        ...

    @abstractmethod
    def list_leads(self, client_id: str) -> List[Lead]:
        """All leads ever stored for the client, newest first."""
        ...

    @abstractmethod
    def save_lead(self, lead: Lead) -> bool:
        """Store a new lead. Returns False if (client, reference) already exists."""
        ...

    @abstractmethod
    def append_run(self, run: SyncRun) -> None:
        ...

    @abstractmethod
    def list_runs(self, client_id: Optional[str] = None, limit: Optional[int] = None) -> List[SyncRun]:
        """Run log entries, newest first."""
        ...


class SqlSyncRepository(SyncRepository):
    """SQLAlchemy implementation. Pass a session factory to target another engine."""

    def __init__(self, session_factory=None):
        self._session_factory = session_factory or get_session

    # ── Clients + criteria ────────────────────────────────────────────

    def list_clients(self):
        session = self._session_factory()
        try:
            return session.query(ClientAccount).order_by(ClientAccount.created_at).all()
        finally:
            session.close()

    def get_client(self, client_id):
        session = self._session_factory()
        try:
            return session.get(ClientAccount, client_id)
        finally:
            session.close()

    def get_criteria(self, client_id):
        session = self._session_factory()
        try:
            return session.query(SyncCriteria).filter_by(client_id=client_id).first()
        finally:
            session.close()

    def save_criteria(self, criteria):
        session = self._session_factory()
        try:
            session.merge(criteria)
            session.commit()
        except Exception:
            session.rollback()
            logger.error("Failed to save criteria for client %s", criteria.client_id, exc_info=True)
            raise
        finally:
            session.close()

    # ── Leads ─────────────────────────────────────────────────────────

    def list_leads(self, client_id):
        session = self._session_factory()
        try:
            return (
                session.query(Lead)
                .filter_by(client_id=client_id)
                .order_by(Lead.created_at.desc())
                .all()
            )
        finally:
            session.close()

    def save_lead(self, lead):
        session = self._session_factory()
        try:
            session.add(lead)
            session.commit()
            return True
        except IntegrityError:
            session.rollback()
            logger.warning("Lead %s already stored for client %s, skipping",
                           lead.external_reference, lead.client_id)
            return False
        except Exception:
            session.rollback()
            logger.error("Failed to save lead %s for client %s",
                         lead.external_reference, lead.client_id, exc_info=True)
            raise
        finally:
            session.close()

    # ── Run log ───────────────────────────────────────────────────────

    def append_run(self, run):
        session = self._session_factory()
        try:
            session.add(run)
            session.commit()
        except Exception:
            session.rollback()
            logger.error("Failed to append sync run for client %s", run.client_id, exc_info=True)
            raise
        finally:
            session.close()

    def list_runs(self, client_id=None, limit=None):
        session = self._session_factory()
        try:
            query = session.query(SyncRun)
            if client_id:
                query = query.filter_by(client_id=client_id)
            query = query.order_by(SyncRun.run_at.desc())
            if limit:
                query = query.limit(limit)
            return query.all()
        finally:
            session.close()
