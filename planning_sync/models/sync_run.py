"""
SyncRun model — the run log. One row per orchestrator invocation, never updated.
"""
from sqlalchemy import Column, Integer, Text, DateTime, JSON, ForeignKey

from planning_sync.database import Base
from planning_sync.utils import new_id, utcnow, isoformat


class SyncRun(Base):
    __tablename__ = 'sync_runs'

    id = Column(Text, primary_key=True, default=new_id)
    client_id = Column(Text, ForeignKey('clients.id'), nullable=False, index=True)
    run_at = Column(DateTime(timezone=True), default=utcnow)
    found = Column(Integer, nullable=False, default=0)
    created = Column(Integer, nullable=False, default=0)
    sent = Column(Integer, nullable=False, default=0)
    errors = Column(JSON, default=list)
    duration_ms = Column(Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            'id': self.id,
            'client_id': self.client_id,
            'run_at': isoformat(self.run_at),
            'found': self.found,
            'created': self.created,
            'sent': self.sent,
            'errors': list(self.errors or []),
            'duration_ms': self.duration_ms,
        }
