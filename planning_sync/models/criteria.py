"""
SyncCriteria model — one per client: the search area and filters plus the run checkpoint.

last_run_at is only ever written by the sync orchestrator at the end of a run.
"""
from sqlalchemy import Column, Integer, Float, Text, DateTime, JSON, ForeignKey

from planning_sync.database import Base
from planning_sync.utils import new_id


class SyncCriteria(Base):
    __tablename__ = 'client_criteria'

    id = Column(Text, primary_key=True, default=new_id)
    client_id = Column(Text, ForeignKey('clients.id'), nullable=False, unique=True)
    postcode = Column(Text, nullable=False)
    radius_km = Column(Float, nullable=False, default=5)
    application_types = Column(JSON, default=list)
    keywords = Column(JSON, default=list)
    schedule_day = Column(Integer, nullable=True)  # 0-6, Sunday = 0
    last_run_at = Column(DateTime(timezone=True), nullable=True)
