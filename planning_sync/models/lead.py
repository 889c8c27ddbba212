"""
Lead model — one planning application delivered (or attempted) for one client.

Deduplicated by (client_id, external_reference). Rows are never deleted by the
pipeline, and are stored whether or not the CRM push succeeded.
"""
from sqlalchemy import Column, Text, DateTime, ForeignKey, UniqueConstraint

from planning_sync.database import Base
from planning_sync.utils import new_id, utcnow, isoformat


class Lead(Base):
    __tablename__ = 'leads'

    id = Column(Text, primary_key=True, default=new_id)
    client_id = Column(Text, ForeignKey('clients.id'), nullable=False, index=True)
    external_reference = Column(Text, nullable=False)  # PlanIt app_ref
    address = Column(Text, default='')
    postcode = Column(Text, default='')
    description = Column(Text, default='')
    application_type = Column(Text, default='')
    authority_name = Column(Text, nullable=True)
    source_url = Column(Text, default='')
    agent_name = Column(Text, nullable=True)
    agent_address = Column(Text, nullable=True)
    crm_contact_id = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    synced_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint('client_id', 'external_reference', name='uq_lead_client_reference'),
    )

    @property
    def is_synced(self) -> bool:
        return self.synced_at is not None

    def to_dict(self):
        return {
            'id': self.id,
            'client_id': self.client_id,
            'external_reference': self.external_reference,
            'address': self.address,
            'postcode': self.postcode,
            'description': self.description,
            'application_type': self.application_type,
            'authority_name': self.authority_name,
            'source_url': self.source_url,
            'agent_name': self.agent_name,
            'agent_address': self.agent_address,
            'crm_contact_id': self.crm_contact_id,
            'created_at': isoformat(self.created_at),
            'synced_at': isoformat(self.synced_at),
            'synced': self.is_synced,
        }
