"""
ClientAccount model — one row per subscribing business and its CRM credentials.

Created and edited by the admin side; the sync pipeline only reads it.
"""
from sqlalchemy import Column, Text, Boolean, DateTime

from planning_sync.database import Base
from planning_sync.utils import new_id, utcnow


class ClientAccount(Base):
    __tablename__ = 'clients'

    id = Column(Text, primary_key=True, default=new_id)
    company_name = Column(Text, nullable=False, default='')
    contact_email = Column(Text, default='')
    ghl_api_key = Column(Text, nullable=False)
    ghl_location_id = Column(Text, nullable=False)
    ghl_pipeline_id = Column(Text, default='')
    ghl_stage_id = Column(Text, default='')
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    def __repr__(self):
        return f"<ClientAccount {self.id} {self.company_name!r}>"
