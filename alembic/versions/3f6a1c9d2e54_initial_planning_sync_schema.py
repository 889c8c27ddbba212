"""Initial planning sync schema: clients, client_criteria, leads, sync_runs

Revision ID: 3f6a1c9d2e54
Revises:
Create Date: 2026-01-12 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f6a1c9d2e54'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('clients',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('company_name', sa.Text(), nullable=False),
        sa.Column('contact_email', sa.Text(), nullable=True),
        sa.Column('ghl_api_key', sa.Text(), nullable=False),
        sa.Column('ghl_location_id', sa.Text(), nullable=False),
        sa.Column('ghl_pipeline_id', sa.Text(), nullable=True),
        sa.Column('ghl_stage_id', sa.Text(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('client_criteria',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('client_id', sa.Text(), nullable=False),
        sa.Column('postcode', sa.Text(), nullable=False),
        sa.Column('radius_km', sa.Float(), nullable=False),
        sa.Column('application_types', sa.JSON(), nullable=True),
        sa.Column('keywords', sa.JSON(), nullable=True),
        sa.Column('schedule_day', sa.Integer(), nullable=True),
        sa.Column('last_run_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('client_id'),
    )

    op.create_table('leads',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('client_id', sa.Text(), nullable=False),
        sa.Column('external_reference', sa.Text(), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('postcode', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('application_type', sa.Text(), nullable=True),
        sa.Column('authority_name', sa.Text(), nullable=True),
        sa.Column('source_url', sa.Text(), nullable=True),
        sa.Column('agent_name', sa.Text(), nullable=True),
        sa.Column('agent_address', sa.Text(), nullable=True),
        sa.Column('crm_contact_id', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('synced_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('client_id', 'external_reference', name='uq_lead_client_reference'),
    )
    op.create_index('ix_leads_client_id', 'leads', ['client_id'])

    op.create_table('sync_runs',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('client_id', sa.Text(), nullable=False),
        sa.Column('run_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('found', sa.Integer(), nullable=False),
        sa.Column('created', sa.Integer(), nullable=False),
        sa.Column('sent', sa.Integer(), nullable=False),
        sa.Column('errors', sa.JSON(), nullable=True),
        sa.Column('duration_ms', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_sync_runs_client_id', 'sync_runs', ['client_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_sync_runs_client_id', 'sync_runs')
    op.drop_table('sync_runs')
    op.drop_index('ix_leads_client_id', 'leads')
    op.drop_table('leads')
    op.drop_table('client_criteria')
    op.drop_table('clients')
