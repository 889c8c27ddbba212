"""Shared test fixtures."""
import pytest
from datetime import timedelta
from unittest.mock import patch, MagicMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from planning_sync.database import Base, import_models
from planning_sync.models.client import ClientAccount
from planning_sync.models.criteria import SyncCriteria
from planning_sync.services.repository import SqlSyncRepository
from planning_sync.services.results import LookupResult
from planning_sync.utils import utcnow


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with schema created."""
    engine = create_engine('sqlite:///:memory:')
    import_models()
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, expire_on_commit=False)


@pytest.fixture(autouse=True)
def patch_get_session(session_factory):
    """
    Route every default SqlSyncRepository() to the in-memory DB.

    The repository module binds get_session at import time, so patch it there.
    """
    with patch('planning_sync.services.repository.get_session', side_effect=lambda: session_factory()):
        yield


@pytest.fixture
def repository(session_factory):
    return SqlSyncRepository(session_factory)


@pytest.fixture
def make_client(session_factory):
    """Factory fixture — inserts a ClientAccount (and criteria unless criteria=None)."""
    def _make(client_id='client-1', criteria='default', **overrides):
        defaults = dict(
            id=client_id,
            company_name='Premium Extensions Ltd',
            contact_email='hello@example.com',
            ghl_api_key='ghl-key-123',
            ghl_location_id='LOC_1',
            ghl_pipeline_id='PIPE_1',
            ghl_stage_id='STAGE_1',
            active=True,
        )
        defaults.update(overrides)
        client = ClientAccount(**defaults)

        session = session_factory()
        try:
            session.add(client)
            if criteria is not None:
                crit_fields = dict(
                    client_id=client_id,
                    postcode='SW1A 1AA',
                    radius_km=5,
                    application_types=[],
                    keywords=[],
                    schedule_day=1,
                    last_run_at=utcnow() - timedelta(days=3),
                )
                if isinstance(criteria, dict):
                    crit_fields.update(criteria)
                session.add(SyncCriteria(**crit_fields))
            session.commit()
        finally:
            session.close()
        return client
    return _make


@pytest.fixture
def make_candidate():
    """Factory fixture — a raw PlanIt search record."""
    def _make(ref='PA/2026/0001', **overrides):
        record = {
            'app_ref': ref,
            'doc_id': f'doc-{ref}',
            'address': '12 High Street, London',
            'postcode': 'SW1A 2AA',
            'description': 'Single storey rear extension',
            'applic': 'Householder',
            'authority': 'Westminster',
            'url': f'https://www.planit.org.uk/planapplic/{ref}/',
        }
        record.update(overrides)
        return record
    return _make


@pytest.fixture
def fake_source():
    """PlanItClient stand-in: no candidates, no detail."""
    source = MagicMock()
    source.fetch_candidates.return_value = []
    source.fetch_detail.return_value = LookupResult.miss()
    return source


@pytest.fixture
def fake_crm():
    """GhlClient stand-in: every delivery succeeds with a predictable id."""
    crm = MagicMock()
    crm.deliver.side_effect = lambda client, lead: f'contact-{lead.external_reference}'
    return crm


@pytest.fixture
def app():
    """Flask test app."""
    from planning_sync import create_app
    app = create_app()
    app.config['TESTING'] = True
    yield app


@pytest.fixture
def client(app):
    """Flask test client."""
    with app.test_client() as c:
        yield c
