#!/usr/bin/env python3
"""
Seed demo clients for trying the sync API locally.

Creates two clients with criteria, a handful of already-stored leads (some
synced, some not) and one past sync run, so /api/runs and
/api/clients/<id>/leads have something to show.

Usage:
    python scripts/seed_demo_data.py          # seed
    python scripts/seed_demo_data.py --clear  # wipe seeded rows first

Requires: DATABASE_URL set (or defaults to sqlite:///local.db).
"""
import argparse
from datetime import datetime, timezone, timedelta

from planning_sync import create_app
from planning_sync.database import get_session, init_db
from planning_sync.models.client import ClientAccount
from planning_sync.models.criteria import SyncCriteria
from planning_sync.models.lead import Lead
from planning_sync.models.sync_run import SyncRun
from planning_sync.utils import new_id

# Prefix for seeded IDs so we can clear them
SEED_PREFIX = 'seed-'


# ── Demo data ────────────────────────────────────────────────────────────────

CLIENTS = [
    {
        'key': 'extensions',
        'company_name': 'Premium Extensions Ltd',
        'contact_email': 'hello@premiumextensions.example',
        'postcode': 'SW1A 1AA',
        'radius_km': 15,
        'application_types': ['Extension', 'Refurbishment'],
        'keywords': ['kitchen', 'double-storey'],
        'schedule_day': 1,
    },
    {
        'key': 'lofts',
        'company_name': 'The Loft Specialists',
        'contact_email': 'info@loftspecialists.example',
        'postcode': 'N1 9GU',
        'radius_km': 10,
        'application_types': ['Loft'],
        'keywords': ['conversion'],
        'schedule_day': 3,
    },
]

LEADS = [
    ('PA/2024/1001', '12 Downing St, London', 'SW1A 2AA', 'Conversion to dwelling', 'Full Planning', 'Westminster', 'Arch Design Ltd', True),
    ('PA/2024/1082', '45 Chelsea Square, London', 'SW3 5LF', 'Single storey rear kitchen extension', 'Householder', 'Kensington and Chelsea', 'Vogue Architects', False),
    ('PA/2024/1099', '3 Abbey Road, London', 'NW8 9AY', 'Double-storey side extension', 'Householder', 'Westminster', None, True),
]


def seed_id(key):
    return f'{SEED_PREFIX}{key}'


def seed_clients(session):
    now = datetime.now(timezone.utc)
    for spec in CLIENTS:
        client_id = seed_id(spec['key'])
        session.add(ClientAccount(
            id=client_id,
            company_name=spec['company_name'],
            contact_email=spec['contact_email'],
            ghl_api_key=f'demo-key-{spec["key"]}',
            ghl_location_id=f'LOC_{spec["key"].upper()}',
            ghl_pipeline_id='PIPELINE_DEMO',
            ghl_stage_id='STAGE_NEW',
            active=True,
            created_at=now,
        ))
        session.add(SyncCriteria(
            id=seed_id(f'{spec["key"]}-criteria'),
            client_id=client_id,
            postcode=spec['postcode'],
            radius_km=spec['radius_km'],
            application_types=spec['application_types'],
            keywords=spec['keywords'],
            schedule_day=spec['schedule_day'],
            last_run_at=now - timedelta(days=3),
        ))
        print(f'  client {client_id}: {spec["company_name"]}')
    session.flush()


def seed_history(session):
    """Past leads + one run for the first client."""
    client_id = seed_id(CLIENTS[0]['key'])
    now = datetime.now(timezone.utc)
    sent = 0
    for idx, (ref, address, postcode, description, app_type, authority, agent, synced) in enumerate(LEADS):
        session.add(Lead(
            id=seed_id(new_id()),
            client_id=client_id,
            external_reference=ref,
            address=address,
            postcode=postcode,
            description=description,
            application_type=app_type,
            authority_name=authority,
            source_url=f'https://www.planit.org.uk/planapplic/{ref.replace("/", "_")}/',
            agent_name=agent,
            agent_address='London' if agent else None,
            crm_contact_id=f'ghl_demo_{idx}' if synced else None,
            created_at=now - timedelta(days=3, minutes=idx),
            synced_at=now - timedelta(days=3) if synced else None,
        ))
        sent += int(synced)

    session.add(SyncRun(
        id=seed_id(new_id()),
        client_id=client_id,
        run_at=now - timedelta(days=3),
        found=42,
        created=len(LEADS),
        sent=sent,
        errors=[f'CRM delivery failed for {ref}: GHL API error: demo'
                for ref, *_rest, synced in LEADS if not synced],
        duration_ms=1240,
    ))
    print(f'  {len(LEADS)} leads + 1 run for {client_id}')


# ── Clear / Main ─────────────────────────────────────────────────────────────

def clear_seeded_data(session):
    """Remove all seeded rows (children first)."""
    counts = {}
    for model in (SyncRun, Lead, SyncCriteria, ClientAccount):
        counts[model.__tablename__] = (
            session.query(model)
            .filter(model.id.like(f'{SEED_PREFIX}%'))
            .delete(synchronize_session=False)
        )
    session.commit()
    print('Cleared ' + ', '.join(f'{n} {table}' for table, n in counts.items()))


def main():
    parser = argparse.ArgumentParser(description='Seed demo data for the sync API')
    parser.add_argument('--clear', action='store_true', help='Clear seeded data before seeding')
    parser.add_argument('--clear-only', action='store_true', help='Only clear, do not re-seed')
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        # Ensure tables exist (for SQLite local dev)
        init_db()

        session = get_session()
        try:
            if args.clear or args.clear_only:
                clear_seeded_data(session)
                if args.clear_only:
                    return

            print('Seeding demo data...')
            seed_clients(session)
            seed_history(session)
            session.commit()
            print('\nDone! Try GET http://localhost:8080/api/runs')

        except Exception as e:
            session.rollback()
            print(f'Error: {e}')
            raise
        finally:
            session.close()


if __name__ == '__main__':
    main()
