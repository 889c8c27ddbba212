"""
Database engine + session factory.

Defaults to SQLite for local dev, Postgres in production. Sessions keep
attribute state after commit so repository results stay readable once the
session that loaded them is closed.
"""
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from planning_sync.config import DATABASE_URL


class Base(DeclarativeBase):
    pass


# Hosted Postgres often injects postgres:// but SQLAlchemy 2.x requires postgresql://
url = DATABASE_URL.replace('postgres://', 'postgresql://', 1)

if url.startswith('sqlite'):
    engine = create_engine(url, connect_args={'check_same_thread': False})
else:
    engine = create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10)

SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)


def get_session():
    """Return a new DB session."""
    return SessionLocal()


def import_models():
    """Import every model module so Base.metadata knows about all tables."""
    import importlib
    for name in ('client', 'criteria', 'lead', 'sync_run'):
        importlib.import_module(f'planning_sync.models.{name}')


def init_db():
    """Create all tables. Used by the seed script; production schema is managed by Alembic."""
    import_models()
    Base.metadata.create_all(engine)
