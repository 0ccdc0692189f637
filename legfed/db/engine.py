"""
Database engine and session factory for the chado source.

The engine is only built when DATABASE_URL is set; the flat-file
converters never touch it.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from legfed.core.settings import settings


def build_engine(database_url: str) -> Engine:
    """Create an engine for the given SQLAlchemy URL."""
    return create_engine(database_url, pool_pre_ping=True)


engine = build_engine(settings.database_url) if settings.database_url else None

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
