from typing import Any, Optional

from sqlalchemy import text
from sqlalchemy.orm import Session

from legfed.core.settings import settings


def schema_prefix() -> str:
    """Return 'schema.' or '' for building raw SQL statements."""
    if settings.db_schema:
        return f"{settings.db_schema}."
    return ""


def fetch_all(session: Session, sql: str, params: Optional[dict[str, Any]] = None) -> list[dict]:
    """Run a raw SQL query and return its rows as dicts."""
    result = session.execute(text(sql), params or {})
    return [dict(row) for row in result.mappings().all()]


def fetch_one(session: Session, sql: str, params: Optional[dict[str, Any]] = None) -> Optional[dict]:
    """Run a raw SQL query and return the first row as a dict, or None."""
    result = session.execute(text(sql), params or {})
    row = result.mappings().first()
    return dict(row) if row is not None else None
