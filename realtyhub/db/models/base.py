"""
Shared SQLAlchemy base and helpers.
"""
from datetime import datetime, UTC

from sqlalchemy.orm import declarative_base

# Import SQLite compilation shims for PostgreSQL-only types when running tests
# under SQLite.
from .. import sqlite_compiler_shims  # noqa: F401


def now_utc():
    """Return an aware UTC datetime for default/updated timestamps."""
    return datetime.now(UTC)


Base = declarative_base()
