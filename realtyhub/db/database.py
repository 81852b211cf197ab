"""
Database engine and session management.

Builds the SQLAlchemy engine from environment configuration with a test
fallback (SQLite in-memory) and exposes FastAPI dependencies plus the
transaction helper used by the action classes.
"""
import logging
import os
import sys
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

_POSTGRES_PARTS = ("POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_HOST", "POSTGRES_PORT", "POSTGRES_DB")


def _get_database_url() -> str:
    """``DATABASE_URL`` or a PostgreSQL URL assembled from ``POSTGRES_*``."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    parts = {name: os.getenv(name) for name in _POSTGRES_PARTS}
    missing = [name for name, value in parts.items() if not value]
    if missing:
        raise ValueError(f"Missing required database environment variables: {', '.join(missing)}")
    return "postgresql://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}".format(**parts)


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest.

    ``PYTEST_CURRENT_TEST`` is only set while a test runs, so also look for
    the pytest module, which is imported before collection starts.
    """
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    return "pytest" in sys.modules


_SQLITE_MEMORY_URL = "sqlite+pysqlite:///:memory:"
_SQLITE_MEMORY_KWARGS = {
    "connect_args": {"check_same_thread": False},
    "poolclass": StaticPool,
}

explicit_test_db = os.getenv("REALTYHUB_TEST_DB")

if explicit_test_db:
    DATABASE_URL = explicit_test_db
    _engine_kwargs = {"connect_args": {"check_same_thread": False}} if DATABASE_URL.startswith("sqlite") else {}
elif _is_pytest_runtime() and not os.getenv("DATABASE_URL"):
    # In-memory SQLite with StaticPool so the schema persists across connections
    DATABASE_URL = _SQLITE_MEMORY_URL
    _engine_kwargs = dict(_SQLITE_MEMORY_KWARGS)
else:
    DATABASE_URL = _get_database_url()
    _engine_kwargs = {}

engine = create_engine(DATABASE_URL, **_engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_SCHEMA_INIT_DONE = False


def ensure_sqlite_schema():
    """Create all tables once when running against SQLite.

    Production databases are managed by Alembic; SQLite is only used for
    tests and local experiments where the metadata is the schema.
    """
    global _SCHEMA_INIT_DONE
    if _SCHEMA_INIT_DONE:
        return
    if str(engine.url).startswith("sqlite"):
        from realtyhub.db import models  # local import to avoid circular import at module load
        models.Base.metadata.create_all(bind=engine)
    _SCHEMA_INIT_DONE = True


def get_db():
    """Dependency to get a database session."""
    ensure_sqlite_schema()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """Run a unit of work: commit on success, roll back and re-raise on error."""
    try:
        yield db
        db.commit()
    except Exception as exc:
        db.rollback()
        logger.debug("transaction rolled back: %s", exc.__class__.__name__)
        raise
