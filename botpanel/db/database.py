"""
Database engine and session management.

Builds the SQLAlchemy engine from environment configuration with sensible
test fallbacks (SQLite in-memory), installs the row-level-security session
hook and exposes FastAPI dependencies.
"""
import os
import sys
from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from botpanel.utils.runtime import env_flag

# Database connection URL
# Generate dynamically from individual components if DATABASE_URL is not provided
def _get_database_url() -> str:
    # If DATABASE_URL is explicitly set, use it
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")

    # Otherwise, generate from individual components (all must be set)
    db_user = os.getenv("POSTGRES_USER")
    db_password = os.getenv("POSTGRES_PASSWORD")
    db_host = os.getenv("POSTGRES_HOST")
    db_port = os.getenv("POSTGRES_PORT")
    db_name = os.getenv("POSTGRES_DB")

    if not all([db_user, db_password, db_host, db_port, db_name]):
        missing = []
        if not db_user: missing.append("POSTGRES_USER")
        if not db_password: missing.append("POSTGRES_PASSWORD")
        if not db_host: missing.append("POSTGRES_HOST")
        if not db_port: missing.append("POSTGRES_PORT")
        if not db_name: missing.append("POSTGRES_DB")
        raise ValueError(f"Missing required database environment variables: {', '.join(missing)}")

    return f"postgresql://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest.

    ``PYTEST_CURRENT_TEST`` is only set while an individual test is running,
    so module import time may not yet have it. The pytest package in
    ``sys.modules`` is reliable once collection started. ``PYTEST_RUNNING=1``
    forces the detection explicitly.
    """
    if os.getenv("PYTEST_RUNNING") == "1":  # explicit opt-in
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:  # during an active test
        return True
    # During collection pytest is already imported
    if "pytest" in sys.modules:
        return True
    return False


# Test override strategy:
# 1. If BOTPANEL_TEST_DB is set, use it.
# 2. Else if TEST_DATABASE_URL (used by e2e tests) is set, use it (never override with sqlite).
# 3. Else if running under pytest, force in-memory sqlite.
# 4. Else build the URL from the environment.
explicit_test_db = os.getenv("BOTPANEL_TEST_DB")
explicit_e2e_db = os.getenv("TEST_DATABASE_URL")  # set inside e2e fixtures
pytest_indicator = _is_pytest_runtime()

if explicit_test_db:
    DATABASE_URL = explicit_test_db
    _engine_kwargs = {"connect_args": {"check_same_thread": False}} if DATABASE_URL.startswith("sqlite") else {}
elif explicit_e2e_db:
    DATABASE_URL = explicit_e2e_db
    _engine_kwargs = {}
elif pytest_indicator:
    # In-memory SQLite with StaticPool so the schema persists across connections
    DATABASE_URL = "sqlite+pysqlite:///:memory:"
    _engine_kwargs = {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool,
    }
else:
    DATABASE_URL = _get_database_url()
    _engine_kwargs = {}


def _create_engine_with_fallback(url: str, kwargs: dict):
    """Create engine; if creation fails under pytest and no explicit DB is set, fall back to in-memory sqlite."""
    try:
        return create_engine(url, **kwargs)
    except OperationalError:
        if _is_pytest_runtime() and not os.getenv("TEST_DATABASE_URL") and not os.getenv("BOTPANEL_TEST_DB"):
            return create_engine(
                "sqlite+pysqlite:///:memory:",
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        raise


# Create the SQLAlchemy engine (with fallback safety)
engine = _create_engine_with_fallback(DATABASE_URL, _engine_kwargs)

# Create a SessionLocal class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

RLS_USER_KEY = "rls_user_id"


def rls_enabled() -> bool:
    """Return True when row-level-security GUCs should be set per transaction."""
    return env_flag("BOTPANEL_ENABLE_RLS")


@event.listens_for(Session, "after_begin")
def _apply_rls_settings(session, transaction, connection):
    """Re-apply the tenant GUCs at the start of every transaction.

    ``SET LOCAL`` only lasts until commit, so a single request that commits and
    then refreshes needs the settings again on the next transaction.
    """
    user_id = session.info.get(RLS_USER_KEY)
    if not user_id or connection.dialect.name != "postgresql":
        return
    connection.execute(text("SELECT set_config('botpanel.enable_rls', 'on', true)"))
    connection.execute(text("SELECT set_config('botpanel.user_id', :uid, true)"), {"uid": str(user_id)})


def bind_tenant(db: Session, user_id) -> None:
    """Attach the tenant id to the session so RLS settings follow it."""
    if not rls_enabled():
        return
    db.info[RLS_USER_KEY] = str(user_id)
    if db.get_bind().dialect.name == "postgresql" and db.in_transaction():
        db.execute(text("SELECT set_config('botpanel.enable_rls', 'on', true)"))
        db.execute(text("SELECT set_config('botpanel.user_id', :uid, true)"), {"uid": str(user_id)})


# In-memory SQLite is only usable once the schema exists on the shared
# connection; create it eagerly for test runs.
_SCHEMA_INIT_DONE = False


def _ensure_sqlite_schema():
    global _SCHEMA_INIT_DONE
    if _SCHEMA_INIT_DONE:
        return
    if str(engine.url).startswith("sqlite"):
        from botpanel.db import models  # local import to avoid circular import at module load
        models.Base.metadata.create_all(bind=engine)
    _SCHEMA_INIT_DONE = True


if DATABASE_URL.startswith("sqlite") and ":memory:" in DATABASE_URL:
    _ensure_sqlite_schema()


def get_db():
    """Dependency to get a database session."""
    _ensure_sqlite_schema()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
