import os
import pytest
from fastapi.testclient import TestClient

# Store original environment variables to restore after tests
_original_env = {}


def _setup_test_env():
    """Set up environment variables needed for database configuration during tests"""
    global _original_env

    test_vars = ['POSTGRES_USER', 'POSTGRES_PASSWORD', 'POSTGRES_HOST', 'POSTGRES_PORT', 'POSTGRES_DB']
    for var in test_vars:
        if var in os.environ:
            _original_env[var] = os.environ[var]

    if not os.getenv("DATABASE_URL"):
        os.environ.setdefault("POSTGRES_USER", "testuser")
        os.environ.setdefault("POSTGRES_PASSWORD", "testpass")
        os.environ.setdefault("POSTGRES_HOST", "localhost")
        os.environ.setdefault("POSTGRES_PORT", "5432")
        os.environ.setdefault("POSTGRES_DB", "testdb")


def _restore_env():
    """Restore original environment variables after tests"""
    test_vars = ['POSTGRES_USER', 'POSTGRES_PASSWORD', 'POSTGRES_HOST', 'POSTGRES_PORT', 'POSTGRES_DB']
    for var in test_vars:
        if var not in _original_env and var in os.environ:
            del os.environ[var]
    for var, value in _original_env.items():
        os.environ[var] = value
    _original_env.clear()


_setup_test_env()

from botpanel.db import database, models  # noqa: E402
from botpanel.services import reset_embedding_service_for_tests  # noqa: E402
from botpanel.utils.feature_flags import refresh_feature_flag_cache  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _restore_test_env():
    yield
    _restore_env()


@pytest.fixture(autouse=True)
def _isolated_runtime(monkeypatch):
    """Every test starts without dev mode, RLS or an embedding provider."""
    for var in (
        "DEV_MODE",
        "BOTPANEL_ENABLE_RLS",
        "ADMIN_EMAILS",
        "EMBEDDING_PROVIDER",
        "EMBEDDING_DIMENSION",
        "EMBEDDING_ON_WRITE_ENABLED",
        "AI_CONFIG_ENABLED",
        "CONVERSATION_CONTEXT_ENABLED",
        "WELCOME_TRACKING_ENABLED",
    ):
        monkeypatch.delenv(var, raising=False)
    refresh_feature_flag_cache()
    reset_embedding_service_for_tests()
    yield
    refresh_feature_flag_cache()
    reset_embedding_service_for_tests()


@pytest.fixture(autouse=True)
def _clean_tables():
    yield
    if database.engine.dialect.name != "sqlite":
        return
    with database.engine.begin() as conn:
        for table in reversed(models.Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def db_session():
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    from botpanel.api.main import app
    return TestClient(app)

