import os
import shutil
import subprocess
import uuid
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import sessionmaker

pytestmark = pytest.mark.e2e

SERVICE_ROOT = Path(__file__).resolve().parents[2]
APP_ROLE = "botpanel_app"
APP_PASSWORD = "botpanel_app_pw"


def _docker_available() -> bool:
    if os.getenv("SKIP_DOCKER_TESTS") == "1":
        return False
    if not shutil.which("docker"):
        return False
    try:
        proc = subprocess.run(["docker", "info"], capture_output=True, text=True, timeout=5)
    except (OSError, subprocess.SubprocessError):
        return False
    return proc.returncode == 0


def _h(email):
    return {"x-auth-request-user": email.split("@")[0], "x-auth-request-email": email}


@pytest.fixture(scope="module")
def postgres_url():
    if not _docker_available():
        pytest.skip("Docker daemon is not available; skipping e2e tests that require containers")
    from testcontainers.postgres import PostgresContainer

    image = os.getenv("TEST_POSTGRES_IMAGE", "pgvector/pgvector:pg16")
    with PostgresContainer(image) as pg:
        url = pg.get_connection_url()
        # Normalize driver to the psycopg2 default used by the app
        if "+" in url:
            parts = url.split("+")
            url = parts[0] + "://" + parts[1].split("//", 1)[1]
        yield url


@pytest.fixture(scope="module")
def migrated_url(postgres_url):
    previous = {k: os.environ.get(k) for k in ("TEST_DATABASE_URL",)}
    os.environ["TEST_DATABASE_URL"] = postgres_url
    try:
        cfg = Config(str(SERVICE_ROOT / "alembic.ini"))
        cfg.set_main_option("script_location", str(SERVICE_ROOT / "migrations"))
        cfg.set_main_option("sqlalchemy.url", postgres_url)
        command.upgrade(cfg, "head")
        yield postgres_url
    finally:
        for key, value in previous.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value


@pytest.fixture(scope="module")
def app_role_url(migrated_url):
    """Connection URL for a non-superuser role; superusers bypass RLS."""
    admin = create_engine(migrated_url)
    with admin.begin() as conn:
        conn.execute(text(f"CREATE ROLE {APP_ROLE} LOGIN PASSWORD '{APP_PASSWORD}'"))
        conn.execute(text(f"GRANT SELECT, INSERT, UPDATE, DELETE ON ALL TABLES IN SCHEMA public TO {APP_ROLE}"))
    admin.dispose()
    url = make_url(migrated_url).set(username=APP_ROLE, password=APP_PASSWORD)
    return url.render_as_string(hide_password=False)


def test_migrations_create_vector_columns(migrated_url):
    engine = create_engine(migrated_url)
    with engine.connect() as conn:
        udt = conn.execute(text(
            "SELECT udt_name FROM information_schema.columns "
            "WHERE table_name = 'knowledge_prompts' AND column_name = 'embedding'"
        )).scalar()
        policies = conn.execute(text("SELECT count(*) FROM pg_policies WHERE policyname LIKE '%_tenant'")).scalar()
    engine.dispose()
    assert udt == "vector"
    assert policies == 15


def test_chatbot_names_unique_case_insensitive_in_db(migrated_url):
    engine = create_engine(migrated_url)
    user_id = uuid.uuid4()
    with engine.begin() as conn:
        conn.execute(text("INSERT INTO users (id, email) VALUES (:id, :email)"), {"id": user_id, "email": f"{user_id}@x.io"})
        conn.execute(
            text("INSERT INTO chatbots (id, user_id, name_chatbot) VALUES (:id, :uid, 'Sales')"),
            {"id": uuid.uuid4(), "uid": user_id},
        )
    with pytest.raises(Exception):
        with engine.begin() as conn:
            conn.execute(
                text("INSERT INTO chatbots (id, user_id, name_chatbot) VALUES (:id, :uid, 'SALES')"),
                {"id": uuid.uuid4(), "uid": user_id},
            )
    engine.dispose()


def test_api_with_rls_enabled(app_role_url, monkeypatch):
    from botpanel.db import database
    from botpanel.api.main import app

    engine = create_engine(app_role_url)
    monkeypatch.setattr(database, "engine", engine)
    monkeypatch.setattr(database, "SessionLocal", sessionmaker(autocommit=False, autoflush=False, bind=engine))
    monkeypatch.setenv("BOTPANEL_ENABLE_RLS", "true")
    monkeypatch.setenv("EMBEDDING_PROVIDER", "mock")

    client = TestClient(app)
    alice = _h("alice@example.com")
    bob = _h("bob@example.com")

    r = client.post("/chatbots/", json={"name_chatbot": "Alice bot"}, headers=alice)
    assert r.status_code == 201, r.text
    bot = r.json()
    r = client.post(
        "/knowledge-prompts/",
        json={"chatbot_id": bot["id"], "prompt_text": "Open at 9", "category": "hours"},
        headers=alice,
    )
    assert r.status_code == 201, r.text
    assert len(r.json()["embedding"]) == 1536

    assert client.get("/chatbots/", headers=bob).json() == []
    assert client.get(f"/chatbots/{bot['id']}", headers=bob).status_code == 404

    # The policy alone hides the row, without the application's user filter
    with engine.connect() as conn:
        bob_id = conn.execute(text("SELECT id FROM users WHERE email = 'bob@example.com'")).scalar()
        with conn.begin():
            conn.execute(text("SELECT set_config('botpanel.enable_rls', 'on', true)"))
            conn.execute(text("SELECT set_config('botpanel.user_id', :uid, true)"), {"uid": str(bob_id)})
            assert conn.execute(text("SELECT count(*) FROM chatbots")).scalar() == 0
        with conn.begin():
            assert conn.execute(text("SELECT count(*) FROM chatbots")).scalar() >= 1
    engine.dispose()
