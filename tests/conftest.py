import os

# Must be set before any backend module reads config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AIRTABLE_PERSONAL_ACCESS_TOKEN"] = ""
os.environ["AIRTABLE_BASE_ID"] = ""
os.environ["DASHBOARD_TIMEZONE"] = ""
os.environ["DEFAULT_USER_PASSWORD"] = "password123"
os.environ.pop("ANTHROPIC_API_KEY", None)

import pytest
from fastapi.testclient import TestClient

import sessions

# Full-strength hashing makes every seeded user cost a noticeable fraction of a second
sessions.PBKDF2_ITERATIONS = 1000

from airtable import MockSource, get_record_source
from app import app
from database import SessionLocal, init_db
from seed import seed_default_users


def raw(record_id, fields):
    return {"id": record_id, "fields": fields}


class FakeSource:
    def __init__(self, tables=None):
        self.tables = tables or {}
        self.calls = []

    def fetch(self, table_name):
        self.calls.append(table_name)
        return list(self.tables.get(table_name, []))


@pytest.fixture
def db():
    init_db()
    session = SessionLocal()
    seed_default_users(db=session, reset=True)
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        seed_default_users(reset=True)
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def use_source():
    """Point every route at the given record source."""
    def _use(source):
        app.dependency_overrides[get_record_source] = lambda: source
        return source
    return _use


@pytest.fixture
def mock_source(use_source):
    return use_source(MockSource())


def login(client, username="admin", password="password123"):
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
def admin_headers(client):
    return login(client, "admin")


@pytest.fixture
def staff_headers(client):
    return login(client, "chef")


@pytest.fixture
def manager_headers(client):
    return login(client, "manager")
