import os
import sys
import tempfile

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# The app reads DATABASE_URL at import time; point it at a throwaway file first.
_DB_DIR = tempfile.mkdtemp(prefix="gatehunt-test-")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(_DB_DIR, "test.db").replace(os.sep, "/")
os.environ.setdefault("GATEHUNT_LOG_LEVEL", "warn")

from gatehunt import create_app, db  # noqa: E402
from gatehunt.server import seed_items  # noqa: E402

from tests.factories import create_user  # noqa: E402


@pytest.fixture(scope="session")
def test_app():
    return create_app({"TESTING": True, "SECRET_KEY": "test-secret"})


@pytest.fixture(autouse=True)
def _push_app_context(test_app):
    ctx = test_app.app_context()
    ctx.push()
    try:
        yield
    finally:
        db.session.remove()
        ctx.pop()


@pytest.fixture(autouse=True)
def _fresh_db(_push_app_context):
    """Rebuild the schema and item catalog for every test."""
    db.session.remove()
    db.drop_all()
    db.create_all()
    seed_items()
    yield


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


@pytest.fixture()
def user():
    return create_user("tester", "pass1234")


@pytest.fixture()
def other_user():
    return create_user("intruder", "pass1234")


@pytest.fixture()
def auth_client(client, user):
    """Test client logged in as ``tester``."""
    resp = client.post("/api/auth/login", json={"username": "tester", "password": "pass1234"})
    assert resp.status_code == 200
    return client
