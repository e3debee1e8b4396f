"""Shared fixtures. Environment is pinned before the app is imported."""
import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="codeclarity-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["ENVIRONMENT"] = "development"
os.environ["JWT_SECRET"] = "test-secret"
# bcrypt's minimum cost keeps signup tests fast
os.environ["BCRYPT_ROUNDS"] = "4"
for _key in ("OPENAI_API_KEY", "GEMINI_API_KEY", "HF_API_KEY"):
    os.environ[_key] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from app.main import app, rate_limiter  # noqa: E402
from app.routers.api import get_engine  # noqa: E402
from app.routers.auth import get_user_store  # noqa: E402
from app.services.users import InMemoryUserStore  # noqa: E402

HISTORY_LIMIT = 3


@pytest.fixture
def store():
    return InMemoryUserStore(history_limit=HISTORY_LIMIT)


@pytest.fixture
def client(store):
    app.dependency_overrides[get_user_store] = lambda: store
    rate_limiter.reset()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def override_engine():
    """Swap the engine dependency: override_engine(CodeEngine(...))."""

    def _set(engine):
        app.dependency_overrides[get_engine] = lambda: engine

    return _set


@pytest.fixture
def auth_headers(client):
    response = client.post(
        "/api/auth/signup",
        json={"email": "ada@example.com", "password": "secret123", "name": "Ada"},
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['data']['token']}"}
