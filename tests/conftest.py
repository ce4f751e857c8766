from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Make the katafree package importable during local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from katafree.app import create_app  # noqa: E402
from katafree.core import config as core_config  # noqa: E402
from katafree.core.rate_limiter import reset_limits  # noqa: E402
from katafree.repositories.json_storage import JsonRepository  # noqa: E402
from katafree.repositories.sql_repository import SQLRepository  # noqa: E402


@pytest.fixture()
def settings(tmp_path, monkeypatch):
    """Settings pointing at a temporary data file, with no external store configured."""
    for name in ("DATABASE_URL", "APP_ENV", "LOG_LEVEL", "CORS_ORIGINS", "RATE_LIMIT_MAX", "RATE_LIMIT_WINDOW_SECONDS", "JWT_TTL_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DATA_FILE", str(tmp_path / "data" / "db.json"))
    monkeypatch.setenv("JWT_SECRET", "test-secret-0123456789abcdef-0123456789")
    core_config.get_settings.cache_clear()
    yield core_config.get_settings()
    core_config.get_settings.cache_clear()


@pytest.fixture()
def json_repo(tmp_path):
    return JsonRepository(tmp_path / "data" / "db.json")


@pytest.fixture()
def sql_repo(tmp_path):
    repo = SQLRepository(f"sqlite:///{tmp_path / 'external.db'}")
    repo.connect()
    yield repo
    repo.close()


@pytest.fixture(params=["embedded", "external"])
def repo(request):
    """Run the same contract test against both backends."""
    fixture = "json_repo" if request.param == "embedded" else "sql_repo"
    return request.getfixturevalue(fixture)


@pytest.fixture()
def client(settings, repo):
    reset_limits()
    app = create_app(settings=settings, repository=repo)
    with TestClient(app) as test_client:
        yield test_client
    reset_limits()


@pytest.fixture()
def make_client(settings):
    """Factory for clients built from tweaked settings (backend selection, limits)."""
    def _make(**overrides) -> TestClient:
        reset_limits()
        return TestClient(create_app(settings=replace(settings, **overrides)))

    return _make


def register(client: TestClient, email: str, password: str = "pw123456") -> dict:
    resp = client.post("/api/auth/register", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()


def auth_headers(session: dict) -> dict:
    return {"Authorization": f"Bearer {session['token']}"}
