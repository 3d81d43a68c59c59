from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from kiwi_counter.main import create_app


@pytest.fixture()
def app(tmp_path: Path):
    """App wired to a throwaway file-backed SQLite database."""
    application = create_app(
        database_url=f"sqlite:///{tmp_path / 'data.db'}",
        session_secret="test-secret",
        https_only=False,
        configure_logging=False,
    )
    yield application
    application.state.engine.dispose()


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def session_factory(app):
    return app.state.session_factory


@pytest.fixture()
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture()
def fast_hashing(monkeypatch):
    # pbkdf2 at full cost makes the concurrency tests slow; the scheme stays the same
    from kiwi_counter.core import security

    fast = security.pwd_context.copy(pbkdf2_sha256__default_rounds=1000)
    monkeypatch.setattr(security, "pwd_context", fast)
    return fast
