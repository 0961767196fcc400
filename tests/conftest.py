# tests/conftest.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.database import Datastore
from app.main import create_app


@pytest.fixture
def settings(tmp_path) -> Settings:
    # one throwaway SQLite file per test; ignore any local .env
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'contacts.db'}",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def datastore(settings):
    ds = Datastore.from_settings(settings)
    yield ds
    ds.close()


@pytest.fixture
def client(settings, datastore):
    # entering the client runs the lifespan, which bootstraps the table
    with TestClient(create_app(settings, datastore=datastore)) as c:
        yield c


class FakeDatastore:
    """In-memory stand-in for Datastore: returns canned rows or raises."""

    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None):
        self.rows = rows or []
        self.error = error
        self.statements: list = []

    def execute(self, statement, params=None):
        self.statements.append(statement)
        if self.error is not None:
            raise self.error
        return list(self.rows)

    def ping(self):
        return {"ok": self.error is None}

    def close(self):
        pass


@pytest.fixture
def fake_client_factory(settings):
    clients = []

    def _make(**kwargs) -> TestClient:
        c = TestClient(create_app(settings, datastore=FakeDatastore(**kwargs)))
        c.__enter__()
        clients.append(c)
        return c

    yield _make
    for c in clients:
        c.__exit__(None, None, None)
