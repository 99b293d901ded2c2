"""Pytest configuration: a fresh SQLite database per test."""

import pytest
from fastapi.testclient import TestClient

from record_tracker.api.app import app
from record_tracker.api.state import AppState, get_state
from record_tracker.core.catalog_store import add_album
from record_tracker.core.database import Database


@pytest.fixture
def db(tmp_path):
    """Initialized database in a temporary directory."""
    database = Database(tmp_path / "record_tracker.db", timeout=1.0)
    database.init_schema()
    return database


@pytest.fixture
def album(db):
    """One album in the catalog."""
    return add_album(db, "Kind of Blue", "Miles Davis")


@pytest.fixture
def client(db):
    """TestClient whose routes use the temporary database."""
    state = AppState(db)
    app.dependency_overrides[get_state] = lambda: state
    yield TestClient(app)
    app.dependency_overrides.clear()
