import pytest

from sleep_system import config
from sleep_system.core import database


@pytest.fixture
def store(tmp_path, monkeypatch):
    """Fresh SQLite store in a temp dir, closed again after the test."""
    monkeypatch.setattr(config, "DB_PATH", tmp_path / "sleep.db")
    monkeypatch.setattr(config, "API_KEY", "")
    database.init_db()
    yield database
    database.close_connection()
