"""Pytest fixtures for the dockerdemo tests."""

import socket
import sys
import time
from datetime import datetime, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine

# Ensure project root is in path for dockerdemo imports
_project_root = Path(__file__).resolve().parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from dockerdemo.config.settings import Settings  # noqa: E402
from dockerdemo.services.database import Database  # noqa: E402

FIXED_SERVER_TIME = datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


class FakeDatabase:
    """Stands in for Database; ``behaviour`` is called in the worker thread."""

    def __init__(self, name="testdb", behaviour=None):
        self.name = name
        self.behaviour = behaviour or (lambda: FIXED_SERVER_TIME)
        self.calls = 0
        self.disposed = 0

    def fetch_server_time(self):
        self.calls += 1
        return self.behaviour()

    def dispose(self):
        self.disposed += 1


def raising(exc):
    def _behaviour():
        raise exc
    return _behaviour


def sleeping(seconds, value=FIXED_SERVER_TIME):
    def _behaviour():
        time.sleep(seconds)
        return value
    return _behaviour


@pytest.fixture
def settings() -> Settings:
    return Settings(DB_NAME="testdb", DB_CHECK_TIMEOUT=5.0)


@pytest.fixture
def fake_database() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def sqlite_database(tmp_path: Path):
    """Real pooled engine on a SQLite file; the probe asks SQLite for its clock."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'probe.db'}",
        pool_size=10,
        max_overflow=50,
        pool_timeout=30,
    )
    db = Database(engine, "testdb", probe_query="SELECT CURRENT_TIMESTAMP AS server_time")
    yield db
    db.dispose()


@pytest.fixture
def closed_port() -> int:
    """A local TCP port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
