"""HTTP surface tests through FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from dockerdemo.config.settings import Settings
from dockerdemo.main import create_app
from dockerdemo.services.database import Database

from conftest import FakeDatabase, raising, sleeping


@pytest.fixture
def client(settings, fake_database):
    with TestClient(create_app(settings, database=fake_database)) as c:
        yield c


class TestStaticRoutes:

    def test_hello(self, client):
        resp = client.get("/api/hello")
        assert resp.status_code == 200
        assert resp.json() == {"message": "Hello World from Dockerized FastAPI!"}

    def test_api_info_lists_endpoints(self, client):
        resp = client.get("/api")
        assert resp.status_code == 200
        assert resp.json()["endpoints"] == ["/api/hello", "/db-check"]

    def test_index_page(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert "text/html" in resp.headers["content-type"]
        assert 'id="db-output"' in resp.text

    def test_page_script_is_served(self, client):
        resp = client.get("/static/app.js")
        assert resp.status_code == 200
        assert "/db-check" in resp.text


class TestDbCheck:

    def test_ok_envelope(self, client):
        resp = client.get("/db-check")
        assert resp.status_code == 200
        assert resp.json() == {
            "status": "ok",
            "database": "testdb",
            "serverTime": "2024-01-01T00:00:00Z",
        }

    def test_each_request_probes_again(self, client, fake_database):
        for _ in range(3):
            assert client.get("/db-check").status_code == 200
        assert fake_database.calls == 3

    def test_connection_refused_is_500(self, settings):
        exc = OperationalError("SELECT NOW()", {}, Exception("ECONNREFUSED 127.0.0.1:5432"))
        db = FakeDatabase(behaviour=raising(exc))
        with TestClient(create_app(settings, database=db)) as c:
            resp = c.get("/db-check")
        assert resp.status_code == 500
        body = resp.json()
        assert body["status"] == "error"
        assert "ECONNREFUSED" in body["message"]
        assert body["kind"] == "unreachable"

    def test_timeout_is_504(self):
        settings = Settings(DB_NAME="testdb", DB_CHECK_TIMEOUT=0.05)
        db = FakeDatabase(behaviour=sleeping(0.5))
        with TestClient(create_app(settings, database=db)) as c:
            resp = c.get("/db-check")
        assert resp.status_code == 504
        assert resp.json()["kind"] == "timeout"

    def test_without_lifespan_reports_not_ready(self, settings, fake_database):
        # no context manager: startup never runs
        c = TestClient(create_app(settings, database=fake_database))
        resp = c.get("/db-check")
        assert resp.status_code == 503
        assert fake_database.calls == 0


class TestLifespan:

    def test_injected_database_is_left_open(self, settings, fake_database):
        with TestClient(create_app(settings, database=fake_database)):
            pass
        assert fake_database.disposed == 0

    def test_owned_database_is_disposed(self, settings, monkeypatch):
        created = []

        def fake_from_settings(cls, s):
            created.append(FakeDatabase(name=s.DB_NAME))
            return created[-1]

        monkeypatch.setattr(Database, "from_settings", classmethod(fake_from_settings))
        with TestClient(create_app(settings)) as c:
            assert c.get("/db-check").json()["database"] == "testdb"
        assert len(created) == 1
        assert created[0].disposed == 1
