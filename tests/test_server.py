"""Tests for the FastAPI application factory."""

from __future__ import annotations

from fastapi.testclient import TestClient

from mlm import __version__
from mlm.infrastructure.app_db import AppDatabase
from mlm.server import create_app


class TestHealth:
    def test_ok(self) -> None:
        client = TestClient(create_app())
        response = client.get("/health")
        assert response.status_code == 200
        assert response.text == "OK"
        assert response.headers["content-type"].startswith("text/plain")

    def test_unknown_route(self) -> None:
        client = TestClient(create_app())
        assert client.get("/nope").status_code == 404

    def test_post_not_allowed(self) -> None:
        client = TestClient(create_app())
        assert client.post("/health").status_code == 405


class TestCreateApp:
    def test_db_on_state(self, app_db: AppDatabase) -> None:
        app = create_app(app_db)
        assert app.state.db is app_db

    def test_metadata(self) -> None:
        app = create_app()
        assert app.title == "mlm"
        assert app.version == __version__
