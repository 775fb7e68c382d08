"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from todo_service.config import Settings
from todo_service.errors import PoolError, StoreReadError
from todo_service.server import create_app, get_store


@pytest.fixture
def settings(db_path):
    return Settings(db_path=db_path, pool_size=2, pool_timeout=2.0)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as client:
        yield client


class FailingStore:
    def __init__(self, exc):
        self.exc = exc

    async def list_all(self):
        raise self.exc


class TestTodoRoutes:
    """Test the /api/todo routes."""

    def test_create_todo(self, client):
        response = client.post("/api/todo", content="buy milk")
        assert response.status_code == 200
        assert response.json() == {"id": 1, "task": "buy milk", "done": False}

    def test_get_todo(self, client):
        client.post("/api/todo", content="buy milk")
        response = client.get("/api/todo/1")
        assert response.status_code == 200
        assert response.json() == {"id": 1, "task": "buy milk", "done": False}

    def test_get_missing_todo(self, client):
        response = client.get("/api/todo/99")
        assert response.status_code == 404
        assert response.json() == {"error": "Todo 99 not found"}

    def test_get_non_integer_id(self, client):
        assert client.get("/api/todo/abc").status_code == 422

    def test_list_todos(self, client):
        client.post("/api/todo", content="buy milk")
        client.post("/api/todo", content="walk dog")
        response = client.get("/api/todo")
        assert response.status_code == 200
        assert response.json() == [
            {"id": 1, "task": "buy milk", "done": False},
            {"id": 2, "task": "walk dog", "done": False},
        ]

    def test_list_empty(self, client):
        assert client.get("/api/todo").json() == []

    def test_create_empty_task(self, client):
        response = client.post("/api/todo", content="")
        assert response.status_code == 200
        assert response.json()["task"] == ""

    def test_create_non_utf8_body(self, client):
        response = client.post("/api/todo", content=b"\xff\xfe")
        assert response.status_code == 400

    def test_todos_persist_across_restarts(self, settings):
        with TestClient(create_app(settings)) as first:
            first.post("/api/todo", content="buy milk")
        with TestClient(create_app(settings)) as second:
            assert second.get("/api/todo/1").json()["task"] == "buy milk"


class TestErrorMapping:
    """Test how store failures surface to clients."""

    def test_store_error_is_500(self, settings):
        app = create_app(settings)
        app.dependency_overrides[get_store] = lambda: FailingStore(StoreReadError("disk gone"))
        with TestClient(app) as client:
            response = client.get("/api/todo")
        assert response.status_code == 500
        assert response.json() == {"error": "Internal storage error"}

    def test_pool_error_is_503(self, settings):
        app = create_app(settings)
        app.dependency_overrides[get_store] = lambda: FailingStore(PoolError("exhausted"))
        with TestClient(app) as client:
            response = client.get("/api/todo")
        assert response.status_code == 503
        assert response.json() == {"error": "Database unavailable"}


class TestDocs:
    """Test the generated API documentation."""

    def test_openapi_document(self, client):
        response = client.get("/api/openapi.json")
        assert response.status_code == 200
        paths = response.json()["paths"]
        assert set(paths["/api/todo"]) == {"get", "post"}
        assert "get" in paths["/api/todo/{todo_id}"]

    def test_swagger_ui(self, client):
        response = client.get("/swagger-ui")
        assert response.status_code == 200
        assert "swagger" in response.text.lower()
