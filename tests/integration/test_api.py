"""
Integration tests for the HTTP API over the in-memory store.

Tests cover:
- The four post routes and their status codes
- Error bodies for validation, not-found, malformed and storage failures
- Concurrent likes through the ASGI app
- Health endpoint
"""

import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from postwall.app import create_app
from postwall.config import Settings
from postwall.db.memory import InMemoryPostStore
from postwall.errors import StorageError

GENERIC_ERROR = {"error": "Error interno del servidor", "error_code": "INTERNAL"}


class FailingStore(InMemoryPostStore):
    """Store whose database is down."""

    async def list_posts(self):
        raise StorageError("connection to db.internal:5432 refused")

    async def like_post(self, post_id):
        raise RuntimeError("unexpected driver state")

    async def ping(self):
        return False


class UnreachableStore(InMemoryPostStore):
    """Store whose database refuses connections from the start."""

    async def connect(self):
        raise StorageError("connection to db.internal:5432 refused")


@pytest.fixture
def settings():
    return Settings(_env_file=None, store_backend="memory")


@pytest.fixture
def store():
    return InMemoryPostStore()


@pytest.fixture
def client(settings, store):
    """Test client with the app lifespan running."""
    app = create_app(settings=settings, store=store)
    with TestClient(app) as client:
        yield client


def create(client, titulo="A", url="http://x", descripcion="d"):
    response = client.post("/posts", json={"titulo": titulo, "url": url, "descripcion": descripcion})
    assert response.status_code == 201
    return response.json()


class TestPostRoutes:
    """Tests for the post routes."""

    def test_full_flow(self, client):
        """Create, like, delete, then list nothing."""
        response = client.post(
            "/posts", json={"titulo": "A", "url": "http://x", "descripcion": "d"}
        )
        assert response.status_code == 201
        assert response.json() == {
            "id": 1,
            "titulo": "A",
            "url": "http://x",
            "descripcion": "d",
            "likes": 0,
        }

        response = client.put("/posts/like/1")
        assert response.status_code == 200
        assert response.json()["likes"] == 1

        response = client.delete("/posts/1")
        assert response.status_code == 200
        assert response.json() == {
            "message": "Post eliminado",
            "post": {"id": 1, "titulo": "A", "url": "http://x", "descripcion": "d", "likes": 1},
        }

        response = client.get("/posts")
        assert response.status_code == 200
        assert response.json() == []

    def test_list_newest_first(self, client):
        for i in range(4):
            create(client, titulo=f"post {i}")

        response = client.get("/posts")

        assert response.status_code == 200
        posts = response.json()
        assert len(posts) == 4
        assert [p["id"] for p in posts] == [4, 3, 2, 1]
        assert posts[0]["titulo"] == "post 3"
        assert set(posts[0]) == {"id", "titulo", "url", "descripcion", "likes"}

    def test_create_ignores_client_likes(self, client):
        response = client.post(
            "/posts",
            json={"titulo": "A", "url": "http://x", "descripcion": "d", "likes": 99, "id": 50},
        )

        assert response.status_code == 201
        assert response.json()["likes"] == 0
        assert response.json()["id"] == 1

    @pytest.mark.parametrize(
        "body,missing",
        [
            ({"url": "http://x", "descripcion": "d"}, ["titulo"]),
            ({"titulo": "A", "descripcion": "d"}, ["url"]),
            ({"titulo": "A", "url": "http://x"}, ["descripcion"]),
            ({"titulo": "", "url": "http://x", "descripcion": ""}, ["titulo", "descripcion"]),
            ({}, ["titulo", "url", "descripcion"]),
        ],
    )
    def test_create_missing_fields(self, client, store, body, missing):
        response = client.post("/posts", json=body)

        assert response.status_code == 400
        assert response.json() == {
            "error": "Todos los campos son requeridos",
            "error_code": "VALIDATION_ERROR",
            "details": {"missing": missing},
        }
        assert len(store) == 0

    def test_create_without_body(self, client, store):
        response = client.post("/posts")

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert len(store) == 0

    def test_create_malformed_json(self, client, store):
        response = client.post(
            "/posts", content=b"{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "BAD_REQUEST"
        assert len(store) == 0

    def test_like_increments_each_call(self, client):
        post = create(client)

        for expected in range(1, 4):
            response = client.put(f"/posts/like/{post['id']}")
            assert response.status_code == 200
            assert response.json()["likes"] == expected

    def test_like_null_likes(self, client, store):
        post_id = store.insert_raw("Legacy", "http://old", "d", likes=None)

        response = client.put(f"/posts/like/{post_id}")

        assert response.status_code == 200
        assert response.json()["likes"] == 1

    def test_like_not_found(self, client, store):
        post = create(client)

        response = client.put("/posts/like/999")

        assert response.status_code == 404
        assert response.json() == {"error": "Post no encontrado", "error_code": "NOT_FOUND"}
        assert store.raw_likes(post["id"]) == 0

    def test_delete_not_found(self, client, store):
        create(client)

        response = client.delete("/posts/999")

        assert response.status_code == 404
        assert response.json()["error"] == "Post no encontrado"
        assert len(store) == 1

    def test_delete_removes_from_listing(self, client):
        first = create(client, titulo="keep")
        second = create(client, titulo="drop")

        assert client.delete(f"/posts/{second['id']}").status_code == 200

        posts = client.get("/posts").json()
        assert [p["id"] for p in posts] == [first["id"]]
        assert client.delete(f"/posts/{second['id']}").status_code == 404

    @pytest.mark.parametrize("post_id", [2**31, 3_000_000_000, -(2**31) - 1])
    def test_out_of_range_id_not_found(self, client, post_id):
        """Ids no SERIAL column can hold are plain 404s."""
        assert client.put(f"/posts/like/{post_id}").status_code == 404
        assert client.delete(f"/posts/{post_id}").status_code == 404

    def test_non_integer_id(self, client):
        response = client.put("/posts/like/abc")

        assert response.status_code == 400
        assert response.json()["error_code"] == "BAD_REQUEST"


class TestErrorHandling:
    """Tests for storage and unexpected failures."""

    @pytest.fixture
    def failing_client(self, settings):
        app = create_app(settings=settings, store=FailingStore())
        with TestClient(app) as client:
            yield client

    def test_storage_error_is_generic_500(self, failing_client, caplog):
        response = failing_client.get("/posts")

        assert response.status_code == 500
        assert response.json() == GENERIC_ERROR
        assert "db.internal" not in response.text
        assert "db.internal" in caplog.text

    def test_unexpected_error_is_generic_500(self, failing_client, caplog):
        response = failing_client.put("/posts/like/1")

        assert response.status_code == 500
        assert response.json() == GENERIC_ERROR
        assert "unexpected driver state" not in response.text
        assert "unexpected driver state" in caplog.text

    def test_health_unhealthy(self, failing_client):
        response = failing_client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"

    def test_unexpected_error_keeps_cors_headers(self, failing_client, caplog):
        """A browser on another origin can still read the 500."""
        response = failing_client.put("/posts/like/1", headers={"Origin": "http://front.example"})

        assert response.status_code == 500
        assert response.json() == GENERIC_ERROR
        assert response.headers["access-control-allow-origin"] == "*"
        assert "unexpected driver state" in caplog.text

    def test_storage_error_keeps_cors_headers(self, failing_client):
        response = failing_client.get("/posts", headers={"Origin": "http://front.example"})

        assert response.status_code == 500
        assert response.headers["access-control-allow-origin"] == "*"

    def test_starts_when_store_unreachable(self, settings, caplog):
        """Startup survives a refused connection; requests get a 500."""
        app = create_app(settings=settings, store=UnreachableStore())

        with TestClient(app) as client:
            response = client.get("/posts")

        assert response.status_code == 500
        assert response.json() == GENERIC_ERROR
        assert "unavailable at startup" in caplog.text

    def test_starts_when_postgres_down(self):
        """Nothing listens on port 1, so the first query fails, not startup."""
        settings = Settings(
            _env_file=None, store_backend="postgres", db_host="127.0.0.1", db_port=1
        )
        app = create_app(settings=settings)

        with TestClient(app) as client:
            posts = client.get("/posts")
            health = client.get("/health")

        assert posts.status_code == 500
        assert posts.json() == GENERIC_ERROR
        assert "127.0.0.1" not in posts.text
        assert health.status_code == 503


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "postwall"}


class TestConcurrentLikes:
    """Concurrent requests against one post."""

    @pytest.mark.asyncio
    async def test_concurrent_likes_not_lost(self, settings, store):
        """K concurrent likes raise the counter by exactly K."""
        await store.connect()
        app = create_app(settings=settings, store=store)
        transport = httpx.ASGITransport(app=app)

        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post(
                "/posts", json={"titulo": "A", "url": "http://x", "descripcion": "d"}
            )
            post_id = response.json()["id"]

            responses = await asyncio.gather(
                *(client.put(f"/posts/like/{post_id}") for _ in range(25))
            )

            assert all(r.status_code == 200 for r in responses)
            assert sorted(r.json()["likes"] for r in responses) == list(range(1, 26))

            posts = (await client.get("/posts")).json()
            assert posts[0]["likes"] == 25
