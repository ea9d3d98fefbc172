"""
End-to-end tests for the users routes, through the real app (middleware,
exception handlers, dependencies) and an in-memory SQLite database.
"""

import asyncio

import httpx
import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

from user_service.database.base import Base
from user_service.main import create_app
from user_service.repositories.user_repository import UserRepository

ALICE = {
    "username": "alice",
    "first_name": "A",
    "last_name": "L",
    "email": "alice@x.com",
    "password": "p",
}

DUPLICATE_MESSAGE = "Duplicate username or email contained a duplicate key."


@pytest.mark.asyncio
class TestSignupRoute:

    async def test_signup_created(self, client):
        resp = await client.post("/signup", json=ALICE)

        assert resp.status_code == 201
        assert resp.headers["location"] == "/users/1"
        assert resp.json() == {"id": 1, **ALICE}

    async def test_signup_duplicate_username_conflict(self, client):
        await client.post("/signup", json=ALICE)

        resp = await client.post("/signup", json={**ALICE, "email": "other@x.com"})

        assert resp.status_code == 409
        assert resp.headers["content-type"].startswith("text/plain")
        assert resp.text == DUPLICATE_MESSAGE

    async def test_signup_duplicate_email_conflict(self, client):
        await client.post("/signup", json=ALICE)

        resp = await client.post("/signup", json={**ALICE, "username": "bob"})

        assert resp.status_code == 409
        assert resp.text == DUPLICATE_MESSAGE

    async def test_signup_location_follows_generated_id(self, client):
        await client.post("/signup", json=ALICE)

        resp = await client.post("/signup", json={**ALICE, "username": "bob", "email": "bob@x.com"})

        assert resp.status_code == 201
        assert resp.headers["location"] == "/users/2"
        assert resp.json()["id"] == 2

    async def test_signup_missing_field_is_rejected(self, client):
        body = dict(ALICE)
        body.pop("email")

        resp = await client.post("/signup", json=body)

        assert resp.status_code == 422

    async def test_signup_storage_down_is_500_plain_text(self, client, monkeypatch):
        async def _refused(self, payload):
            raise OperationalError("INSERT ...", {}, ConnectionRefusedError("Connection refused"))

        monkeypatch.setattr(UserRepository, "insert_user", _refused)

        resp = await client.post("/signup", json=ALICE)

        assert resp.status_code == 500
        assert resp.text == "Database error, not query related."

    async def test_signup_driver_encoding_error_is_unknown_database(self, client):
        """
        A lone surrogate is valid JSON but cannot be bound by the driver; the
        failure is still a storage error with the fixed 500 message.
        """
        body = (
            '{"username": "\\ud800", "first_name": "A", "last_name": "L", '
            '"email": "alice@x.com", "password": "p"}'
        )

        resp = await client.post(
            "/signup",
            content=body,
            headers={"content-type": "application/json", "Origin": "https://example.com"},
        )

        assert resp.status_code == 500
        assert resp.text == "Database error, not query related."
        assert resp.headers["access-control-allow-origin"] == "https://example.com"


@pytest.mark.asyncio
class TestListAndFetchRoutes:

    async def test_list_users_empty(self, client):
        resp = await client.get("/users")

        assert resp.status_code == 200
        assert resp.json() == []

    async def test_list_users_returns_created(self, client):
        await client.post("/signup", json=ALICE)
        await client.post("/signup", json={**ALICE, "username": "bob", "email": "bob@x.com"})

        resp = await client.get("/users")

        assert resp.status_code == 200
        assert sorted(u["username"] for u in resp.json()) == ["alice", "bob"]

    async def test_fetch_user(self, client):
        await client.post("/signup", json=ALICE)

        resp = await client.get("/users/1")

        assert resp.status_code == 200
        assert resp.json() == {"id": 1, **ALICE}

    async def test_fetch_missing_user_is_404(self, client):
        resp = await client.get("/users/999")

        assert resp.status_code == 404
        assert resp.json()["code"] == "not_found"

    async def test_fetch_non_integer_id_is_422(self, client):
        resp = await client.get("/users/abc")

        assert resp.status_code == 422

    async def test_fetch_id_beyond_64_bits_is_422(self, client):
        resp = await client.get("/users/99999999999999999999")

        assert resp.status_code == 422

    async def test_fetch_largest_64_bit_id_is_404(self, client):
        resp = await client.get(f"/users/{2**63 - 1}")

        assert resp.status_code == 404

    async def test_list_storage_failure_is_500_without_details(self, client, monkeypatch):
        async def _broken(self, *args, **kwargs):
            raise OperationalError("SELECT ...", {}, Exception("password authentication failed"))

        monkeypatch.setattr(AsyncSession, "execute", _broken)

        resp = await client.get("/users")

        assert resp.status_code == 500
        assert "password authentication" not in resp.text


@pytest.mark.asyncio
class TestDeleteRoute:

    async def test_delete_then_fetch_is_404(self, client):
        await client.post("/signup", json=ALICE)

        resp = await client.delete("/users/1")
        assert resp.status_code == 204
        assert resp.content == b""

        assert (await client.get("/users/1")).status_code == 404
        assert (await client.get("/users")).json() == []

    async def test_delete_missing_user_is_404(self, client):
        resp = await client.delete("/users/999")

        assert resp.status_code == 404

    async def test_delete_id_beyond_64_bits_is_422(self, client):
        resp = await client.delete("/users/99999999999999999999")

        assert resp.status_code == 422

    async def test_freed_username_can_sign_up_again(self, client):
        await client.post("/signup", json=ALICE)
        await client.delete("/users/1")

        resp = await client.post("/signup", json=ALICE)

        assert resp.status_code == 201


@pytest.fixture()
async def file_client(test_settings, tmp_path):
    """
    Client on a file-backed SQLite database with a connection per session, so
    concurrent requests run in separate transactions.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'users.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    transport = httpx.ASGITransport(app=create_app(test_settings, engine=engine))
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    await engine.dispose()


@pytest.mark.asyncio
class TestConcurrentSignup:

    async def test_identical_signups_exactly_one_wins(self, file_client):
        attempts = 5

        responses = await asyncio.gather(
            *(file_client.post("/signup", json=ALICE) for _ in range(attempts))
        )

        assert sorted(r.status_code for r in responses) == [201] + [409] * (attempts - 1)
        assert all(r.text == DUPLICATE_MESSAGE for r in responses if r.status_code == 409)

        listed = await file_client.get("/users")
        assert [u["username"] for u in listed.json()] == ["alice"]
