"""
Integration tests for the registration endpoint.

The app runs in-process through httpx's ASGI transport so it shares the
test's event loop and in-memory database.
"""

import httpx
import pytest
import pytest_asyncio

from coedit.api.deps import get_event_bus
from coedit.core.db import get_db
from coedit.main import app


@pytest_asyncio.fixture
async def client(session, events):
    async def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_event_bus] = lambda: events

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


class TestRegister:
    """Tests for POST /register."""

    @pytest.mark.asyncio
    async def test_success(self, client, users, captured):
        response = await client.post("/register", json={
            "username": "dave",
            "password": "Passw0rd",
            "email": "dave@example.com",
        })

        assert response.status_code == 200
        assert response.json()["status"] == "success"

        user = await users.find_user({"username": "dave"})
        assert user is not None
        assert user.password != "Passw0rd"
        assert user.token
        assert [event.type for event in captured] == ["add"]

    @pytest.mark.asyncio
    async def test_username_taken(self, client, alice):
        response = await client.post("/register", json={
            "username": "alice",
            "password": "Passw0rd",
            "email": "alice2@example.com",
        })

        assert response.status_code == 200
        assert response.json() == {"status": "neutral", "message": "Username already taken"}

    @pytest.mark.asyncio
    async def test_invalid_form(self, client, users):
        response = await client.post("/register", json={
            "username": " ",
            "password": "a",
            "email": "broken",
            "confirm_password": "b",
        })

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "fail"
        assert "Username cannot be empty" in body["message"]
        assert "Please insert a valid email" in body["message"]
        assert await users.count_users() == 0

    @pytest.mark.asyncio
    async def test_empty_body(self, client, users, captured):
        response = await client.post("/register", json={})

        assert response.status_code == 200
        assert response.json()["status"] == "fail"
        assert await users.count_users() == 0
        assert captured == []
