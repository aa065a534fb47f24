"""Admin endpoint tests."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from scribe.models import Post, User
from scribe.services.email import EmailService
from tests.conftest import AuthenticatedClient


def user_body(email: str = "created@example.com", password: str = "Abcd1234", **overrides) -> dict:
    body = {
        "first_name": "Grace",
        "last_name": "Hopper",
        "email": email,
        "password": password,
        "confirm_password": password,
    }
    body.update(overrides)
    return body


class TestAdminAccess:
    """Admin routes require an admin session."""

    @pytest.mark.asyncio
    async def test_anonymous(self, client: AsyncClient):
        response = await client.post("/api/admin/users", json=user_body())
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_admin(self, authenticated_client: AuthenticatedClient, post: Post):
        response = await authenticated_client.post("/api/admin/users", json=user_body())
        assert response.status_code == 403

        response = await authenticated_client.put(f"/api/admin/posts/{post.id}", json={"title": "Edited"})
        assert response.status_code == 403


class TestAdminUsers:
    """Tests for /api/admin/users."""

    @pytest.mark.asyncio
    async def test_create_user(
        self, admin_client: AuthenticatedClient, mailer: EmailService, mail_backend: AsyncMock
    ):
        response = await admin_client.post("/api/admin/users", json=user_body())

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "created@example.com"
        assert data["is_verified"] is False

        await mailer.drain()
        assert mail_backend.send.call_args[1]["to"] == "created@example.com"

    @pytest.mark.asyncio
    async def test_create_user_conflict(self, admin_client: AuthenticatedClient, user: User):
        response = await admin_client.post("/api/admin/users", json=user_body(email=user.email))
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_update_user(self, admin_client: AuthenticatedClient, client: AsyncClient, user: User):
        response = await admin_client.put(
            f"/api/admin/users/{user.id}",
            json=user_body(email="renamed@example.com", password="Changed123"),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == user.id
        assert data["email"] == "renamed@example.com"
        assert data["first_name"] == "Grace"

        login = await client.post(
            "/api/account/login", json={"email": "renamed@example.com", "password": "Changed123"}
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_update_user_not_found(self, admin_client: AuthenticatedClient):
        response = await admin_client.put("/api/admin/users/nonexistent", json=user_body())
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_user_email_conflict(
        self, admin_client: AuthenticatedClient, user: User, other_user: User
    ):
        response = await admin_client.put(f"/api/admin/users/{user.id}", json=user_body(email=other_user.email))

        assert response.status_code == 409
        assert response.json()["detail"] == "Email already in use"

    @pytest.mark.asyncio
    async def test_update_user_validation(self, admin_client: AuthenticatedClient, user: User):
        response = await admin_client.put(
            f"/api/admin/users/{user.id}", json=user_body(confirm_password="Mismatch123")
        )
        assert response.status_code == 422


class TestAdminPosts:
    """Tests for /api/admin/posts."""

    @pytest.mark.asyncio
    async def test_update_any_post(self, admin_client: AuthenticatedClient, post: Post):
        response = await admin_client.put(
            f"/api/admin/posts/{post.id}", json={"title": "Moderated", "is_draft": True}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Moderated"
        assert data["is_draft"] is True
        assert data["user_id"] == post.user_id

    @pytest.mark.asyncio
    async def test_update_missing_post(self, admin_client: AuthenticatedClient):
        response = await admin_client.put("/api/admin/posts/nonexistent", json={"title": "Moderated"})
        assert response.status_code == 404
