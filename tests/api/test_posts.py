"""Post endpoint tests."""

import pytest
from httpx import AsyncClient

from scribe.models import Post, User
from tests.conftest import AuthenticatedClient

POST_BODY = {
    "title": "A new post",
    "content": "Some thoughtful content.",
    "cover_image": "https://example.com/cover.png",
}


@pytest.mark.asyncio
async def test_list_posts_empty(client: AsyncClient):
    response = await client.get("/api/posts")
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_list_posts(client: AsyncClient, post: Post):
    response = await client.get("/api/posts")

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["id"] == post.id
    assert data[0]["title"] == "First post"


@pytest.mark.asyncio
async def test_get_post(client: AsyncClient, post: Post):
    response = await client.get(f"/api/posts/{post.id}")

    assert response.status_code == 200
    assert response.json()["content"] == post.content


@pytest.mark.asyncio
async def test_get_post_not_found(client: AsyncClient):
    response = await client.get("/api/posts/nonexistent")

    assert response.status_code == 404
    assert response.json()["detail"] == "Post not found"


@pytest.mark.asyncio
async def test_create_post(authenticated_client: AuthenticatedClient, user: User):
    response = await authenticated_client.post("/api/posts", json=POST_BODY)

    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "A new post"
    assert data["user_id"] == user.id
    assert data["is_draft"] is True


@pytest.mark.asyncio
async def test_create_post_unauthenticated(client: AsyncClient):
    response = await client.post("/api/posts", json=POST_BODY)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_post_validation(authenticated_client: AuthenticatedClient):
    response = await authenticated_client.post("/api/posts", json={**POST_BODY, "title": "A"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_own_post(authenticated_client: AuthenticatedClient, post: Post):
    response = await authenticated_client.put(f"/api/posts/{post.id}", json={"title": "Edited title"})

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Edited title"
    assert data["content"] == "Hello from the test suite."


@pytest.mark.asyncio
async def test_update_other_users_post(other_client: AuthenticatedClient, post: Post):
    response = await other_client.put(f"/api/posts/{post.id}", json={"title": "Hijacked"})

    assert response.status_code == 403
    assert response.json()["detail"] == "You do not have permission to edit this post"


@pytest.mark.asyncio
async def test_update_missing_post(authenticated_client: AuthenticatedClient):
    response = await authenticated_client.put("/api/posts/nonexistent", json={"title": "Edited"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_own_post(authenticated_client: AuthenticatedClient, post: Post):
    response = await authenticated_client.delete(f"/api/posts/{post.id}")

    assert response.status_code == 200
    assert response.json()["id"] == post.id

    response = await authenticated_client.get(f"/api/posts/{post.id}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_other_users_post(other_client: AuthenticatedClient, post: Post):
    response = await other_client.delete(f"/api/posts/{post.id}")

    assert response.status_code == 403
    assert response.json()["detail"] == "You do not have permission to delete this post"


@pytest.mark.asyncio
async def test_delete_post_unauthenticated(client: AsyncClient, post: Post):
    response = await client.delete(f"/api/posts/{post.id}")
    assert response.status_code == 401
