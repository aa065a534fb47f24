"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock

# Set test environment before importing app
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "4")
os.environ.setdefault("EMAIL_BACKEND", "console")
os.environ.setdefault("SESSION_BACKEND", "memory")

import pytest
from httpx import ASGITransport, AsyncClient, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool
from sqlmodel import SQLModel, select

from scribe.api.deps import get_email_service
from scribe.config import settings
from scribe.database import get_session
from scribe.main import app
from scribe.models import Post, User, UserRole, VerificationCode, VerificationPurpose
from scribe.services.email import EmailService
from scribe.services.passwords import hash_password
from scribe.services.sessions import InMemorySessionStore, get_session_store, to_session_user

TEST_PASSWORD = "Abcd1234"


def _engine_options(url: str) -> dict[str, Any]:
    if url.startswith("sqlite"):
        # A single shared connection keeps the in-memory database alive for the whole test
        return {"poolclass": StaticPool, "connect_args": {"check_same_thread": False}}
    return {"poolclass": NullPool}


@pytest.fixture
async def test_engine():
    """Create a test database engine with a fresh schema."""
    engine = create_async_engine(
        settings.database_url_test,
        echo=False,
        **_engine_options(settings.database_url_test),
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Services commit on their own, so each test gets its own schema instead of
    an enclosing transaction.
    """
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
def mail_backend() -> AsyncMock:
    """Email backend that records messages instead of sending them."""
    backend = AsyncMock()
    backend.send.return_value = True
    return backend


@pytest.fixture
async def mailer(mail_backend: AsyncMock) -> AsyncGenerator[EmailService, None]:
    """Email service wired to the mock backend. Background sends are drained on teardown."""
    service = EmailService(backend=mail_backend)
    yield service
    await service.drain()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore(settings.session_ttl_seconds)


@pytest.fixture
async def client(
    session: AsyncSession,
    session_store: InMemorySessionStore,
    mailer: EmailService,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_session():
        yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_email_service] = lambda: mailer

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_user(
    session: AsyncSession,
    email: str,
    role: UserRole = UserRole.USER,
    is_verified: bool = True,
    password: str = TEST_PASSWORD,
) -> User:
    user = User(
        first_name="Test",
        last_name="User",
        email=email,
        password_hash=await hash_password(password),
        role=role,
        is_verified=is_verified,
    )
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def user(session: AsyncSession) -> User:
    """Create a verified test user."""
    return await make_user(session, "test@example.com")


@pytest.fixture
async def other_user(session: AsyncSession) -> User:
    """Create a second verified user."""
    return await make_user(session, "other@example.com")


@pytest.fixture
async def unverified_user(session: AsyncSession) -> User:
    """Create a user who has not confirmed their email yet."""
    return await make_user(session, "pending@example.com", is_verified=False)


@pytest.fixture
async def admin_user(session: AsyncSession) -> User:
    """Create a test admin user."""
    return await make_user(session, "admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
async def post(session: AsyncSession, user: User) -> Post:
    """Create a post written by ``user``."""
    post = Post(
        title="First post",
        content="Hello from the test suite.",
        cover_image="https://example.com/cover.png",
        is_draft=False,
        user_id=user.id,
    )
    session.add(post)
    await session.commit()
    return post


async def issued_code(session: AsyncSession, user_id: str, purpose: VerificationPurpose) -> VerificationCode:
    """Most recent code issued to ``user_id`` for ``purpose``."""
    stmt = (
        select(VerificationCode)
        .where(VerificationCode.user_id == user_id, VerificationCode.purpose == purpose)
        .order_by(VerificationCode.created_at.desc())  # type: ignore[attr-defined]
    )
    result = await session.execute(stmt)
    return result.scalars().first()  # type: ignore[return-value]


def session_cookie(response: Response) -> str | None:
    """Session id set by ``response``, read straight from its Set-Cookie headers."""
    for header in response.headers.get_list("set-cookie"):
        name, _, rest = header.partition("=")
        if name == settings.session_cookie_name:
            return rest.split(";", 1)[0]
    return None


def cookie_header(session_id: str) -> dict[str, str]:
    return {"Cookie": f"{settings.session_cookie_name}={session_id}"}


@pytest.fixture
async def auth_headers(session_store: InMemorySessionStore, user: User) -> dict[str, str]:
    """Session cookie for the test user."""
    return cookie_header(await session_store.create(to_session_user(user)))


@pytest.fixture
async def other_headers(session_store: InMemorySessionStore, other_user: User) -> dict[str, str]:
    """Session cookie for the second user."""
    return cookie_header(await session_store.create(to_session_user(other_user)))


@pytest.fixture
async def admin_headers(session_store: InMemorySessionStore, admin_user: User) -> dict[str, str]:
    """Session cookie for the admin user."""
    return cookie_header(await session_store.create(to_session_user(admin_user)))


# Helper to make authenticated requests
class AuthenticatedClient:
    """Wrapper for AsyncClient that sends a session cookie."""

    def __init__(self, client: AsyncClient, headers: dict[str, str]):
        self.client = client
        self.headers = headers

    async def get(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.get(url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.post(url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.put(url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Any:
        kwargs.setdefault("headers", {}).update(self.headers)
        return await self.client.delete(url, **kwargs)


@pytest.fixture
def authenticated_client(client: AsyncClient, auth_headers: dict[str, str]) -> AuthenticatedClient:
    """Create an authenticated test client."""
    return AuthenticatedClient(client, auth_headers)


@pytest.fixture
def other_client(client: AsyncClient, other_headers: dict[str, str]) -> AuthenticatedClient:
    """Authenticated client for a user who owns nothing."""
    return AuthenticatedClient(client, other_headers)


@pytest.fixture
def admin_client(client: AsyncClient, admin_headers: dict[str, str]) -> AuthenticatedClient:
    """Create an authenticated admin test client."""
    return AuthenticatedClient(client, admin_headers)
