"""Server-side session storage keyed by an opaque session id.

A session holds the ``SessionUser`` captured at login. It is trusted as-is
for the lifetime of the session; the user row is not re-read per request.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from functools import lru_cache
from secrets import token_urlsafe

from scribe.config import settings
from scribe.models import SessionUser, User

logger = logging.getLogger(__name__)


def new_session_id() -> str:
    return token_urlsafe(32)


def to_session_user(user: User | SessionUser) -> SessionUser:
    """Build the minimal identity stored for an authenticated session."""
    return SessionUser(
        id=user.id,
        role=user.role,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        is_verified=user.is_verified,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


class SessionStore(ABC):
    """Storage for authenticated sessions."""

    def __init__(self, ttl_seconds: int):
        self.ttl_seconds = ttl_seconds

    @abstractmethod
    async def create(self, principal: SessionUser) -> str:
        """Store ``principal`` under a new session id and return the id."""
        pass

    @abstractmethod
    async def get(self, session_id: str) -> SessionUser | None:
        """Return the principal for ``session_id``, or None if missing or expired."""
        pass

    @abstractmethod
    async def delete(self, session_id: str) -> None:
        """Destroy a session. Unknown ids are ignored."""
        pass

    async def ping(self) -> bool:
        """Check that the backing storage is reachable."""
        return True

    async def close(self) -> None:
        pass


class InMemorySessionStore(SessionStore):
    """Process-local session store.

    Note: sessions are lost on restart and not shared between workers.
    Use ``RedisSessionStore`` for multi-instance deployments.
    """

    def __init__(self, ttl_seconds: int):
        super().__init__(ttl_seconds)
        # session id -> (expires at, principal)
        self._sessions: dict[str, tuple[float, SessionUser]] = {}
        self._lock = asyncio.Lock()

    async def create(self, principal: SessionUser) -> str:
        session_id = new_session_id()
        async with self._lock:
            self._sessions[session_id] = (time.monotonic() + self.ttl_seconds, principal)
        return session_id

    async def get(self, session_id: str) -> SessionUser | None:
        async with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            expires_at, principal = entry
            if time.monotonic() >= expires_at:
                del self._sessions[session_id]
                return None
            return principal

    async def delete(self, session_id: str) -> None:
        async with self._lock:
            self._sessions.pop(session_id, None)

    async def cleanup_expired(self) -> int:
        """Drop expired sessions and return how many were removed."""
        now = time.monotonic()
        async with self._lock:
            expired = [sid for sid, (expires_at, _) in self._sessions.items() if now >= expires_at]
            for sid in expired:
                del self._sessions[sid]
        return len(expired)

    def reset(self) -> None:
        """Forget every session. Useful for testing."""
        self._sessions.clear()


class RedisSessionStore(SessionStore):
    """Session store backed by Redis, with expiry handled by key TTLs."""

    KEY_PREFIX = "session:"

    def __init__(self, redis_url: str, ttl_seconds: int):
        super().__init__(ttl_seconds)
        self.redis_url = redis_url
        self._redis = None

    def _get_redis(self):
        if self._redis is None:
            import redis.asyncio as redis

            self._redis = redis.from_url(self.redis_url)
        return self._redis

    def _key(self, session_id: str) -> str:
        return f"{self.KEY_PREFIX}{session_id}"

    async def create(self, principal: SessionUser) -> str:
        session_id = new_session_id()
        await self._get_redis().set(
            self._key(session_id), principal.model_dump_json(), ex=self.ttl_seconds
        )
        return session_id

    async def get(self, session_id: str) -> SessionUser | None:
        raw = await self._get_redis().get(self._key(session_id))
        if raw is None:
            return None
        return SessionUser.model_validate_json(raw)

    async def delete(self, session_id: str) -> None:
        await self._get_redis().delete(self._key(session_id))

    async def ping(self) -> bool:
        try:
            await self._get_redis().ping()
            return True
        except Exception as e:
            logger.warning(f"Redis session store unreachable: {e!r}")
            return False

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None


@lru_cache
def get_session_store() -> SessionStore:
    """Session store selected by ``settings.session_backend``."""
    if settings.session_backend == "redis":
        return RedisSessionStore(settings.redis_url, settings.session_ttl_seconds)
    return InMemorySessionStore(settings.session_ttl_seconds)
