"""Password hashing and policy checks using bcrypt."""

import asyncio

import bcrypt

from scribe.config import settings
from scribe.constants import (
    PASSWORD_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    PASSWORD_PATTERN,
    PASSWORD_POLICY_MESSAGE,
)


def password_policy_error(password: str) -> str | None:
    """Return a message describing why ``password`` is rejected, or None."""
    if len(password) < PASSWORD_MIN_LENGTH:
        return f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
    if len(password) > PASSWORD_MAX_LENGTH:
        return f"Password must be less than {PASSWORD_MAX_LENGTH} characters long"
    if not PASSWORD_PATTERN.match(password):
        return PASSWORD_POLICY_MESSAGE
    return None


def _hash(password: str, rounds: int) -> str:
    # bcrypt only looks at the first 72 bytes and newer releases reject longer input
    secret = password.encode("utf-8")[:72]
    return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def _check(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8")[:72], hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database
        return False


async def hash_password(password: str) -> str:
    """Hash a password with the configured bcrypt cost factor."""
    return await asyncio.to_thread(_hash, password, settings.password_hash_rounds)


async def verify_password(password: str, hashed: str) -> bool:
    """Compare a plaintext password against a stored bcrypt hash."""
    return await asyncio.to_thread(_check, password, hashed)
