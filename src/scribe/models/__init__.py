"""SQLModel database models."""

from scribe.models.base import TimestampMixin, as_utc, generate_nanoid, utc_now
from scribe.models.post import Post
from scribe.models.user import SessionUser, User, UserRole
from scribe.models.verification_code import VerificationCode, VerificationPurpose

__all__ = [
    "Post",
    "SessionUser",
    "TimestampMixin",
    "User",
    "UserRole",
    "VerificationCode",
    "VerificationPurpose",
    "as_utc",
    "generate_nanoid",
    "utc_now",
]
