"""Verification code model for account verification and password resets."""

from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from scribe.models.base import generate_nanoid, utc_now


class VerificationPurpose(str, Enum):
    """What a verification code authorizes."""

    REGISTER = "register"
    PASSWORD_RESET = "password_reset"


class VerificationCode(SQLModel, table=True):
    """Single-use, expiring code tied to a user and a purpose."""

    __tablename__ = "verification_codes"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE", max_length=21)
    purpose: VerificationPurpose
    code: str = Field(unique=True, index=True, max_length=128, description="Random hex token")
    is_used: bool = Field(default=False)
    used_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
    )
    expires_at: datetime = Field(
        nullable=False,
        sa_type=DateTime(timezone=True),  # type: ignore[call-overload]
        description="Code expiration time",
    )
