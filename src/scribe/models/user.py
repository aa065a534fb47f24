"""User model and its public projection."""

from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel

from scribe.models.base import TimestampMixin, generate_nanoid


class UserRole(str, Enum):
    """Authorization role of an account."""

    ADMIN = "admin"
    USER = "user"


class User(TimestampMixin, SQLModel, table=True):
    """User account model.

    ``password_hash`` is the only sensitive column. Nothing outside the
    service layer should see a ``User``; callers get a ``SessionUser``.
    """

    __tablename__ = "users"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    role: UserRole = Field(default=UserRole.USER)
    first_name: str = Field(max_length=64)
    last_name: str = Field(max_length=64)
    email: str = Field(unique=True, index=True, max_length=64)
    password_hash: str = Field(max_length=255)
    is_verified: bool = Field(default=False)


class SessionUser(SQLModel):
    """Password-free projection of a user, safe to return and to store in a session."""

    id: str
    role: UserRole
    first_name: str
    last_name: str
    email: str
    is_verified: bool
    created_at: datetime
    updated_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
