"""Blog post model and request/response schemas."""

from datetime import datetime

from sqlalchemy import Text
from sqlmodel import Field, SQLModel

from scribe.models.base import TimestampMixin, generate_nanoid


class Post(TimestampMixin, SQLModel, table=True):
    """A blog post written by a user."""

    __tablename__ = "posts"

    id: str = Field(default_factory=generate_nanoid, primary_key=True, max_length=21)
    title: str = Field(max_length=255)
    content: str = Field(sa_type=Text)  # type: ignore[call-overload]
    cover_image: str = Field(max_length=2048)
    is_draft: bool = Field(default=True)
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE", max_length=21)


class PostCreate(SQLModel):
    """Schema for creating a post."""

    title: str = Field(min_length=2, max_length=255)
    content: str = Field(min_length=2, max_length=20000)
    cover_image: str = Field(min_length=2, max_length=2048)
    is_draft: bool = True


class PostUpdate(SQLModel):
    """Schema for partially updating a post."""

    title: str | None = Field(default=None, min_length=2, max_length=255)
    content: str | None = Field(default=None, min_length=2, max_length=20000)
    cover_image: str | None = Field(default=None, min_length=2, max_length=2048)
    is_draft: bool | None = None


class PostRead(SQLModel):
    """Schema for reading a post."""

    id: str
    title: str
    content: str
    cover_image: str
    is_draft: bool
    user_id: str
    created_at: datetime
    updated_at: datetime
