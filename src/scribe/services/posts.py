"""Blog post CRUD."""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from scribe.models import Post, SessionUser
from scribe.models.post import PostCreate, PostRead, PostUpdate
from scribe.services.results import ServiceError, ServiceResult

logger = logging.getLogger(__name__)


async def list_posts(session: AsyncSession) -> ServiceResult[list[PostRead]]:
    """All posts, oldest first."""
    result = await session.execute(select(Post).order_by(Post.created_at))
    return ServiceResult.ok([PostRead.model_validate(post) for post in result.scalars().all()])


async def get_post(session: AsyncSession, post_id: str) -> ServiceResult[PostRead]:
    post = await session.get(Post, post_id)
    if post is None:
        return ServiceResult.fail(ServiceError.NOT_FOUND, "Post not found")
    return ServiceResult.ok(PostRead.model_validate(post))


async def create_post(session: AsyncSession, data: PostCreate, author: SessionUser) -> ServiceResult[PostRead]:
    post = Post(**data.model_dump(), user_id=author.id)
    try:
        session.add(post)
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        logger.exception(f"Failed to create post for user {author.id}")
        return ServiceResult.fail(ServiceError.INTERNAL, "Post could not be created")

    return ServiceResult.ok(PostRead.model_validate(post))


async def update_post(session: AsyncSession, post_id: str, data: PostUpdate) -> ServiceResult[PostRead]:
    """Apply the fields present in ``data`` to a post."""
    post = await session.get(Post, post_id)
    if post is None:
        return ServiceResult.fail(ServiceError.NOT_FOUND, "Post not found")

    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(post, field, value)

    try:
        await session.commit()
        await session.refresh(post)
    except SQLAlchemyError:
        await session.rollback()
        logger.exception(f"Failed to update post {post_id}")
        return ServiceResult.fail(ServiceError.INTERNAL, "Post could not be updated")

    return ServiceResult.ok(PostRead.model_validate(post))


async def delete_post(session: AsyncSession, post_id: str) -> ServiceResult[PostRead]:
    post = await session.get(Post, post_id)
    if post is None:
        return ServiceResult.fail(ServiceError.NOT_FOUND, "Post not found or could not be deleted")

    deleted = PostRead.model_validate(post)
    try:
        await session.delete(post)
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        logger.exception(f"Failed to delete post {post_id}")
        return ServiceResult.fail(ServiceError.INTERNAL, "Post could not be deleted")

    return ServiceResult.ok(deleted)
