"""Post endpoints. Anyone can read; authors manage their own posts."""

from fastapi import APIRouter, HTTPException, status

from scribe.api.deps import CurrentUser, SessionDep
from scribe.api.utils import unwrap
from scribe.models.post import PostCreate, PostRead, PostUpdate
from scribe.services import posts

router = APIRouter()


async def get_owned_post(session: SessionDep, post_id: str, user: CurrentUser, action: str) -> PostRead:
    """Load a post and make sure ``user`` wrote it.

    Raises:
        HTTPException: 404 if the post doesn't exist, 403 if it belongs to someone else
    """
    post = unwrap(await posts.get_post(session, post_id))
    if post.user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You do not have permission to {action} this post",
        )
    return post


@router.get("", response_model=list[PostRead])
async def list_posts(session: SessionDep):
    """List all posts."""
    return unwrap(await posts.list_posts(session))


@router.get("/{post_id}", response_model=PostRead)
async def get_post(post_id: str, session: SessionDep):
    """Get a single post."""
    return unwrap(await posts.get_post(session, post_id))


@router.post("", response_model=PostRead, status_code=status.HTTP_201_CREATED)
async def create_post(post_in: PostCreate, session: SessionDep, user: CurrentUser):
    """Create a post authored by the current user."""
    return unwrap(await posts.create_post(session, post_in, user))


@router.put("/{post_id}", response_model=PostRead)
async def update_post(post_id: str, post_in: PostUpdate, session: SessionDep, user: CurrentUser):
    """Edit one of your own posts."""
    await get_owned_post(session, post_id, user, "edit")
    return unwrap(await posts.update_post(session, post_id, post_in))


@router.delete("/{post_id}", response_model=PostRead)
async def delete_post(post_id: str, session: SessionDep, user: CurrentUser):
    """Delete one of your own posts."""
    await get_owned_post(session, post_id, user, "delete")
    return unwrap(await posts.delete_post(session, post_id))
