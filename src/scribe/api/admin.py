"""Admin endpoints for managing users and moderating posts."""

from fastapi import APIRouter, status

from scribe.api.deps import AdminUser, MailerDep, SessionDep
from scribe.api.utils import unwrap
from scribe.models import SessionUser
from scribe.models.post import PostRead, PostUpdate
from scribe.schemas import UserRegister, UserUpdate
from scribe.services import accounts, posts

router = APIRouter()


@router.post("/users", response_model=SessionUser, status_code=status.HTTP_201_CREATED)
async def create_user(user_in: UserRegister, session: SessionDep, mailer: MailerDep, _admin: AdminUser):
    """Create a user (admin only). The user still verifies by email."""
    return unwrap(await accounts.register(session, user_in, mailer=mailer))


@router.put("/users/{user_id}", response_model=SessionUser)
async def update_user(user_id: str, user_in: UserUpdate, session: SessionDep, _admin: AdminUser):
    """Replace a user's details (admin only)."""
    return unwrap(await accounts.update_user(session, user_id, user_in))


@router.put("/posts/{post_id}", response_model=PostRead)
async def update_post(post_id: str, post_in: PostUpdate, session: SessionDep, _admin: AdminUser):
    """Edit any post (admin only)."""
    return unwrap(await posts.update_post(session, post_id, post_in))
