"""FastAPI dependencies for dependency injection."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from scribe.config import settings
from scribe.database import get_session
from scribe.models import SessionUser
from scribe.services.email import EmailService, email_service
from scribe.services.sessions import SessionStore, get_session_store

logger = logging.getLogger(__name__)

# Type alias for database session dependency
SessionDep = Annotated[AsyncSession, Depends(get_session)]
SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]


def get_email_service() -> EmailService:
    return email_service


MailerDep = Annotated[EmailService, Depends(get_email_service)]


async def get_current_user_optional(request: Request, store: SessionStoreDep) -> SessionUser | None:
    """Principal of the session named by the session cookie, if any."""
    session_id = request.cookies.get(settings.session_cookie_name)
    if not session_id:
        return None
    return await store.get(session_id)


async def get_current_user(
    user: Annotated[SessionUser | None, Depends(get_current_user_optional)],
) -> SessionUser:
    """Get current authenticated user or raise 401."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not logged in",
        )
    return user


async def get_admin_user(
    user: Annotated[SessionUser | None, Depends(get_current_user_optional)],
) -> SessionUser:
    """Get current user and verify they are an admin."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not logged in",
        )
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Forbidden",
        )
    return user


# Type aliases for common dependencies
CurrentUser = Annotated[SessionUser, Depends(get_current_user)]
AdminUser = Annotated[SessionUser, Depends(get_admin_user)]
