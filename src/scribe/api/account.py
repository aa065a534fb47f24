"""Account endpoints: registration, session login/logout, verification, password reset."""

import logging

from fastapi import APIRouter, Request, Response, status

from scribe.api.deps import CurrentUser, MailerDep, SessionDep, SessionStoreDep
from scribe.api.utils import unwrap
from scribe.config import settings
from scribe.models import SessionUser
from scribe.schemas import (
    ChangePasswordRequest,
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    PasswordResetRequest,
    SessionUserResponse,
    UserRegister,
    VerificationCodeRequest,
)
from scribe.services import accounts
from scribe.services.results import ServiceError
from scribe.services.sessions import to_session_user

logger = logging.getLogger(__name__)

router = APIRouter()

# Every login failure is a 401; the message says which check failed
LOGIN_FAILURES = {
    ServiceError.NOT_FOUND: status.HTTP_401_UNAUTHORIZED,
    ServiceError.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ServiceError.NOT_VERIFIED: status.HTTP_401_UNAUTHORIZED,
}

RESET_FAILURES = {
    ServiceError.NOT_FOUND: status.HTTP_400_BAD_REQUEST,
    ServiceError.NOT_VERIFIED: status.HTTP_400_BAD_REQUEST,
}


@router.post(
    "/register",
    response_model=SessionUser,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def register(request: UserRegister, session: SessionDep, mailer: MailerDep):
    """Create an account and send its verification email."""
    return unwrap(await accounts.register(session, request, mailer=mailer))


@router.post("/login", response_model=SessionUserResponse, responses={401: {"model": ErrorResponse}})
async def login(request: LoginRequest, response: Response, session: SessionDep, store: SessionStoreDep):
    """Check credentials and start a session.

    The session id is returned in an HttpOnly cookie.
    """
    user = unwrap(await accounts.login(session, request.email, request.password), LOGIN_FAILURES)

    session_id = await store.create(to_session_user(user))
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
    )
    logger.info(f"User {user.id} logged in")
    return SessionUserResponse(user=user)


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request, response: Response, store: SessionStoreDep):
    """End the current session and clear its cookie."""
    session_id = request.cookies.get(settings.session_cookie_name)
    if session_id:
        await store.delete(session_id)
    response.delete_cookie(key=settings.session_cookie_name, path="/")
    return MessageResponse(message="Logged out")


@router.post("/verify", response_model=MessageResponse, responses={400: {"model": ErrorResponse}})
async def verify(request: VerificationCodeRequest, session: SessionDep):
    """Verify an account with the code from the registration email."""
    return MessageResponse(message=unwrap(await accounts.verify(session, request.code)))


@router.get("/me", response_model=SessionUserResponse)
async def me(user: CurrentUser):
    """Return the session principal."""
    return SessionUserResponse(user=user)


@router.post("/password-reset", response_model=MessageResponse)
async def request_password_reset(request: PasswordResetRequest, session: SessionDep, mailer: MailerDep):
    """Email a password reset code to a verified account."""
    result = await accounts.request_password_reset(session, request.email, mailer=mailer)
    return MessageResponse(message=unwrap(result, RESET_FAILURES))


@router.post("/password-reset/verify", response_model=MessageResponse)
async def verify_password_reset(request: VerificationCodeRequest, session: SessionDep):
    """Check a password reset code before asking for the new password."""
    return MessageResponse(message=unwrap(await accounts.verify_password_reset(session, request.code)))


@router.post("/password-reset/change", response_model=MessageResponse)
async def change_password(request: ChangePasswordRequest, session: SessionDep):
    """Set a new password using a password reset code."""
    result = await accounts.change_password(session, request.code, request.password)
    return MessageResponse(message=unwrap(result, RESET_FAILURES))
