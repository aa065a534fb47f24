"""Pydantic schemas for API requests/responses."""

from scribe.schemas.account import (
    ChangePasswordRequest,
    LoginRequest,
    PasswordResetRequest,
    SessionUserResponse,
    UserRegister,
    UserUpdate,
    VerificationCodeRequest,
)
from scribe.schemas.common import ErrorResponse, MessageResponse

__all__ = [
    "ChangePasswordRequest",
    "ErrorResponse",
    "LoginRequest",
    "MessageResponse",
    "PasswordResetRequest",
    "SessionUserResponse",
    "UserRegister",
    "UserUpdate",
    "VerificationCodeRequest",
]
