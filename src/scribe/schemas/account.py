"""Request and response schemas for account endpoints."""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, EmailStr, Field, field_validator, model_validator

from scribe.constants import (
    EMAIL_MAX_LENGTH,
    NAME_MAX_LENGTH,
    NAME_MIN_LENGTH,
    PASSWORD_MAX_LENGTH,
    PASSWORD_MIN_LENGTH,
    VERIFICATION_CODE_MAX_LENGTH,
    VERIFICATION_CODE_MIN_LENGTH,
    VERIFICATION_CODE_PATTERN,
)
from scribe.models import SessionUser
from scribe.services.passwords import password_policy_error


def normalize_email(value: str) -> str:
    value = value.strip().lower()
    if len(value) > EMAIL_MAX_LENGTH:
        raise ValueError(f"Email must be less than {EMAIL_MAX_LENGTH} characters long")
    return value


def check_password(value: str) -> str:
    error = password_policy_error(value)
    if error:
        raise ValueError(error)
    return value


Email = Annotated[EmailStr, AfterValidator(normalize_email)]
Password = Annotated[
    str,
    Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH),
    AfterValidator(check_password),
]
Name = Annotated[str, Field(min_length=NAME_MIN_LENGTH, max_length=NAME_MAX_LENGTH)]


class UserRegister(BaseModel):
    """Request body for registration (also used by admins to create users)."""

    first_name: Name
    last_name: Name
    email: Email
    password: Password
    confirm_password: str

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _strip_names(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _passwords_match(self) -> "UserRegister":
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class UserUpdate(UserRegister):
    """Request body for a full user update."""


class LoginRequest(BaseModel):
    """Request body for login."""

    email: Email
    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH)


class VerificationCodeRequest(BaseModel):
    """Request body carrying a verification or password reset code."""

    code: str

    @field_validator("code")
    @classmethod
    def _check_code(cls, value: str) -> str:
        length = len(value)
        if length % 2 or not VERIFICATION_CODE_MIN_LENGTH <= length <= VERIFICATION_CODE_MAX_LENGTH:
            raise ValueError("Invalid verification code length")
        if not VERIFICATION_CODE_PATTERN.match(value):
            raise ValueError("Invalid verification code format")
        return value.lower()


class PasswordResetRequest(BaseModel):
    """Request body to start a password reset."""

    email: Email


class ChangePasswordRequest(VerificationCodeRequest):
    """Request body to set a new password with a reset code.

    The password policy is enforced by the service so that the same rule
    applies however the request arrives.
    """

    password: str = Field(min_length=1, max_length=PASSWORD_MAX_LENGTH)


class SessionUserResponse(BaseModel):
    """Wrapper returned by login and /me."""

    user: SessionUser
