"""Account workflows: registration, login, verification and password reset.

Every public function returns a ``ServiceResult``. Domain failures are
reported through ``ServiceResult.error``; storage failures are logged, the
transaction is rolled back, and ``ServiceError.INTERNAL`` is returned. A
``User`` row never leaves this module: results carry ``SessionUser``.
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from scribe.models import SessionUser, User, UserRole, VerificationPurpose
from scribe.schemas.account import UserRegister, UserUpdate
from scribe.services import verification
from scribe.services.email import EmailService, email_service
from scribe.services.passwords import hash_password, password_policy_error, verify_password
from scribe.services.results import ServiceError, ServiceResult
from scribe.services.verification import CodeAlreadyConsumedError, CodeStatus

logger = logging.getLogger(__name__)

INVALID_CODE_MESSAGE = "Invalid verification code or code has expired"
EMAIL_TAKEN_MESSAGE = "User with this email already exists"


def sanitize(user: User) -> SessionUser:
    """Project a user row onto its password-free public form."""
    return SessionUser.model_validate(user, from_attributes=True)


async def _find_by_email(session: AsyncSession, email: str) -> User | None:
    stmt = select(User).where(User.email == email)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def _email_taken(session: AsyncSession, email: str, exclude_id: str | None = None) -> bool:
    stmt = select(User.id).where(User.email == email)
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    result = await session.execute(stmt)
    return result.first() is not None


async def _conflict_or_internal(
    session: AsyncSession, email: str, error: IntegrityError, action: str
) -> ServiceResult:
    """Classify an integrity error raised while writing a user row.

    The unique index on ``users.email`` is the authoritative duplicate check;
    the pre-insert lookup only saves a round trip in the common case.
    """
    await session.rollback()
    if await _email_taken(session, email):
        logger.info(f"{action} lost a race on email {email}")
        return ServiceResult.fail(ServiceError.CONFLICT, EMAIL_TAKEN_MESSAGE)
    logger.error(f"{action} failed with an integrity error: {error}")
    return ServiceResult.fail(ServiceError.INTERNAL, f"Failed to {action.lower()}")


async def register(
    session: AsyncSession,
    data: UserRegister,
    mailer: EmailService = email_service,
) -> ServiceResult[SessionUser]:
    """Create an unverified account and email it a verification code.

    The user row and its ``register`` code are committed together. Email
    delivery happens in the background after the commit and cannot undo it.
    """
    if await _email_taken(session, data.email):
        return ServiceResult.fail(ServiceError.CONFLICT, EMAIL_TAKEN_MESSAGE)

    user = User(
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        password_hash=await hash_password(data.password),
    )

    try:
        session.add(user)
        await session.flush()
        record = verification.issue(session, user.id, VerificationPurpose.REGISTER)
        await session.commit()
    except IntegrityError as e:
        return await _conflict_or_internal(session, data.email, e, "Register user")
    except SQLAlchemyError:
        await session.rollback()
        logger.exception(f"Failed to register user {data.email}")
        return ServiceResult.fail(ServiceError.INTERNAL, "Failed to register user")

    logger.info(f"Registered user {user.id}")
    mailer.dispatch(
        mailer.send_verification_email(user.email, record.code),
        f"verification email for user {user.id}",
    )
    return ServiceResult.ok(sanitize(user))


async def login(session: AsyncSession, email: str, password: str) -> ServiceResult[SessionUser]:
    """Check credentials and return the session principal."""
    user = await _find_by_email(session, email)
    if user is None:
        logger.debug("Login failed: unknown email")
        return ServiceResult.fail(ServiceError.NOT_FOUND, "User does not exist")

    if not await verify_password(password, user.password_hash):
        logger.debug(f"Login failed: bad password for user {user.id}")
        return ServiceResult.fail(ServiceError.INVALID_CREDENTIALS, "Incorrect email or password")

    if not user.is_verified:
        logger.debug(f"Login failed: user {user.id} is not verified")
        return ServiceResult.fail(
            ServiceError.NOT_VERIFIED,
            "User is not verified. Please check your inbox or request a new verification code",
        )

    return ServiceResult.ok(sanitize(user))


async def verify(session: AsyncSession, code: str) -> ServiceResult[str]:
    """Consume a registration code and mark its owner verified.

    Unknown, used and expired codes all produce the same error.
    """
    record = await verification.lookup(session, code)
    status = verification.validate(record, VerificationPurpose.REGISTER)
    if status != CodeStatus.OK or record is None:
        logger.debug(f"Rejected registration code: {status.value}")
        return ServiceResult.fail(ServiceError.INVALID_OR_EXPIRED, INVALID_CODE_MESSAGE)

    user = await session.get(User, record.user_id)
    if user is None:
        return ServiceResult.fail(ServiceError.INVALID_OR_EXPIRED, INVALID_CODE_MESSAGE)

    user_id = user.id
    try:
        await verification.consume(session, record)
        user.is_verified = True
        await session.commit()
    except CodeAlreadyConsumedError:
        await session.rollback()
        return ServiceResult.fail(ServiceError.INVALID_OR_EXPIRED, INVALID_CODE_MESSAGE)
    except SQLAlchemyError:
        await session.rollback()
        logger.exception(f"Failed to verify user {user_id}")
        return ServiceResult.fail(ServiceError.INTERNAL, "Failed to update the user")

    logger.info(f"Verified user {user_id}")
    return ServiceResult.ok("Account verified")


async def request_password_reset(
    session: AsyncSession,
    email: str,
    mailer: EmailService = email_service,
) -> ServiceResult[str]:
    """Issue a password reset code and email it to a verified user.

    The code itself is never part of the result.
    """
    user = await _find_by_email(session, email)
    if user is None:
        return ServiceResult.fail(ServiceError.NOT_FOUND, "Error resetting password")

    if not user.is_verified:
        return ServiceResult.fail(ServiceError.NOT_VERIFIED, "User is not verified")

    user_id, user_email = user.id, user.email
    try:
        record = verification.issue(session, user_id, VerificationPurpose.PASSWORD_RESET)
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        logger.exception(f"Failed to create password reset code for user {user_id}")
        return ServiceResult.fail(ServiceError.INTERNAL, "Could not reset password")

    logger.info(f"Password reset requested for user {user_id}")
    mailer.dispatch(
        mailer.send_password_reset_email(user_email, record.code),
        f"password reset email for user {user_id}",
    )
    return ServiceResult.ok("Password reset email sent")


async def verify_password_reset(session: AsyncSession, code: str) -> ServiceResult[str]:
    """Check a password reset code without consuming it."""
    record = await verification.lookup(session, code)
    if verification.validate(record, VerificationPurpose.PASSWORD_RESET) != CodeStatus.OK:
        return ServiceResult.fail(ServiceError.INVALID_OR_EXPIRED, INVALID_CODE_MESSAGE)
    return ServiceResult.ok("Verification code valid")


async def change_password(session: AsyncSession, code: str, new_password: str) -> ServiceResult[str]:
    """Set a new password using a reset code.

    The password update and the code consumption commit together.
    """
    record = await verification.lookup(session, code)
    status = verification.validate(record, VerificationPurpose.PASSWORD_RESET)
    if status != CodeStatus.OK or record is None:
        logger.debug(f"Rejected password reset code: {status.value}")
        return ServiceResult.fail(ServiceError.INVALID_OR_EXPIRED, INVALID_CODE_MESSAGE)

    user = await session.get(User, record.user_id)
    if user is None:
        return ServiceResult.fail(ServiceError.NOT_FOUND, "User not found")

    policy_error = password_policy_error(new_password)
    if policy_error:
        return ServiceResult.fail(ServiceError.INVALID_INPUT, policy_error)

    user_id = user.id
    new_hash = await hash_password(new_password)
    try:
        await verification.consume(session, record)
        user.password_hash = new_hash
        await session.commit()
    except CodeAlreadyConsumedError:
        await session.rollback()
        return ServiceResult.fail(ServiceError.INVALID_OR_EXPIRED, INVALID_CODE_MESSAGE)
    except SQLAlchemyError:
        await session.rollback()
        logger.exception(f"Failed to change password for user {user_id}")
        return ServiceResult.fail(ServiceError.INTERNAL, "Failed to change password")

    logger.info(f"Password changed for user {user_id}")
    return ServiceResult.ok("User updated successfully")


async def list_users(session: AsyncSession) -> ServiceResult[list[SessionUser]]:
    """All users, oldest first."""
    result = await session.execute(select(User).order_by(User.created_at))
    return ServiceResult.ok([sanitize(user) for user in result.scalars().all()])


async def get_user(session: AsyncSession, user_id: str) -> ServiceResult[SessionUser]:
    user = await session.get(User, user_id)
    if user is None:
        return ServiceResult.fail(ServiceError.NOT_FOUND, "User not found")
    return ServiceResult.ok(sanitize(user))


async def get_user_by_email(session: AsyncSession, email: str) -> ServiceResult[SessionUser]:
    user = await _find_by_email(session, email)
    if user is None:
        return ServiceResult.fail(ServiceError.NOT_FOUND, "User not found")
    return ServiceResult.ok(sanitize(user))


async def create_user(
    session: AsyncSession,
    data: UserRegister,
    role: UserRole = UserRole.USER,
    is_verified: bool = False,
) -> ServiceResult[SessionUser]:
    """Insert a user directly, without issuing a verification code.

    Used for bootstrapping administrators from the command line.
    """
    if await _email_taken(session, data.email):
        return ServiceResult.fail(ServiceError.CONFLICT, EMAIL_TAKEN_MESSAGE)

    user = User(
        role=role,
        first_name=data.first_name,
        last_name=data.last_name,
        email=data.email,
        password_hash=await hash_password(data.password),
        is_verified=is_verified,
    )
    try:
        session.add(user)
        await session.commit()
    except IntegrityError as e:
        return await _conflict_or_internal(session, data.email, e, "Create user")
    except SQLAlchemyError:
        await session.rollback()
        logger.exception(f"Failed to create user {data.email}")
        return ServiceResult.fail(ServiceError.INTERNAL, "Failed to create user")

    logger.info(f"Created {role.value} user {user.id}")
    return ServiceResult.ok(sanitize(user))


async def update_user(session: AsyncSession, user_id: str, data: UserUpdate) -> ServiceResult[SessionUser]:
    """Replace a user's profile fields and password."""
    user = await session.get(User, user_id)
    if user is None:
        return ServiceResult.fail(ServiceError.NOT_FOUND, "User not found")

    if user.email != data.email and await _email_taken(session, data.email, exclude_id=user_id):
        return ServiceResult.fail(ServiceError.CONFLICT, "Email already in use")

    user.first_name = data.first_name
    user.last_name = data.last_name
    user.email = data.email
    user.password_hash = await hash_password(data.password)
    try:
        await session.commit()
        await session.refresh(user)
    except IntegrityError as e:
        return await _conflict_or_internal(session, data.email, e, "Update user")
    except SQLAlchemyError:
        await session.rollback()
        logger.exception(f"Failed to update user {user_id}")
        return ServiceResult.fail(ServiceError.INTERNAL, "Could not update user in database")

    return ServiceResult.ok(sanitize(user))


async def set_verified(session: AsyncSession, user_id: str) -> ServiceResult[SessionUser]:
    """Mark a user verified without a code (administrative override)."""
    user = await session.get(User, user_id)
    if user is None:
        return ServiceResult.fail(ServiceError.NOT_FOUND, "User not found")

    user.is_verified = True
    try:
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        logger.exception(f"Failed to verify user {user_id}")
        return ServiceResult.fail(ServiceError.INTERNAL, "Failed to update the user")
    return ServiceResult.ok(sanitize(user))


async def delete_user(session: AsyncSession, user_id: str) -> ServiceResult[SessionUser]:
    """Delete a user; their codes and posts go with them."""
    user = await session.get(User, user_id)
    if user is None:
        return ServiceResult.fail(ServiceError.NOT_FOUND, "User not found")

    deleted = sanitize(user)
    try:
        await session.delete(user)
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        logger.exception(f"Failed to delete user {user_id}")
        return ServiceResult.fail(ServiceError.INTERNAL, "Could not delete user from database")

    logger.info(f"Deleted user {user_id}")
    return ServiceResult.ok(deleted)
