"""Verification code lifecycle: issue, look up, validate and consume."""

import logging
from datetime import datetime, timedelta
from enum import Enum

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import col, select

from scribe.config import settings
from scribe.models import VerificationCode, VerificationPurpose, as_utc, utc_now
from scribe.services.tokens import generate_secure_token

logger = logging.getLogger(__name__)


class CodeStatus(str, Enum):
    """Result of validating a verification code."""

    OK = "ok"
    EXPIRED = "expired"
    ALREADY_USED = "already_used"
    NOT_FOUND = "not_found"


class CodeAlreadyConsumedError(Exception):
    """Raised when a code was consumed by someone else between validation and use."""


def expiry_from(now: datetime | None = None) -> datetime:
    """Expiry timestamp for a code issued at ``now``."""
    issued_at = now or utc_now()
    return issued_at + timedelta(minutes=settings.verification_code_expiration_minutes)


def issue(session: AsyncSession, user_id: str, purpose: VerificationPurpose) -> VerificationCode:
    """Create a new code for ``user_id`` in the current transaction.

    The caller commits and is responsible for delivering ``code`` to the user.
    """
    now = utc_now()
    record = VerificationCode(
        user_id=user_id,
        purpose=purpose,
        code=generate_secure_token(),
        created_at=now,
        expires_at=expiry_from(now),
    )
    session.add(record)
    return record


async def lookup(session: AsyncSession, code: str) -> VerificationCode | None:
    """Find a code record by its token."""
    stmt = select(VerificationCode).where(VerificationCode.code == code)
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


def validate(
    record: VerificationCode | None,
    purpose: VerificationPurpose | None = None,
    now: datetime | None = None,
) -> CodeStatus:
    """Check whether a code may be used. Does not modify anything.

    Expiry is checked before use so an expired code is always reported as
    expired. A code presented to a flow with a different purpose is treated
    as unknown.
    """
    if record is None or (purpose is not None and record.purpose != purpose):
        return CodeStatus.NOT_FOUND
    if (now or utc_now()) > as_utc(record.expires_at):
        return CodeStatus.EXPIRED
    if record.is_used:
        return CodeStatus.ALREADY_USED
    return CodeStatus.OK


async def consume(session: AsyncSession, record: VerificationCode) -> None:
    """Mark ``record`` used inside the caller's transaction.

    The update only matches an unused row, so when two requests race on the
    same code exactly one of them succeeds and the other raises
    ``CodeAlreadyConsumedError``.
    """
    now = utc_now()
    stmt = (
        update(VerificationCode)
        .where(col(VerificationCode.id) == record.id, col(VerificationCode.is_used).is_(False))
        .values(is_used=True, used_at=now)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    if result.rowcount != 1:  # type: ignore[attr-defined]
        raise CodeAlreadyConsumedError(f"Verification code {record.id} was already used")

    record.is_used = True
    record.used_at = now
    logger.debug(f"Consumed {record.purpose.value} code {record.id}")
