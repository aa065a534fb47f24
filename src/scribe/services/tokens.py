"""Secure random tokens for verification and password reset codes."""

from secrets import token_hex

from scribe.config import settings


def generate_secure_token(length: int | None = None) -> str:
    """Return ``length`` random bytes as a hex string (``2 * length`` characters).

    Defaults to the configured verification code size.
    """
    return token_hex(length or settings.verification_code_bytes)
