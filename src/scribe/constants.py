"""Shared constants used across the application."""

import re

# Account field limits
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 64
EMAIL_MAX_LENGTH = 64
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 255

# At least one lowercase letter, one uppercase letter and one digit
PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).+$")
PASSWORD_POLICY_MESSAGE = (
    "Password must contain at least one uppercase letter, one lowercase letter, and one number"
)

# Verification codes are hex; any length the code size setting can produce is accepted
VERIFICATION_CODE_MIN_LENGTH = 32
VERIFICATION_CODE_MAX_LENGTH = 128
VERIFICATION_CODE_PATTERN = re.compile(r"^[a-f0-9]+$", re.IGNORECASE)
