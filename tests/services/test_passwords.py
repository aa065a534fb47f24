"""Password hashing and policy tests."""

import pytest

from scribe.constants import PASSWORD_POLICY_MESSAGE
from scribe.services.passwords import hash_password, password_policy_error, verify_password


class TestPasswordPolicy:
    """Tests for password_policy_error."""

    def test_accepts_valid_password(self):
        assert password_policy_error("Abcd1234") is None

    def test_rejects_short_password(self):
        assert "at least 8" in password_policy_error("Ab1")  # type: ignore[operator]

    def test_rejects_long_password(self):
        assert "less than 255" in password_policy_error("Aa1" * 100)  # type: ignore[operator]

    @pytest.mark.parametrize("password", ["abcd1234", "ABCD1234", "Abcdefgh"])
    def test_requires_mixed_case_and_digit(self, password: str):
        assert password_policy_error(password) == PASSWORD_POLICY_MESSAGE


class TestHashing:
    """Tests for bcrypt hashing helpers."""

    @pytest.mark.asyncio
    async def test_hash_and_verify(self):
        hashed = await hash_password("Abcd1234")

        assert hashed != "Abcd1234"
        assert hashed.startswith("$2")
        assert await verify_password("Abcd1234", hashed) is True
        assert await verify_password("Abcd12345", hashed) is False

    @pytest.mark.asyncio
    async def test_hash_is_salted(self):
        first = await hash_password("Abcd1234")
        second = await hash_password("Abcd1234")

        assert first != second
        assert await verify_password("Abcd1234", second) is True

    @pytest.mark.asyncio
    async def test_long_password(self):
        """Passwords beyond bcrypt's 72 byte limit still hash and verify."""
        password = "Aa1" + "x" * 120
        hashed = await hash_password(password)

        assert await verify_password(password, hashed) is True

    @pytest.mark.asyncio
    async def test_malformed_hash(self):
        assert await verify_password("Abcd1234", "not-a-bcrypt-hash") is False
