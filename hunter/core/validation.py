"""
Shared field checks.

Every form (login, register, forgot password, profile, candidate invites)
uses the same rules and the same messages.
"""

import re

from pydantic_core import PydanticCustomError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

INVALID_EMAIL = "Invalid email format"
PASSWORD_TOO_SHORT = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"


def is_valid_email(email: str) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def check_email(email: str) -> str:
    """Pydantic validator body: normalize and check an email address."""
    email = (email or "").strip()
    if not is_valid_email(email):
        raise PydanticCustomError("invalid_email", INVALID_EMAIL)
    return email.lower()


def check_password(password: str) -> str:
    if password is None or len(password) < MIN_PASSWORD_LENGTH:
        raise PydanticCustomError("password_too_short", PASSWORD_TOO_SHORT)
    return password
