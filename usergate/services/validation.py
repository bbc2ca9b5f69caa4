"""Validation helpers for request input.

All checks are pure and raise ``ValidationError`` (HTTP 400). They run
before any store mutation.
"""

import re
from collections.abc import Mapping
from typing import Any

from usergate.errors import ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


def is_valid_email(email: str) -> bool:
    """Check the ``local@domain.tld`` shape, with no whitespace anywhere."""
    return isinstance(email, str) and EMAIL_RE.match(email) is not None


def is_valid_password(password: str) -> bool:
    """Check the minimum password length. No other complexity rule applies."""
    return isinstance(password, str) and len(password) >= MIN_PASSWORD_LENGTH


def is_missing(value: Any) -> bool:
    """A value is missing when absent or a string that is blank after trimming."""
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ""


def validate_required(fields: Mapping[str, Any]) -> None:
    """Raise listing every missing field, in the mapping's order."""
    missing = [name for name, value in fields.items() if is_missing(value)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def validate_email(email: str) -> None:
    if not is_valid_email(email):
        raise ValidationError("Invalid email format")


def validate_password(password: str) -> None:
    if not is_valid_password(password):
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def sanitize_string(value: str) -> str:
    """Trim and drop angle brackets."""
    return value.strip().replace("<", "").replace(">", "")


def normalize_email(email: str) -> str:
    """Emails are stored trimmed and lower-cased so uniqueness is case-insensitive."""
    return email.strip().lower()
