"""Enums for model fields."""

from enum import Enum


class Role(str, Enum):
    """Account roles. Stored by value in ``users.role``."""

    USER = "user"
    ADMIN = "admin"

    @classmethod
    def values(cls) -> list[str]:
        """Return the accepted role strings."""
        return [role.value for role in cls]

    @classmethod
    def is_valid(cls, value: object) -> bool:
        """Check whether a raw value is exactly one of the role strings."""
        return isinstance(value, str) and value in cls.values()
