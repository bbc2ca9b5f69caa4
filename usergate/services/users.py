"""User service: listing, search, pagination and role-scoped CRUD."""

import logging
import math
from dataclasses import dataclass

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, NoResultFound
from sqlalchemy.orm import Session

from usergate.errors import NotFound, ValidationError
from usergate.models.enums import Role
from usergate.models.mixins import utcnow
from usergate.models.session import UserSession
from usergate.models.user import User
from usergate.services.auth import get_password_hash, get_user_by_email
from usergate.services.validation import normalize_email, sanitize_string

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
LIKE_ESCAPE = "\\"
# Largest OFFSET a signed 64-bit integer column type can bind
MAX_OFFSET = 2**63 - 1


@dataclass(frozen=True)
class Pagination:
    """Resolved page request: ``skip = (page - 1) * limit``."""

    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class UserPage:
    """One page of the admin listing.

    ``items`` holds ``(user, active_session_count)`` pairs. ``total`` counts the
    whole filtered set, independently of the slice.
    """

    items: list[tuple[User, int]]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)


def _parse_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def parse_pagination(page: str | None, limit: str | None, max_limit: int) -> Pagination:
    """Turn raw query values into a page request.

    Non-numeric values fall back to the defaults, ``limit`` is clamped to
    ``[1, max_limit]`` and ``page`` to at least 1 and at most the last page
    whose offset still fits in ``MAX_OFFSET``.
    """
    resolved_limit = min(max(_parse_int(limit, DEFAULT_LIMIT), 1), max_limit)
    max_page = MAX_OFFSET // resolved_limit + 1
    resolved_page = min(max(_parse_int(page, DEFAULT_PAGE), 1), max_page)
    return Pagination(page=resolved_page, limit=resolved_limit)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so the search term matches literally."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def search_criteria(search: str) -> list:
    """Filter for a case-insensitive substring match on name or email."""
    if not search:
        return []
    pattern = f"%{escape_like(search)}%"
    return [
        or_(
            User.name.ilike(pattern, escape=LIKE_ESCAPE),
            User.email.ilike(pattern, escape=LIKE_ESCAPE),
        )
    ]


class UserService:
    """Service for user-related operations."""

    def __init__(self, db: Session):
        self.db = db

    def list_users(self) -> list[User]:
        """All users, oldest first."""
        return self.db.query(User).order_by(User.created_at.asc(), User.id).all()

    def list_page(self, pagination: Pagination, search: str = "") -> UserPage:
        """Filtered, newest-first page of users with their active session counts.

        The page and the total are two separate reads over the same filter;
        they are not required to be snapshot-consistent.
        """
        criteria = search_criteria(search)

        active_sessions = (
            self.db.query(
                UserSession.user_id.label("user_id"),
                func.count(UserSession.id).label("session_count"),
            )
            .filter(UserSession.expires_at > utcnow())
            .group_by(UserSession.user_id)
            .subquery()
        )

        rows = (
            self.db.query(User, func.coalesce(active_sessions.c.session_count, 0))
            .outerjoin(active_sessions, active_sessions.c.user_id == User.id)
            .filter(*criteria)
            .order_by(User.created_at.desc(), User.id)
            .offset(pagination.skip)
            .limit(pagination.limit)
            .all()
        )
        total = self.db.query(func.count(User.id)).filter(*criteria).scalar() or 0

        return UserPage(
            items=[(user, int(count)) for user, count in rows],
            page=pagination.page,
            limit=pagination.limit,
            total=total,
        )

    def create_user(
        self,
        name: str,
        email: str,
        password: str | None = None,
        role: Role = Role.USER,
    ) -> User:
        """Create a user. Raises ``ValidationError`` if the email is taken."""
        email = normalize_email(email)
        if get_user_by_email(self.db, email):
            raise ValidationError("Email already registered")

        user = User(
            name=sanitize_string(name),
            email=email,
            password_hash=get_password_hash(password) if password else None,
            role=role.value,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent insert of the same email
            self.db.rollback()
            raise ValidationError("Email already registered") from exc
        self.db.refresh(user)
        logger.info(f"Created user {user.id} with role {user.role}")
        return user

    def update_role(self, user_id: str, role: str) -> User:
        """Set a user's role. Unknown roles are rejected before touching the store."""
        if not Role.is_valid(role):
            raise ValidationError('Invalid role. Must be "user" or "admin"')

        try:
            user = self.db.query(User).filter(User.id == user_id).one()
        except NoResultFound as exc:
            raise NotFound("User not found") from exc

        user.role = role
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Changed role of user {user.id} to {role}")
        return user

    def delete_user(self, user_id: str, acting_user_id: str) -> None:
        """Delete a user and its sessions. Callers may not delete themselves."""
        if user_id == acting_user_id:
            raise ValidationError("Cannot delete your own account")

        try:
            user = self.db.query(User).filter(User.id == user_id).one()
        except NoResultFound as exc:
            raise NotFound("User not found") from exc

        self.db.delete(user)
        self.db.commit()
        logger.info(f"User {acting_user_id} deleted user {user_id}")

    def ensure_admin(self, email: str, password: str, name: str | None = None) -> User:
        """Create an admin, or promote an existing user and reset its password.

        Sessions opened before the promotion keep their old role.
        """
        user = get_user_by_email(self.db, email)
        if user is None:
            return self.create_user(name or email, email, password, role=Role.ADMIN)

        user.role = Role.ADMIN.value
        user.password_hash = get_password_hash(password)
        if name:
            user.name = name
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Promoted user {user.id} to admin")
        return user
