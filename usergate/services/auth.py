"""Authentication service: passwords, sessions and session tokens.

A successful sign-in creates a ``sessions`` row and returns a signed JWT
that carries the session id together with the user's id, email, name and
role at sign-in time. Resolving a caller verifies the signature and expiry,
then checks that the session row still exists and has not expired, so
signing out (or deleting the user) invalidates outstanding tokens.
"""

import logging
from datetime import datetime, timedelta

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from usergate.config import get_settings
from usergate.models.mixins import utcnow
from usergate.models.session import UserSession
from usergate.models.user import User
from usergate.services.access import Caller
from usergate.services.validation import normalize_email

logger = logging.getLogger(__name__)
settings = get_settings()


def get_password_hash(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash. Malformed hashes never verify."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(user: User, session_id: str, expires_at: datetime) -> str:
    """Create the signed session token for a user's session."""
    to_encode = {
        "sub": user.id,
        "sid": session_id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "exp": expires_at,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a session token. Returns None on any failure."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if not all(payload.get(claim) for claim in ("sub", "sid", "email", "role")):
        return None
    return payload


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email, case-insensitively."""
    return db.query(User).filter(User.email == normalize_email(email)).first()


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Authenticate a user by email and password."""
    user = get_user_by_email(db, email)
    if not user or not user.password_hash:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def create_session(db: Session, user: User) -> tuple[str, datetime]:
    """Open a session for ``user`` and return its token and expiry."""
    expires_at = utcnow() + timedelta(minutes=settings.session_max_age_minutes)
    session = UserSession(user_id=user.id, expires_at=expires_at)
    db.add(session)
    db.flush()
    token = create_access_token(user, session.id, expires_at)
    db.commit()
    logger.info(f"Opened session {session.id} for user {user.id}")
    return token, expires_at


def revoke_session(db: Session, session_id: str) -> bool:
    """Delete a session. Returns False if it was already gone."""
    deleted = db.query(UserSession).filter(UserSession.id == session_id).delete()
    db.commit()
    if deleted:
        logger.info(f"Closed session {session_id}")
    return bool(deleted)


def resolve_caller(db: Session, token: str | None) -> Caller | None:
    """Resolve the caller for a request's session token.

    Returns None, never raises, when there is no usable session.
    """
    if not token:
        return None

    payload = decode_access_token(token)
    if payload is None:
        return None

    active = (
        db.query(UserSession.id)
        .filter(
            UserSession.id == payload["sid"],
            UserSession.user_id == payload["sub"],
            UserSession.expires_at > utcnow(),
        )
        .first()
    )
    if active is None:
        return None

    return Caller(
        id=payload["sub"],
        email=payload["email"],
        name=payload.get("name"),
        role=payload["role"],
        session_id=payload["sid"],
    )
