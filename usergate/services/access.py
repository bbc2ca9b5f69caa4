"""Authorization gate.

The caller is resolved once per request (see ``usergate.services.auth``) and
then passed explicitly to these checks. An absent caller is always reported
as ``Unauthorized`` before any role requirement is evaluated, so anonymous
clients never learn which routes need which role.
"""

from dataclasses import dataclass

from usergate.errors import Forbidden, Unauthorized
from usergate.models.enums import Role


@dataclass(frozen=True)
class Caller:
    """Read-only snapshot of the signed-in user, taken from the session token.

    ``role`` is the role at sign-in time; it is not refreshed from the store.
    """

    id: str
    email: str
    name: str | None
    role: str
    session_id: str | None = None


def is_authenticated(caller: Caller | None) -> bool:
    return caller is not None


def has_role(caller: Caller | None, role: Role | str) -> bool:
    """True when there is a caller and its role matches exactly."""
    if caller is None:
        return False
    expected = role.value if isinstance(role, Role) else role
    return caller.role == expected


def require_auth(caller: Caller | None) -> Caller:
    """Return the caller, or raise ``Unauthorized`` when there is none."""
    if caller is None:
        raise Unauthorized()
    return caller


def require_role(caller: Caller | None, role: Role | str, message: str | None = None) -> Caller:
    """Require a caller holding ``role``.

    Raises ``Unauthorized`` when there is no caller (checked first) and
    ``Forbidden`` when the caller's role differs.
    """
    caller = require_auth(caller)
    if not has_role(caller, role):
        raise Forbidden(message)
    return caller


def require_admin(caller: Caller | None) -> Caller:
    return require_role(caller, Role.ADMIN, "Admin access required")
