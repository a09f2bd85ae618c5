"""
Authorization policy.

Every privileged operation asks the same two questions through this module
instead of comparing role strings in place.
"""

import re

from warfront.config import settings
from warfront.models.db import UserDB
from warfront.models.failure import PermissionDeniedError
from warfront.models.roles import ADMIN_ROLES, PRIVILEGED_ROLES

_ROLE_SEPARATORS = re.compile(r"[\s_-]+")


def normalize_role(role: str | None) -> str:
    """Lower-case a role and drop spaces, underscores and hyphens."""
    return _ROLE_SEPARATORS.sub("", (role or "").lower())


def _has_privileged_email(user: UserDB) -> bool:
    allowed = {email.strip().lower() for email in settings.privileged_emails}
    return (user.email_normalized or "").lower() in allowed


def is_privileged(user: UserDB | None) -> bool:
    """Card editors: admin, owner and cardsetter roles."""
    if user is None:
        return False
    role = normalize_role(user.role)
    return role in {r.value for r in PRIVILEGED_ROLES} or _has_privileged_email(user)


def is_admin(user: UserDB | None) -> bool:
    """Account managers: admin and owner roles."""
    if user is None:
        return False
    role = normalize_role(user.role)
    return role in {r.value for r in ADMIN_ROLES} or _has_privileged_email(user)


def require_privileged(user: UserDB) -> UserDB:
    if not is_privileged(user):
        raise PermissionDeniedError("Unauthorized")
    return user


def require_admin(user: UserDB) -> UserDB:
    if not is_admin(user):
        raise PermissionDeniedError("Unauthorized")
    return user
