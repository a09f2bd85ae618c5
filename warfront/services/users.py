"""
Profiles, user search and account administration.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from warfront.config import USER_SEARCH_LIMIT
from warfront.db.accounts import delete_user, get_user, search_users
from warfront.models.db import UserDB
from warfront.models.failure import NotFoundError, ValidationError
from warfront.models.roles import Role
from warfront.services.authz import require_admin

logger = logging.getLogger(__name__)


async def update_profile(
    session: AsyncSession,
    user: UserDB,
    display_name: str | None = None,
    region: str | None = None,
    dob: str | None = None,
    image: str | None = None,
) -> UserDB:
    """Patch the account settings that were provided."""
    if display_name is not None:
        user.display_name = display_name.strip() or None
    if region is not None:
        user.region = region.strip() or None
    if dob is not None:
        user.dob = dob.strip() or None
    if image is not None:
        user.image = image.strip() or None
    await session.flush()
    return user


async def find_users(session: AsyncSession, query: str) -> list[UserDB]:
    """Case-insensitive name search. Blank queries return nothing."""
    if not query or not query.strip():
        return []
    return await search_users(session, query, USER_SEARCH_LIMIT)


async def set_role(session: AsyncSession, actor: UserDB, user_id: int, role: str) -> UserDB:
    """
    Change a user's role.

    Raises:
        PermissionDeniedError: Actor is not an admin
        ValidationError: Unknown role
        NotFoundError: No such user
    """
    require_admin(actor)
    try:
        new_role = Role(role.strip().lower())
    except ValueError as e:
        raise ValidationError(f"Unknown role: {role}") from e

    user = await get_user(session, user_id)
    if user is None:
        raise NotFoundError("User not found")

    user.role = new_role.value
    await session.flush()
    logger.info("User %s set role of %s to %s", actor.id, user.id, new_role.value)
    return user


async def admin_delete_user(session: AsyncSession, actor: UserDB, user_id: int) -> None:
    """
    Delete another account and all of its data.

    Raises:
        PermissionDeniedError: Actor is not an admin
        ValidationError: Actor tried to delete themselves
        NotFoundError: No such user
    """
    require_admin(actor)
    if actor.id == user_id:
        raise ValidationError("You cannot delete your own account here")

    user = await get_user(session, user_id)
    if user is None:
        raise NotFoundError("User not found")

    await delete_user(session, user)
    logger.info("User %s deleted account %s", actor.id, user_id)
