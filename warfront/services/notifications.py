"""
In-app notifications.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from warfront.config import NOTIFICATION_LIST_LIMIT
from warfront.db import social
from warfront.models.db import NotificationDB, UserDB
from warfront.models.failure import NotFoundError


async def send(
    session: AsyncSession, user_id: int, type_: str, message: str, href: str
) -> NotificationDB:
    return await social.create_notification(session, user_id, type_, message, href)


async def list_for_user(session: AsyncSession, user: UserDB) -> list[NotificationDB]:
    """The user's newest notifications."""
    return await social.list_notifications(session, user.id, NOTIFICATION_LIST_LIMIT)


async def mark_as_read(session: AsyncSession, user: UserDB, notification_id: int) -> NotificationDB:
    """
    Mark one notification read.

    Raises:
        NotFoundError: Missing, or addressed to someone else
    """
    notification = await social.get_notification(session, notification_id)
    if notification is None or notification.user_id != user.id:
        raise NotFoundError("Notification not found")
    notification.read = True
    await session.flush()
    return notification


async def mark_all_as_read(session: AsyncSession, user: UserDB) -> int:
    return await social.mark_all_notifications_read(session, user.id)


async def clear_all(session: AsyncSession, user: UserDB) -> int:
    return await social.delete_notifications_for_user(session, user.id)
