"""
Database operations for friendships and notifications.
"""

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from warfront.models.db import FriendshipDB, NotificationDB

# --- Friendship Operations ---


async def get_friendship(session: AsyncSession, friendship_id: int) -> FriendshipDB | None:
    return await session.get(FriendshipDB, friendship_id)


async def get_friendship_between(
    session: AsyncSession, requester_id: int, requestee_id: int
) -> FriendshipDB | None:
    """Get the friendship row in one direction only."""
    result = await session.execute(
        select(FriendshipDB).where(
            FriendshipDB.requester_id == requester_id,
            FriendshipDB.requestee_id == requestee_id,
        )
    )
    return result.scalar_one_or_none()


async def create_friendship(
    session: AsyncSession, requester_id: int, requestee_id: int
) -> FriendshipDB:
    friendship = FriendshipDB(
        requester_id=requester_id, requestee_id=requestee_id, status="pending"
    )
    session.add(friendship)
    await session.flush()
    return friendship


async def list_incoming_requests(session: AsyncSession, user_id: int) -> list[FriendshipDB]:
    """Pending requests addressed to the user, oldest first."""
    result = await session.execute(
        select(FriendshipDB)
        .where(FriendshipDB.requestee_id == user_id, FriendshipDB.status == "pending")
        .order_by(FriendshipDB.id.asc())
    )
    return list(result.scalars().all())


async def list_accepted_friendships(session: AsyncSession, user_id: int) -> list[FriendshipDB]:
    """Accepted friendships in either direction."""
    result = await session.execute(
        select(FriendshipDB)
        .where(
            FriendshipDB.status == "accepted",
            or_(FriendshipDB.requester_id == user_id, FriendshipDB.requestee_id == user_id),
        )
        .order_by(FriendshipDB.id.asc())
    )
    return list(result.scalars().all())


# --- Notification Operations ---


async def create_notification(
    session: AsyncSession, user_id: int, type_: str, message: str, href: str
) -> NotificationDB:
    notification = NotificationDB(
        user_id=user_id, type=type_, message=message, href=href, read=False
    )
    session.add(notification)
    await session.flush()
    return notification


async def get_notification(session: AsyncSession, notification_id: int) -> NotificationDB | None:
    return await session.get(NotificationDB, notification_id)


async def list_notifications(
    session: AsyncSession, user_id: int, limit: int
) -> list[NotificationDB]:
    """Newest notifications first."""
    result = await session.execute(
        select(NotificationDB)
        .where(NotificationDB.user_id == user_id)
        .order_by(NotificationDB.id.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def mark_all_notifications_read(session: AsyncSession, user_id: int) -> int:
    """Returns the number of notifications that were unread."""
    result = await session.execute(
        update(NotificationDB)
        .where(NotificationDB.user_id == user_id, NotificationDB.read.is_(False))
        .values(read=True)
    )
    return int(result.rowcount)  # type: ignore[attr-defined]


async def delete_notifications_for_user(session: AsyncSession, user_id: int) -> int:
    result = await session.execute(
        delete(NotificationDB).where(NotificationDB.user_id == user_id)
    )
    return int(result.rowcount)  # type: ignore[attr-defined]
