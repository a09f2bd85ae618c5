"""
Friend requests and friendship status.

A friendship row is directional (requester -> requestee) and there is at
most one row per pair in either direction.
"""

import logging
from enum import Enum

from sqlalchemy.ext.asyncio import AsyncSession

from warfront.db import social
from warfront.db.accounts import get_user
from warfront.models.db import FriendshipDB, UserDB
from warfront.models.failure import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from warfront.services import notifications
from warfront.services.email import Outbox, friend_request_email, friend_response_email

logger = logging.getLogger(__name__)


class FriendshipStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class RelationStatus(str, Enum):
    """How another user relates to the caller."""

    SELF = "self"
    NONE = "none"
    FRIENDS = "friends"
    PENDING_SENT = "pending_sent"
    PENDING_RECEIVED = "pending_received"
    DECLINED = "declined"


async def send_friend_request(
    session: AsyncSession,
    requester: UserDB,
    requestee_id: int,
    outbox: Outbox | None = None,
) -> FriendshipDB:
    """
    Ask another user to be friends.

    The requestee gets a notification, and an email is queued on `outbox`
    when one is given.

    Raises:
        ValidationError: Requesting yourself
        NotFoundError: Requestee does not exist
        ConflictError: A request already exists in either direction
    """
    if requester.id == requestee_id:
        raise ValidationError("You cannot send a friend request to yourself")

    requestee = await get_user(session, requestee_id)
    if requestee is None:
        raise NotFoundError("User not found")

    if await social.get_friendship_between(session, requester.id, requestee_id):
        raise ConflictError("Friend request already exists")
    if await social.get_friendship_between(session, requestee_id, requester.id):
        raise ConflictError("This user has already sent you a friend request")

    friendship = await social.create_friendship(session, requester.id, requestee_id)

    who = requester.display_name or requester.name
    await notifications.send(
        session,
        requestee_id,
        "friend_request",
        f"{who} sent you a friend request",
        "/friends",
    )
    if outbox is not None:
        outbox.add(friend_request_email(requestee.email, requester.name, requester.display_name))

    logger.info("User %s sent a friend request to %s", requester.id, requestee_id)
    return friendship


async def respond_to_friend_request(
    session: AsyncSession,
    user: UserDB,
    friendship_id: int,
    accepted: bool,
    outbox: Outbox | None = None,
) -> FriendshipDB:
    """
    Accept or decline a pending request addressed to `user`.

    The requester is notified, and emailed through `outbox` when one is given.

    Raises:
        NotFoundError: No such request
        PermissionDeniedError: The request was sent to someone else
        ConflictError: The request was already answered
    """
    friendship = await social.get_friendship(session, friendship_id)
    if friendship is None:
        raise NotFoundError("Friend request not found")
    if friendship.requestee_id != user.id:
        raise PermissionDeniedError("You can only respond to friend requests sent to you")
    if friendship.status != FriendshipStatus.PENDING.value:
        raise ConflictError("This friend request has already been responded to")

    status = FriendshipStatus.ACCEPTED if accepted else FriendshipStatus.DECLINED
    friendship.status = status.value
    await session.flush()

    who = user.display_name or user.name
    await notifications.send(
        session,
        friendship.requester_id,
        "friend_response",
        f"{who} {status.value} your friend request",
        "/friends",
    )
    if outbox is not None:
        requester = await get_user(session, friendship.requester_id)
        if requester is not None:
            outbox.add(
                friend_response_email(requester.email, user.name, user.display_name, accepted)
            )

    return friendship


async def get_friend_requests(session: AsyncSession, user: UserDB) -> list[tuple[FriendshipDB, UserDB]]:
    """Pending requests addressed to `user`, paired with their senders."""
    pairs = []
    for request in await social.list_incoming_requests(session, user.id):
        requester = await get_user(session, request.requester_id)
        if requester is not None:
            pairs.append((request, requester))
    return pairs


async def get_friends(session: AsyncSession, user: UserDB) -> list[UserDB]:
    friends = []
    for friendship in await social.list_accepted_friendships(session, user.id):
        other_id = (
            friendship.requestee_id
            if friendship.requester_id == user.id
            else friendship.requester_id
        )
        friend = await get_user(session, other_id)
        if friend is not None:
            friends.append(friend)
    return friends


async def check_friendship_status(
    session: AsyncSession, user: UserDB, other_id: int
) -> RelationStatus:
    if user.id == other_id:
        return RelationStatus.SELF

    friendship = await social.get_friendship_between(
        session, user.id, other_id
    ) or await social.get_friendship_between(session, other_id, user.id)

    if friendship is None:
        return RelationStatus.NONE
    if friendship.status == FriendshipStatus.ACCEPTED.value:
        return RelationStatus.FRIENDS
    if friendship.status == FriendshipStatus.PENDING.value:
        if friendship.requester_id == user.id:
            return RelationStatus.PENDING_SENT
        return RelationStatus.PENDING_RECEIVED
    return RelationStatus.DECLINED
