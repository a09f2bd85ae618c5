"""Tests for friend requests and notifications."""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from warfront.models.db import UserDB
from warfront.models.failure import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from warfront.services import notifications
from warfront.services.email import Outbox
from warfront.services.friends import (
    RelationStatus,
    check_friendship_status,
    get_friend_requests,
    get_friends,
    respond_to_friend_request,
    send_friend_request,
)


@pytest.fixture
async def pair(make_user) -> tuple[UserDB, UserDB]:
    alice, _ = await make_user("alice")
    bob, _ = await make_user("bob")
    return alice, bob


class TestSendFriendRequest:
    async def test_send(self, session: AsyncSession, pair: tuple[UserDB, UserDB]) -> None:
        alice, bob = pair

        friendship = await send_friend_request(session, alice, bob.id)

        assert friendship.status == "pending"
        [(request, requester)] = await get_friend_requests(session, bob)
        assert request.id == friendship.id
        assert requester.id == alice.id

    async def test_requestee_notified(
        self, session: AsyncSession, pair: tuple[UserDB, UserDB]
    ) -> None:
        alice, bob = pair

        await send_friend_request(session, alice, bob.id)

        [note] = await notifications.list_for_user(session, bob)
        assert note.type == "friend_request"
        assert "alice" in note.message
        assert note.read is False

    async def test_email_queued_not_sent(
        self, session: AsyncSession, pair: tuple[UserDB, UserDB]
    ) -> None:
        alice, bob = pair
        outbox = Outbox()
        send = AsyncMock(return_value=True)

        with patch("warfront.services.email.send_email", send):
            await send_friend_request(session, alice, bob.id, outbox=outbox)

        [message] = outbox.messages
        assert message.to == "bob@example.com"
        assert "@alice" in message.html
        send.assert_not_awaited()

    async def test_not_to_self(self, session: AsyncSession, pair: tuple[UserDB, UserDB]) -> None:
        alice, _ = pair
        with pytest.raises(ValidationError, match="to yourself"):
            await send_friend_request(session, alice, alice.id)

    async def test_duplicate(self, session: AsyncSession, pair: tuple[UserDB, UserDB]) -> None:
        alice, bob = pair
        await send_friend_request(session, alice, bob.id)

        with pytest.raises(ConflictError, match="Friend request already exists"):
            await send_friend_request(session, alice, bob.id)

    async def test_reverse_pending(
        self, session: AsyncSession, pair: tuple[UserDB, UserDB]
    ) -> None:
        alice, bob = pair
        await send_friend_request(session, alice, bob.id)

        with pytest.raises(ConflictError, match="already sent you a friend request"):
            await send_friend_request(session, bob, alice.id)

    async def test_unknown_user(self, session: AsyncSession, pair: tuple[UserDB, UserDB]) -> None:
        alice, _ = pair
        with pytest.raises(NotFoundError):
            await send_friend_request(session, alice, 999)


class TestRespond:
    async def test_accept(self, session: AsyncSession, pair: tuple[UserDB, UserDB]) -> None:
        alice, bob = pair
        friendship = await send_friend_request(session, alice, bob.id)

        await respond_to_friend_request(session, bob, friendship.id, accepted=True)

        assert [f.id for f in await get_friends(session, alice)] == [bob.id]
        assert [f.id for f in await get_friends(session, bob)] == [alice.id]
        [note] = await notifications.list_for_user(session, alice)
        assert "accepted" in note.message

    async def test_decline(self, session: AsyncSession, pair: tuple[UserDB, UserDB]) -> None:
        alice, bob = pair
        friendship = await send_friend_request(session, alice, bob.id)

        await respond_to_friend_request(session, bob, friendship.id, accepted=False)

        assert await get_friends(session, alice) == []
        assert await check_friendship_status(session, alice, bob.id) == RelationStatus.DECLINED

    async def test_only_requestee(
        self, session: AsyncSession, pair: tuple[UserDB, UserDB]
    ) -> None:
        alice, bob = pair
        friendship = await send_friend_request(session, alice, bob.id)

        with pytest.raises(PermissionDeniedError):
            await respond_to_friend_request(session, alice, friendship.id, accepted=True)

    async def test_only_once(self, session: AsyncSession, pair: tuple[UserDB, UserDB]) -> None:
        alice, bob = pair
        friendship = await send_friend_request(session, alice, bob.id)
        await respond_to_friend_request(session, bob, friendship.id, accepted=True)

        with pytest.raises(ConflictError, match="already been responded to"):
            await respond_to_friend_request(session, bob, friendship.id, accepted=False)


class TestFriendshipStatus:
    async def test_statuses(self, session: AsyncSession, pair: tuple[UserDB, UserDB]) -> None:
        alice, bob = pair

        assert await check_friendship_status(session, alice, alice.id) == RelationStatus.SELF
        assert await check_friendship_status(session, alice, bob.id) == RelationStatus.NONE

        friendship = await send_friend_request(session, alice, bob.id)
        assert await check_friendship_status(session, alice, bob.id) == RelationStatus.PENDING_SENT
        assert (
            await check_friendship_status(session, bob, alice.id)
            == RelationStatus.PENDING_RECEIVED
        )

        await respond_to_friend_request(session, bob, friendship.id, accepted=True)
        assert await check_friendship_status(session, bob, alice.id) == RelationStatus.FRIENDS


class TestNotifications:
    async def test_newest_first_capped(
        self, session: AsyncSession, pair: tuple[UserDB, UserDB]
    ) -> None:
        alice, _ = pair
        for i in range(55):
            await notifications.send(session, alice.id, "test", f"note {i}", "/")

        listed = await notifications.list_for_user(session, alice)

        assert len(listed) == 50
        assert listed[0].message == "note 54"

    async def test_mark_as_read(self, session: AsyncSession, pair: tuple[UserDB, UserDB]) -> None:
        alice, _ = pair
        note = await notifications.send(session, alice.id, "test", "hello", "/")

        updated = await notifications.mark_as_read(session, alice, note.id)

        assert updated.read is True

    async def test_mark_someone_elses(
        self, session: AsyncSession, pair: tuple[UserDB, UserDB]
    ) -> None:
        """Notifications of other users look missing."""
        alice, bob = pair
        note = await notifications.send(session, alice.id, "test", "hello", "/")

        with pytest.raises(NotFoundError):
            await notifications.mark_as_read(session, bob, note.id)

    async def test_mark_all_and_clear(
        self, session: AsyncSession, pair: tuple[UserDB, UserDB]
    ) -> None:
        alice, bob = pair
        await notifications.send(session, alice.id, "test", "one", "/")
        await notifications.send(session, alice.id, "test", "two", "/")
        await notifications.send(session, bob.id, "test", "bob's", "/")

        assert await notifications.mark_all_as_read(session, alice) == 2
        assert await notifications.mark_all_as_read(session, alice) == 0
        assert await notifications.clear_all(session, alice) == 2
        assert await notifications.list_for_user(session, alice) == []
        assert len(await notifications.list_for_user(session, bob)) == 1
