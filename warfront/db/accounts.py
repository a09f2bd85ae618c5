"""
Database operations for users, sessions and email verification tokens.
"""

from datetime import datetime

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from warfront.models.db import (
    BattleDB,
    EmailVerificationTokenDB,
    FriendshipDB,
    MultiplayerBattleDB,
    MultiplayerPlayerDB,
    NotificationDB,
    OwnedCardDB,
    SessionDB,
    UserDB,
)

# --- User Operations ---


async def get_user(session: AsyncSession, user_id: int) -> UserDB | None:
    return await session.get(UserDB, user_id)


async def get_user_by_email(session: AsyncSession, email: str) -> UserDB | None:
    """Look up a user by email, ignoring case."""
    result = await session.execute(
        select(UserDB).where(UserDB.email_normalized == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def get_user_by_name(session: AsyncSession, name: str) -> UserDB | None:
    """Look up a user by name, ignoring case."""
    result = await session.execute(
        select(UserDB).where(UserDB.name_normalized == name.strip().lower())
    )
    return result.scalar_one_or_none()


async def get_user_by_role(session: AsyncSession, role: str) -> UserDB | None:
    """First user holding a role, by creation order."""
    result = await session.execute(
        select(UserDB).where(UserDB.role == role).order_by(UserDB.id.asc()).limit(1)
    )
    return result.scalar_one_or_none()


async def create_user(
    session: AsyncSession, name: str, email: str, password_hash: str, role: str = "user"
) -> UserDB:
    """
    Create a new user.

    Raises IntegrityError if the normalized name or email is taken.
    """
    user = UserDB(
        name=name.strip(),
        email=email.strip(),
        password_hash=password_hash,
        role=role,
        name_normalized=name.strip().lower(),
        email_normalized=email.strip().lower(),
        email_verified=False,
    )
    session.add(user)
    await session.flush()
    return user


async def search_users(session: AsyncSession, query: str, limit: int) -> list[UserDB]:
    """Users whose name contains `query` (case-insensitive). Wildcards match literally."""
    needle = query.strip().lower()
    needle = needle.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{needle}%"
    result = await session.execute(
        select(UserDB)
        .where(UserDB.name_normalized.like(pattern, escape="\\"))
        .order_by(UserDB.name_normalized.asc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_unverified_users_before(session: AsyncSession, cutoff: datetime) -> list[UserDB]:
    """Unverified accounts created before `cutoff`."""
    result = await session.execute(
        select(UserDB).where(UserDB.email_verified.is_(False), UserDB.created_at < cutoff)
    )
    return list(result.scalars().all())


async def delete_user(session: AsyncSession, user: UserDB) -> None:
    """
    Delete a user and everything that belongs to them.

    Battles they host are removed; battles they joined lose their opponent.
    """
    user_id = user.id
    await session.execute(delete(SessionDB).where(SessionDB.user_id == user_id))
    await session.execute(
        delete(EmailVerificationTokenDB).where(EmailVerificationTokenDB.user_id == user_id)
    )
    await session.execute(delete(OwnedCardDB).where(OwnedCardDB.user_id == user_id))
    await session.execute(delete(NotificationDB).where(NotificationDB.user_id == user_id))
    await session.execute(
        delete(FriendshipDB).where(
            or_(FriendshipDB.requester_id == user_id, FriendshipDB.requestee_id == user_id)
        )
    )
    hosted_lobbies = select(MultiplayerBattleDB.id).where(MultiplayerBattleDB.host_id == user_id)
    await session.execute(
        delete(MultiplayerPlayerDB).where(
            or_(
                MultiplayerPlayerDB.user_id == user_id,
                MultiplayerPlayerDB.battle_id.in_(hosted_lobbies),
            )
        )
    )
    await session.execute(delete(MultiplayerBattleDB).where(MultiplayerBattleDB.host_id == user_id))

    await session.execute(delete(BattleDB).where(BattleDB.host_id == user_id))
    await session.execute(
        update(BattleDB)
        .where(BattleDB.opponent_id == user_id, BattleDB.status == "Full")
        .values(opponent_id=None, status="Open")
    )
    await session.execute(
        update(BattleDB).where(BattleDB.opponent_id == user_id).values(opponent_id=None)
    )
    await session.execute(
        update(BattleDB).where(BattleDB.winner_id == user_id).values(winner_id=None)
    )

    await session.delete(user)
    await session.flush()


# --- Session Operations ---


async def create_session(
    session: AsyncSession, user_id: int, token_hash: str, expires_at: datetime
) -> SessionDB:
    record = SessionDB(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
    session.add(record)
    await session.flush()
    return record


async def get_session_by_token_hash(session: AsyncSession, token_hash: str) -> SessionDB | None:
    result = await session.execute(select(SessionDB).where(SessionDB.token_hash == token_hash))
    return result.scalar_one_or_none()


async def delete_session(session: AsyncSession, token_hash: str) -> bool:
    """Delete a session. Returns True if one existed."""
    result = await session.execute(delete(SessionDB).where(SessionDB.token_hash == token_hash))
    return int(result.rowcount) > 0  # type: ignore[attr-defined]


async def delete_expired_sessions(session: AsyncSession, now: datetime) -> int:
    result = await session.execute(delete(SessionDB).where(SessionDB.expires_at <= now))
    return int(result.rowcount)  # type: ignore[attr-defined]


# --- Email Verification Operations ---


async def create_email_verification_token(
    session: AsyncSession, user_id: int, token_hash: str, expires_at: datetime
) -> EmailVerificationTokenDB:
    record = EmailVerificationTokenDB(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
    session.add(record)
    await session.flush()
    return record


async def get_email_verification_token(
    session: AsyncSession, token_hash: str
) -> EmailVerificationTokenDB | None:
    result = await session.execute(
        select(EmailVerificationTokenDB).where(EmailVerificationTokenDB.token_hash == token_hash)
    )
    return result.scalar_one_or_none()


async def delete_expired_email_verification_tokens(session: AsyncSession, now: datetime) -> int:
    result = await session.execute(
        delete(EmailVerificationTokenDB).where(EmailVerificationTokenDB.expires_at <= now)
    )
    return int(result.rowcount)  # type: ignore[attr-defined]
