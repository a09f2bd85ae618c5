"""
Database operations for 1v1 battles and multiplayer lobbies.
"""

from datetime import datetime

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from warfront.models.db import BattleDB, MultiplayerBattleDB, MultiplayerPlayerDB

# Statuses in which a battle still occupies its players
ACTIVE_BATTLE_STATUSES = ("Open", "Full")
ACTIVE_MULTIPLAYER_STATUSES = ("Waiting", "In Progress")

# --- 1v1 Battle Operations ---


async def get_battle(session: AsyncSession, battle_id: int) -> BattleDB | None:
    """Load a battle with its players, overwriting any stale in-memory state."""
    result = await session.execute(
        select(BattleDB)
        .where(BattleDB.id == battle_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_battle(session: AsyncSession, host_id: int, now: datetime) -> BattleDB:
    battle = BattleDB(host_id=host_id, status="Open", last_activity=now)
    session.add(battle)
    await session.flush()
    return battle


async def list_open_battles(session: AsyncSession) -> list[BattleDB]:
    """Open battles, newest first."""
    result = await session.execute(
        select(BattleDB).where(BattleDB.status == "Open").order_by(BattleDB.id.desc())
    )
    return list(result.scalars().all())


async def find_active_battle_for_user(session: AsyncSession, user_id: int) -> BattleDB | None:
    result = await session.execute(
        select(BattleDB)
        .where(
            or_(BattleDB.host_id == user_id, BattleDB.opponent_id == user_id),
            BattleDB.status.in_(ACTIVE_BATTLE_STATUSES),
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def delete_idle_battles(session: AsyncSession, cutoff: datetime) -> int:
    """Delete lobbies that never started and saw no activity since `cutoff`."""
    result = await session.execute(
        delete(BattleDB).where(
            BattleDB.status.in_(("Open", "Full")),
            BattleDB.last_activity < cutoff,
        )
    )
    return int(result.rowcount)  # type: ignore[attr-defined]


# --- Multiplayer Operations ---


async def get_multiplayer_battle(
    session: AsyncSession, battle_id: int
) -> MultiplayerBattleDB | None:
    """Load a lobby with its seated players, overwriting stale in-memory state."""
    result = await session.execute(
        select(MultiplayerBattleDB)
        .where(MultiplayerBattleDB.id == battle_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def create_multiplayer_battle(
    session: AsyncSession, host_id: int, max_players: int, now: datetime
) -> MultiplayerBattleDB:
    """Create a lobby with the host as its first player."""
    lobby = MultiplayerBattleDB(
        host_id=host_id, max_players=max_players, status="Waiting", last_activity=now
    )
    lobby.players.append(MultiplayerPlayerDB(user_id=host_id))
    session.add(lobby)
    await session.flush()
    return lobby


async def list_waiting_multiplayer_battles(session: AsyncSession) -> list[MultiplayerBattleDB]:
    result = await session.execute(
        select(MultiplayerBattleDB)
        .where(MultiplayerBattleDB.status == "Waiting")
        .order_by(MultiplayerBattleDB.id.desc())
    )
    return list(result.scalars().all())


async def find_active_multiplayer_for_user(
    session: AsyncSession, user_id: int
) -> MultiplayerBattleDB | None:
    result = await session.execute(
        select(MultiplayerBattleDB)
        .join(MultiplayerPlayerDB, MultiplayerPlayerDB.battle_id == MultiplayerBattleDB.id)
        .where(
            MultiplayerPlayerDB.user_id == user_id,
            MultiplayerBattleDB.status.in_(ACTIVE_MULTIPLAYER_STATUSES),
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def delete_idle_multiplayer_battles(session: AsyncSession, cutoff: datetime) -> int:
    """Delete Waiting lobbies idle since `cutoff`, players included."""
    result = await session.execute(
        select(MultiplayerBattleDB).where(
            MultiplayerBattleDB.status == "Waiting",
            MultiplayerBattleDB.last_activity < cutoff,
        )
    )
    stale = list(result.scalars().all())
    for lobby in stale:
        await session.delete(lobby)
    await session.flush()
    return len(stale)
