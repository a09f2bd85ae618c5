"""
Battle lobbies.

1v1 battles move Open -> Full -> Complete. Multiplayer lobbies move
Waiting -> In Progress -> Finished and start on their own once the last
seat is taken. A user occupies at most one active lobby of either kind.
Every write refreshes `last_activity`; idle lobbies are swept by
`jobs.cleanup_battles`.
"""

import logging
from enum import Enum

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from warfront.config import MAX_MULTIPLAYER_PLAYERS, MIN_MULTIPLAYER_PLAYERS
from warfront.db import battles as db
from warfront.models.db import (
    BattleDB,
    MultiplayerBattleDB,
    MultiplayerPlayerDB,
    UserDB,
    utcnow,
)
from warfront.models.failure import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from warfront.services import notifications

logger = logging.getLogger(__name__)

ALREADY_IN_BATTLE = "You are already in a Battle. You cannot Create or Join another Battle"


class BattleStatus(str, Enum):
    OPEN = "Open"
    FULL = "Full"
    COMPLETE = "Complete"


class LobbyStatus(str, Enum):
    WAITING = "Waiting"
    IN_PROGRESS = "In Progress"
    FINISHED = "Finished"


async def _ensure_not_in_battle(session: AsyncSession, user: UserDB) -> None:
    if await db.find_active_battle_for_user(session, user.id):
        raise ConflictError(ALREADY_IN_BATTLE)
    if await db.find_active_multiplayer_for_user(session, user.id):
        raise ConflictError(ALREADY_IN_BATTLE)


# --- 1v1 ---


async def get_battle(session: AsyncSession, battle_id: int) -> BattleDB:
    battle = await db.get_battle(session, battle_id)
    if battle is None:
        raise NotFoundError("Battle not found")
    return battle


async def create_battle(session: AsyncSession, user: UserDB) -> BattleDB:
    """
    Open a 1v1 lobby hosted by `user`.

    Raises:
        ConflictError: User is already in an active battle
    """
    await _ensure_not_in_battle(session, user)
    battle = await db.create_battle(session, user.id, utcnow())
    logger.info("User %s opened battle %s", user.id, battle.id)
    return await get_battle(session, battle.id)


async def join_battle(session: AsyncSession, user: UserDB, battle_id: int) -> BattleDB:
    """
    Take the opponent seat of an open battle. The host is notified.

    Raises:
        ConflictError: User is already in a battle, or the battle is not open
        NotFoundError: No such battle
        ValidationError: Joining your own battle
    """
    await _ensure_not_in_battle(session, user)

    battle = await get_battle(session, battle_id)
    if battle.status != BattleStatus.OPEN.value:
        raise ConflictError("This battle is not open to join")
    if battle.host_id == user.id:
        raise ValidationError("You cannot join your own battle")

    battle.opponent_id = user.id
    battle.status = BattleStatus.FULL.value
    battle.last_activity = utcnow()
    await session.flush()
    battle = await get_battle(session, battle_id)

    await notifications.send(
        session,
        battle.host_id,
        "battle_joined",
        f"{user.display_name or user.name} joined your battle",
        f"/battle/{battle.id}",
    )
    return battle


async def cancel_battle(session: AsyncSession, user: UserDB, battle_id: int) -> None:
    """
    Delete a battle. Only its host may cancel.

    Raises:
        NotFoundError: No such battle
        PermissionDeniedError: User is not the host
    """
    battle = await get_battle(session, battle_id)
    if battle.host_id != user.id:
        raise PermissionDeniedError("Only the host can cancel the battle")
    await session.delete(battle)
    await session.flush()
    logger.info("User %s cancelled battle %s", user.id, battle_id)


async def complete_battle(
    session: AsyncSession, user: UserDB, battle_id: int, winner_id: int
) -> BattleDB:
    """
    Record the winner of a full battle.

    Raises:
        NotFoundError: No such battle
        PermissionDeniedError: User did not play in it
        ConflictError: Battle is not full
        ValidationError: Winner is not one of the two players
    """
    battle = await get_battle(session, battle_id)
    participants = {battle.host_id, battle.opponent_id}
    if user.id not in participants:
        raise PermissionDeniedError("Only players in this battle can complete it")
    if battle.status != BattleStatus.FULL.value:
        raise ConflictError("Only a full battle can be completed")
    if winner_id not in participants:
        raise ValidationError("Winner must be one of the players")

    battle.winner_id = winner_id
    battle.status = BattleStatus.COMPLETE.value
    battle.last_activity = utcnow()
    await session.flush()
    return await get_battle(session, battle_id)


async def list_open_battles(session: AsyncSession) -> list[BattleDB]:
    return await db.list_open_battles(session)


# --- Multiplayer ---


async def get_lobby(session: AsyncSession, lobby_id: int) -> MultiplayerBattleDB:
    lobby = await db.get_multiplayer_battle(session, lobby_id)
    if lobby is None:
        raise NotFoundError("Battle not found")
    return lobby


async def create_lobby(
    session: AsyncSession, user: UserDB, max_players: int
) -> MultiplayerBattleDB:
    """
    Open a multiplayer lobby with `user` in the first seat.

    Raises:
        ValidationError: max_players outside the allowed range
        ConflictError: User is already in an active battle
    """
    if not MIN_MULTIPLAYER_PLAYERS <= max_players <= MAX_MULTIPLAYER_PLAYERS:
        raise ValidationError(
            f"Max players must be between {MIN_MULTIPLAYER_PLAYERS} and {MAX_MULTIPLAYER_PLAYERS}"
        )
    await _ensure_not_in_battle(session, user)

    lobby = await db.create_multiplayer_battle(session, user.id, max_players, utcnow())
    logger.info("User %s opened lobby %s for %d players", user.id, lobby.id, max_players)
    return await get_lobby(session, lobby.id)


async def join_lobby(session: AsyncSession, user: UserDB, lobby_id: int) -> MultiplayerBattleDB:
    """
    Take a seat in a waiting lobby. Filling the last seat starts the battle.

    Raises:
        NotFoundError: No such lobby
        ConflictError: Already seated, lobby not waiting, lobby full, or
            user busy in another battle
    """
    lobby = await get_lobby(session, lobby_id)
    if any(player.user_id == user.id for player in lobby.players):
        raise ConflictError("You are already in this battle")
    if lobby.status != LobbyStatus.WAITING.value:
        raise ConflictError("This battle is no longer waiting for players")
    if len(lobby.players) >= lobby.max_players:
        raise ConflictError("This battle is full")
    await _ensure_not_in_battle(session, user)

    lobby.players.append(MultiplayerPlayerDB(user_id=user.id))
    if len(lobby.players) == lobby.max_players:
        lobby.status = LobbyStatus.IN_PROGRESS.value
    lobby.last_activity = utcnow()

    try:
        await session.flush()
    except IntegrityError as e:
        raise ConflictError("You are already in this battle") from e

    return await get_lobby(session, lobby_id)


async def list_waiting_lobbies(session: AsyncSession) -> list[MultiplayerBattleDB]:
    return await db.list_waiting_multiplayer_battles(session)


async def finish_lobby(session: AsyncSession, user: UserDB, lobby_id: int) -> MultiplayerBattleDB:
    """
    End a running lobby, which frees all of its players.

    Raises:
        NotFoundError: No such lobby
        PermissionDeniedError: User is not the host
        ConflictError: Lobby is not in progress
    """
    lobby = await get_lobby(session, lobby_id)
    if lobby.host_id != user.id:
        raise PermissionDeniedError("Only the host can finish the battle")
    if lobby.status != LobbyStatus.IN_PROGRESS.value:
        raise ConflictError("Only a battle in progress can be finished")

    lobby.status = LobbyStatus.FINISHED.value
    lobby.last_activity = utcnow()
    await session.flush()
    logger.info("User %s finished lobby %s", user.id, lobby_id)
    return await get_lobby(session, lobby_id)
