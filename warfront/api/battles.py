"""
1v1 battle and multiplayer lobby endpoints.
"""

from datetime import datetime

from fastapi import APIRouter, status
from pydantic import BaseModel, ConfigDict, Field

from warfront.api.deps import CurrentUser, SessionDep
from warfront.api.users import PublicUserResponse
from warfront.config import MAX_MULTIPLAYER_PLAYERS, MIN_MULTIPLAYER_PLAYERS
from warfront.models.db import MultiplayerBattleDB
from warfront.services import battles as battle_service

router = APIRouter(prefix="/battles", tags=["battles"])
multiplayer_router = APIRouter(prefix="/multiplayer", tags=["battles"])


class BattleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: str
    host: PublicUserResponse
    opponent: PublicUserResponse | None = None
    winner_id: int | None = None
    last_activity: datetime


class CompleteRequest(BaseModel):
    winner_id: int


class LobbyCreateRequest(BaseModel):
    max_players: int = Field(..., ge=MIN_MULTIPLAYER_PLAYERS, le=MAX_MULTIPLAYER_PLAYERS)


class LobbyResponse(BaseModel):
    id: int
    host_id: int
    max_players: int
    status: str
    players: list[PublicUserResponse]
    last_activity: datetime


def _lobby_response(lobby: MultiplayerBattleDB) -> LobbyResponse:
    return LobbyResponse(
        id=lobby.id,
        host_id=lobby.host_id,
        max_players=lobby.max_players,
        status=lobby.status,
        players=[PublicUserResponse.model_validate(p.user) for p in lobby.players],
        last_activity=lobby.last_activity,
    )


# --- 1v1 ---


@router.get("", response_model=list[BattleResponse])
async def list_open(session: SessionDep) -> list[BattleResponse]:
    battles = await battle_service.list_open_battles(session)
    return [BattleResponse.model_validate(b) for b in battles]


@router.post("", response_model=BattleResponse, status_code=status.HTTP_201_CREATED)
async def create(user: CurrentUser, session: SessionDep) -> BattleResponse:
    battle = await battle_service.create_battle(session, user)
    return BattleResponse.model_validate(battle)


@router.get("/{battle_id}", response_model=BattleResponse)
async def get(battle_id: int, session: SessionDep) -> BattleResponse:
    return BattleResponse.model_validate(await battle_service.get_battle(session, battle_id))


@router.post("/{battle_id}/join", response_model=BattleResponse)
async def join(battle_id: int, user: CurrentUser, session: SessionDep) -> BattleResponse:
    battle = await battle_service.join_battle(session, user, battle_id)
    return BattleResponse.model_validate(battle)


@router.post("/{battle_id}/complete", response_model=BattleResponse)
async def complete(
    battle_id: int, request: CompleteRequest, user: CurrentUser, session: SessionDep
) -> BattleResponse:
    battle = await battle_service.complete_battle(session, user, battle_id, request.winner_id)
    return BattleResponse.model_validate(battle)


@router.delete("/{battle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel(battle_id: int, user: CurrentUser, session: SessionDep) -> None:
    await battle_service.cancel_battle(session, user, battle_id)


# --- Multiplayer ---


@multiplayer_router.get("", response_model=list[LobbyResponse])
async def list_waiting(session: SessionDep) -> list[LobbyResponse]:
    return [_lobby_response(lobby) for lobby in await battle_service.list_waiting_lobbies(session)]


@multiplayer_router.post("", response_model=LobbyResponse, status_code=status.HTTP_201_CREATED)
async def create_lobby(
    request: LobbyCreateRequest, user: CurrentUser, session: SessionDep
) -> LobbyResponse:
    lobby = await battle_service.create_lobby(session, user, request.max_players)
    return _lobby_response(lobby)


@multiplayer_router.get("/{lobby_id}", response_model=LobbyResponse)
async def get_lobby(lobby_id: int, session: SessionDep) -> LobbyResponse:
    return _lobby_response(await battle_service.get_lobby(session, lobby_id))


@multiplayer_router.post("/{lobby_id}/join", response_model=LobbyResponse)
async def join_lobby(lobby_id: int, user: CurrentUser, session: SessionDep) -> LobbyResponse:
    return _lobby_response(await battle_service.join_lobby(session, user, lobby_id))


@multiplayer_router.post("/{lobby_id}/finish", response_model=LobbyResponse)
async def finish_lobby(lobby_id: int, user: CurrentUser, session: SessionDep) -> LobbyResponse:
    return _lobby_response(await battle_service.finish_lobby(session, user, lobby_id))
