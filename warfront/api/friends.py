"""
Friend request endpoints.
"""

from typing import Literal

from fastapi import APIRouter, BackgroundTasks, status
from pydantic import BaseModel, ConfigDict

from warfront.api.deps import CurrentUser, SessionDep, commit_and_deliver
from warfront.api.users import PublicUserResponse
from warfront.services import friends as friend_service
from warfront.services.email import Outbox
from warfront.services.friends import RelationStatus

router = APIRouter(prefix="/friends", tags=["friends"])


class FriendRequestCreate(BaseModel):
    requestee_id: int


class FriendRequestAnswer(BaseModel):
    response: Literal["accepted", "declined"]


class FriendshipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    requester_id: int
    requestee_id: int
    status: str


class IncomingRequestResponse(FriendshipResponse):
    requester: PublicUserResponse


class FriendshipStatusResponse(BaseModel):
    status: RelationStatus


@router.get("", response_model=list[PublicUserResponse])
async def list_friends(user: CurrentUser, session: SessionDep) -> list[PublicUserResponse]:
    friends = await friend_service.get_friends(session, user)
    return [PublicUserResponse.model_validate(f) for f in friends]


@router.get("/requests", response_model=list[IncomingRequestResponse])
async def list_requests(user: CurrentUser, session: SessionDep) -> list[IncomingRequestResponse]:
    pairs = await friend_service.get_friend_requests(session, user)
    return [
        IncomingRequestResponse(
            **FriendshipResponse.model_validate(request).model_dump(),
            requester=PublicUserResponse.model_validate(requester),
        )
        for request, requester in pairs
    ]


@router.post("/requests", response_model=FriendshipResponse, status_code=status.HTTP_201_CREATED)
async def send_request(
    request: FriendRequestCreate,
    user: CurrentUser,
    session: SessionDep,
    background_tasks: BackgroundTasks,
) -> FriendshipResponse:
    outbox = Outbox()
    friendship = await friend_service.send_friend_request(
        session, user, request.requestee_id, outbox=outbox
    )
    await commit_and_deliver(session, outbox, background_tasks)
    return FriendshipResponse.model_validate(friendship)


@router.post("/requests/{friendship_id}", response_model=FriendshipResponse)
async def respond(
    friendship_id: int,
    request: FriendRequestAnswer,
    user: CurrentUser,
    session: SessionDep,
    background_tasks: BackgroundTasks,
) -> FriendshipResponse:
    outbox = Outbox()
    friendship = await friend_service.respond_to_friend_request(
        session, user, friendship_id, accepted=request.response == "accepted", outbox=outbox
    )
    await commit_and_deliver(session, outbox, background_tasks)
    return FriendshipResponse.model_validate(friendship)


@router.get("/status/{user_id}", response_model=FriendshipStatusResponse)
async def friendship_status(
    user_id: int, user: CurrentUser, session: SessionDep
) -> FriendshipStatusResponse:
    relation = await friend_service.check_friendship_status(session, user, user_id)
    return FriendshipStatusResponse(status=relation)
