"""
Notification endpoints for the signed-in user.
"""

from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict

from warfront.api.deps import CurrentUser, SessionDep
from warfront.services import notifications as notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: str
    message: str
    href: str
    read: bool
    created_at: datetime


class CountResponse(BaseModel):
    count: int


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(user: CurrentUser, session: SessionDep) -> list[NotificationResponse]:
    """Newest first, capped at 50."""
    items = await notification_service.list_for_user(session, user)
    return [NotificationResponse.model_validate(n) for n in items]


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int, user: CurrentUser, session: SessionDep
) -> NotificationResponse:
    notification = await notification_service.mark_as_read(session, user, notification_id)
    return NotificationResponse.model_validate(notification)


@router.post("/read-all", response_model=CountResponse)
async def mark_all_read(user: CurrentUser, session: SessionDep) -> CountResponse:
    return CountResponse(count=await notification_service.mark_all_as_read(session, user))


@router.delete("", response_model=CountResponse)
async def clear_all(user: CurrentUser, session: SessionDep) -> CountResponse:
    return CountResponse(count=await notification_service.clear_all(session, user))
