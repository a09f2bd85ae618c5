"""
Profile, user search and account administration endpoints.
"""

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, ConfigDict, Field

from warfront.api.deps import CurrentUser, SessionDep
from warfront.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


class PublicUserResponse(BaseModel):
    """What other players can see about an account."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    display_name: str | None = None
    image: str | None = None


class UserResponse(PublicUserResponse):
    """The caller's own account."""

    email: str
    role: str
    region: str | None = None
    dob: str | None = None
    email_verified: bool = False


class ProfileUpdateRequest(BaseModel):
    display_name: str | None = Field(default=None, max_length=64)
    region: str | None = Field(default=None, max_length=64)
    dob: str | None = Field(default=None, description="YYYY-MM-DD")
    image: str | None = None


class RoleUpdateRequest(BaseModel):
    role: str = Field(..., examples=["cardsetter"])


@router.get("/me", response_model=UserResponse)
async def get_me(user: CurrentUser) -> UserResponse:
    return UserResponse.model_validate(user)


@router.patch("/me", response_model=UserResponse)
async def update_me(
    request: ProfileUpdateRequest, user: CurrentUser, session: SessionDep
) -> UserResponse:
    updated = await user_service.update_profile(
        session,
        user,
        display_name=request.display_name,
        region=request.region,
        dob=request.dob,
        image=request.image,
    )
    return UserResponse.model_validate(updated)


@router.get("/search", response_model=list[PublicUserResponse])
async def search(
    session: SessionDep, _user: CurrentUser, q: str = Query(default="")
) -> list[PublicUserResponse]:
    found = await user_service.find_users(session, q)
    return [PublicUserResponse.model_validate(u) for u in found]


@router.put("/{user_id}/role", response_model=UserResponse)
async def set_role(
    user_id: int, request: RoleUpdateRequest, user: CurrentUser, session: SessionDep
) -> UserResponse:
    """Admin only."""
    updated = await user_service.set_role(session, user, user_id, request.role)
    return UserResponse.model_validate(updated)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, user: CurrentUser, session: SessionDep) -> None:
    """Admin only. Removes the account and everything it owns."""
    await user_service.admin_delete_user(session, user, user_id)
