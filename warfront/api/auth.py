"""
Signup, login, logout and email verification endpoints.
"""

from fastapi import APIRouter, BackgroundTasks, HTTPException, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, Field

from warfront.api.deps import SessionDep, TokenDep, commit_and_deliver
from warfront.api.users import UserResponse
from warfront.config import settings
from warfront.services import auth as auth_service
from warfront.services.email import Outbox

router = APIRouter(prefix="/auth", tags=["auth"])


class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=32)
    email: str
    password: str = Field(..., min_length=8)


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionResponse(BaseModel):
    """Bearer token for the Authorization header."""

    token: str
    user: UserResponse


class LogoutResponse(BaseModel):
    logged_out: bool


@router.post("/signup", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    request: SignupRequest, session: SessionDep, background_tasks: BackgroundTasks
) -> SessionResponse:
    outbox = Outbox()
    user, token = await auth_service.signup(
        session, request.name, request.email, request.password, outbox=outbox
    )
    await commit_and_deliver(session, outbox, background_tasks)
    return SessionResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=SessionResponse)
async def login(request: LoginRequest, session: SessionDep) -> SessionResponse:
    token = await auth_service.login(session, request.email, request.password)
    user = await auth_service.require_user(session, token)
    return SessionResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/logout", response_model=LogoutResponse)
async def logout(session: SessionDep, token: TokenDep) -> LogoutResponse:
    if not token:
        return LogoutResponse(logged_out=False)
    return LogoutResponse(logged_out=await auth_service.logout(session, token))


@router.get("/verify-email", response_class=RedirectResponse, status_code=status.HTTP_302_FOUND)
async def verify_email(token: str, session: SessionDep) -> RedirectResponse:
    """Link target of the verification email."""
    result = await auth_service.verify_email(session, token)
    if not result.valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Verification link is invalid: {result.reason}",
        )
    return RedirectResponse(
        f"{settings.site_url.rstrip('/')}/email-verified", status_code=status.HTTP_302_FOUND
    )
