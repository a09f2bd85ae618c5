"""
Shared request dependencies: database session, bearer authentication and
post-commit email delivery.
"""

from typing import Annotated

from fastapi import BackgroundTasks, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from warfront.db.database import get_session
from warfront.models.db import UserDB
from warfront.services.auth import require_user, resolve_session
from warfront.services.email import Outbox

security = HTTPBearer(auto_error=False)

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str | None:
    return credentials.credentials if credentials else None


TokenDep = Annotated[str | None, Depends(bearer_token)]


async def current_user(session: SessionDep, token: TokenDep) -> UserDB:
    """Resolve the caller or fail with 401."""
    return await require_user(session, token)


async def optional_user(session: SessionDep, token: TokenDep) -> UserDB | None:
    return await resolve_session(session, token)


CurrentUser = Annotated[UserDB, Depends(current_user)]
OptionalUser = Annotated[UserDB | None, Depends(optional_user)]


async def commit_and_deliver(
    session: AsyncSession, outbox: Outbox, background_tasks: BackgroundTasks
) -> None:
    """
    Commit the request's writes, then send its queued emails after the response.

    A failed commit raises before anything is scheduled, so no email goes out
    for writes that never landed.
    """
    await session.commit()
    background_tasks.add_task(outbox.deliver)
