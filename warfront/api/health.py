"""
Liveness and readiness checks for the container platform.

`/health` never touches dependencies. `/ready` pings the database and
reports whether outbound email is switched on, since verification mails and
friend notices silently go nowhere without it.
"""

import logging

from fastapi import APIRouter, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from warfront.api.deps import SessionDep
from warfront.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    database: str | None = None
    email_delivery: bool | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(response: Response, session: SessionDep) -> HealthResponse:
    """503 while the database is unreachable. Disabled email does not fail the check."""
    email_delivery = bool(settings.resend_api_key)
    try:
        await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database ping failed: %s", e)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(
            status="not ready", database="disconnected", email_delivery=email_delivery
        )
    return HealthResponse(status="ready", database="connected", email_delivery=email_delivery)
