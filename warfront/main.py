import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from warfront.api import (
    auth_router,
    batches_router,
    battles_router,
    cards_router,
    friends_router,
    health_router,
    inventory_router,
    multiplayer_router,
    notifications_router,
    packs_router,
    users_router,
)
from warfront.config import settings
from warfront.db.database import init_db
from warfront.models.failure import KnownError, create_known_failure, create_unknown_failure

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("warfront"),
    lifespan=lifespan,
)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(cards_router)
app.include_router(batches_router)
app.include_router(inventory_router)
app.include_router(friends_router)
app.include_router(notifications_router)
app.include_router(battles_router)
app.include_router(multiplayer_router)
app.include_router(packs_router)
app.include_router(health_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    response = create_known_failure(exc)
    return JSONResponse(status_code=exc.status_code, content=response.model_dump(mode="json"))


@app.exception_handler(Exception)
async def unknown_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    response = create_unknown_failure(exc)
    return JSONResponse(status_code=500, content=response.model_dump(mode="json"))
