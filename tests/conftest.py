from collections.abc import Awaitable, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from warfront.db.accounts import create_user
from warfront.db.database import get_session
from warfront.db.operations import create_card
from warfront.main import app
from warfront.models.db import Base, CardDB, UserDB
from warfront.services.auth import hash_password, start_session

UserFactory = Callable[..., Awaitable[tuple[UserDB, str]]]


@pytest.fixture(autouse=True)
def no_email_delivery(monkeypatch: pytest.MonkeyPatch):
    """Never talk to the email provider unless a test opts in."""
    monkeypatch.setattr("warfront.services.email.settings.resend_api_key", "")


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def client(async_engine):
    """Provide an async test client with overridden database session."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session: AsyncSession) -> UserFactory:
    """Create a committed user with a live session. Returns (user, token)."""

    async def _make(name: str = "alice", role: str = "user") -> tuple[UserDB, str]:
        user = await create_user(
            session, name, f"{name}@example.com", hash_password("password123"), role=role
        )
        token = await start_session(session, user)
        await session.commit()
        return user, token

    return _make


@pytest.fixture
async def editor(make_user: UserFactory) -> tuple[UserDB, str]:
    """A card editor (cardsetter role)."""
    return await make_user("setter", role="cardsetter")


@pytest.fixture
async def player(make_user: UserFactory) -> tuple[UserDB, str]:
    return await make_user("player")


@pytest.fixture
async def card(session: AsyncSession) -> CardDB:
    """Card X1 carrying claim code ABC."""
    card = await create_card(session, "X1", "Missile", "Ammo", claim_code="ABC")
    await session.commit()
    return card
