"""Tests for booster packs."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from warfront.models.db import UserDB
from warfront.models.failure import PermissionDeniedError
from warfront.services.packs import create_pack, get_pack, scan_pack


class TestPacks:
    async def test_create_and_get(self, session: AsyncSession, editor: tuple[UserDB, str]) -> None:
        user, _ = editor

        await create_pack(session, user, "PACK-1", batch="A")
        pack = await get_pack(session, "PACK-1")

        assert pack is not None
        assert pack.scan_count == 0
        assert pack.batch == "A"

    async def test_create_is_idempotent(
        self, session: AsyncSession, editor: tuple[UserDB, str]
    ) -> None:
        user, _ = editor
        first = await create_pack(session, user, "PACK-1")

        second = await create_pack(session, user, "PACK-1", batch="B")

        assert second.id == first.id
        assert second.batch is None

    async def test_create_requires_editor(
        self, session: AsyncSession, player: tuple[UserDB, str]
    ) -> None:
        user, _ = player
        with pytest.raises(PermissionDeniedError):
            await create_pack(session, user, "PACK-1")

    async def test_scan_counts(self, session: AsyncSession, editor: tuple[UserDB, str]) -> None:
        user, _ = editor
        await create_pack(session, user, "PACK-1")

        await scan_pack(session, "PACK-1")
        pack = await scan_pack(session, "PACK-1")

        assert pack is not None
        assert pack.scan_count == 2

    async def test_scan_unknown(self, session: AsyncSession) -> None:
        assert await scan_pack(session, "missing") is None
        assert await get_pack(session, "missing") is None
