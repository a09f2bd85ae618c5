"""
Sealed booster packs identified by a scannable pack id.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from warfront.db import operations as ops
from warfront.models.db import PackDB, UserDB
from warfront.models.failure import ValidationError
from warfront.services.authz import require_privileged


async def get_pack(session: AsyncSession, pack_id: str) -> PackDB | None:
    return await ops.get_pack(session, pack_id)


async def scan_pack(session: AsyncSession, pack_id: str) -> PackDB | None:
    """Count one scan of a pack. Returns None for unknown packs."""
    if not await ops.increment_pack_scans(session, pack_id):
        return None
    pack = await ops.get_pack(session, pack_id)
    if pack is not None:
        await session.refresh(pack)
    return pack


async def create_pack(
    session: AsyncSession, actor: UserDB, pack_id: str, batch: str | None = None
) -> PackDB:
    """Register a pack. Registering an existing id returns the existing pack."""
    require_privileged(actor)
    pack_id = (pack_id or "").strip()
    if not pack_id:
        raise ValidationError("Pack id is required")

    existing = await ops.get_pack(session, pack_id)
    if existing is not None:
        return existing
    return await ops.create_pack(session, pack_id, batch)
