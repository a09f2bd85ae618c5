"""
Database CRUD operations for cards, batches, verify tokens and inventories.

State transitions that must not race (claimed flag flip, token consumption,
minting) are single conditional statements whose affected-row count tells
the caller whether it won.
"""

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from warfront.models.batch import Batch, BatchType
from warfront.models.db import (
    BatchDB,
    CardDB,
    CardVerifyTokenDB,
    OwnedCardDB,
    PackDB,
    UserDB,
)

# --- Card Operations ---


async def get_card(session: AsyncSession, card_id: int) -> CardDB | None:
    """Get a card by primary key. Returns None if missing."""
    return await session.get(CardDB, card_id)


async def get_card_by_custom_id(session: AsyncSession, custom_id: str) -> CardDB | None:
    """Get a card by its external identifier."""
    result = await session.execute(select(CardDB).where(CardDB.custom_id == custom_id))
    return result.scalar_one_or_none()


async def list_cards(session: AsyncSession, newest_first: bool = False) -> list[CardDB]:
    """List every card ordered by creation."""
    order = CardDB.id.desc() if newest_first else CardDB.id.asc()
    result = await session.execute(select(CardDB).order_by(order))
    return list(result.scalars().all())


async def create_card(
    session: AsyncSession,
    custom_id: str,
    card_name: str,
    card_type: str,
    rarity: str | None = None,
    frame: str | None = None,
    numbering: str | None = None,
    image_url: str | None = None,
    claim_code: str | None = None,
) -> CardDB:
    """
    Create a new card.

    Raises IntegrityError if the custom id is taken.
    """
    card = CardDB(
        custom_id=custom_id,
        card_name=card_name,
        name_normalized=card_name.lower(),
        card_type=card_type,
        rarity=rarity,
        frame=frame,
        numbering=numbering,
        image_url=image_url,
        claim_code=claim_code,
        is_claimed=False,
    )
    session.add(card)
    await session.flush()
    return card


async def delete_card(session: AsyncSession, card: CardDB) -> None:
    """Delete a card together with its batches, verify tokens and owned copies."""
    await session.execute(delete(BatchDB).where(BatchDB.card_id == card.id))
    await session.execute(delete(CardVerifyTokenDB).where(CardVerifyTokenDB.card_id == card.id))
    await session.execute(delete(OwnedCardDB).where(OwnedCardDB.card_id == card.id))
    await session.delete(card)
    await session.flush()


async def mark_card_claimed(session: AsyncSession, card_id: int, claim_code: str) -> bool:
    """
    Flip a card's claimed flag if it is still unclaimed under this code.

    Returns True for exactly one caller per card. Every later or concurrent
    caller sees zero affected rows and gets False.
    """
    result = await session.execute(
        update(CardDB)
        .where(
            CardDB.id == card_id,
            CardDB.claim_code == claim_code,
            CardDB.is_claimed.is_(False),
        )
        .values(is_claimed=True)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount) == 1  # type: ignore[attr-defined]


# --- Batch Operations ---


async def list_batches_for_card(session: AsyncSession, card_id: int) -> list[BatchDB]:
    """Get all batches of a card in creation order."""
    result = await session.execute(
        select(BatchDB).where(BatchDB.card_id == card_id).order_by(BatchDB.id.asc())
    )
    return list(result.scalars().all())


async def get_batch(session: AsyncSession, batch_id: int) -> BatchDB | None:
    return await session.get(BatchDB, batch_id)


async def get_batch_by_label(session: AsyncSession, card_id: int, label: str) -> BatchDB | None:
    result = await session.execute(
        select(BatchDB).where(BatchDB.card_id == card_id, BatchDB.label == label)
    )
    return result.scalar_one_or_none()


async def insert_batch(
    session: AsyncSession,
    card_id: int,
    label: str,
    batch_type: BatchType,
    max_supply: int | None,
) -> BatchDB:
    """
    Insert a fresh batch with nothing minted.

    Raises IntegrityError if the (card, label) pair exists.
    """
    batch = BatchDB(
        card_id=card_id,
        label=label,
        type=batch_type.value,
        max_supply=max_supply,
        minted=0,
        is_complete=False,
    )
    session.add(batch)
    await session.flush()
    return batch


async def increment_minted(session: AsyncSession, batch_id: int, count: int) -> bool:
    """
    Add `count` to a batch's minted total if the batch allows it.

    The batch must be incomplete and the new total must stay within its max
    supply (uncapped batches only need to be incomplete). Returns False when
    nothing was updated.
    """
    result = await session.execute(
        update(BatchDB)
        .where(
            BatchDB.id == batch_id,
            BatchDB.is_complete.is_(False),
            (BatchDB.max_supply.is_(None)) | (BatchDB.minted + count <= BatchDB.max_supply),
        )
        .values(minted=BatchDB.minted + count)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount) == 1  # type: ignore[attr-defined]


def batch_to_model(batch: BatchDB) -> Batch:
    """Convert a database batch to a domain model."""
    return Batch(
        id=batch.id,
        card_id=batch.card_id,
        label=batch.label,
        type=BatchType(batch.type),
        max_supply=batch.max_supply,
        minted=batch.minted,
        is_complete=batch.is_complete,
    )


# --- Verify Token Operations ---


async def insert_card_verify_token(
    session: AsyncSession, card_id: int, token_hash: str, expires_at: datetime
) -> CardVerifyTokenDB:
    token = CardVerifyTokenDB(card_id=card_id, token_hash=token_hash, expires_at=expires_at)
    session.add(token)
    await session.flush()
    return token


async def get_card_verify_token(session: AsyncSession, token_hash: str) -> CardVerifyTokenDB | None:
    result = await session.execute(
        select(CardVerifyTokenDB).where(CardVerifyTokenDB.token_hash == token_hash)
    )
    return result.scalar_one_or_none()


async def delete_card_verify_token(
    session: AsyncSession, token_hash: str, card_id: int, now: datetime
) -> bool:
    """
    Consume a live token bound to `card_id`.

    Returns True only for the caller whose delete removed the row.
    """
    result = await session.execute(
        delete(CardVerifyTokenDB)
        .where(
            CardVerifyTokenDB.token_hash == token_hash,
            CardVerifyTokenDB.card_id == card_id,
            CardVerifyTokenDB.expires_at > now,
        )
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount) == 1  # type: ignore[attr-defined]


async def delete_expired_card_verify_tokens(session: AsyncSession, now: datetime) -> int:
    """Delete expired verify tokens. Returns the number removed."""
    result = await session.execute(
        delete(CardVerifyTokenDB).where(CardVerifyTokenDB.expires_at <= now)
    )
    return int(result.rowcount)  # type: ignore[attr-defined]


# --- Inventory Operations ---


async def get_owned_card(session: AsyncSession, user_id: int, card_id: int) -> OwnedCardDB | None:
    result = await session.execute(
        select(OwnedCardDB).where(OwnedCardDB.user_id == user_id, OwnedCardDB.card_id == card_id)
    )
    return result.scalar_one_or_none()


async def insert_owned_card(session: AsyncSession, user_id: int, card_id: int) -> OwnedCardDB:
    """
    Record that a user owns a card.

    Raises IntegrityError if the pair already exists.
    """
    owned = OwnedCardDB(user_id=user_id, card_id=card_id)
    session.add(owned)
    await session.flush()
    return owned


async def list_owned_cards(session: AsyncSession, user_id: int) -> list[CardDB]:
    """Cards in a user's inventory, oldest first."""
    result = await session.execute(
        select(OwnedCardDB).where(OwnedCardDB.user_id == user_id).order_by(OwnedCardDB.id.asc())
    )
    return [owned.card for owned in result.scalars().all()]


async def get_card_owner_names(session: AsyncSession) -> dict[int, str]:
    """Map card id to the name of the user owning it."""
    result = await session.execute(
        select(OwnedCardDB.card_id, UserDB.name).join(UserDB, UserDB.id == OwnedCardDB.user_id)
    )
    return {card_id: name for card_id, name in result.all()}


# --- Pack Operations ---


async def get_pack(session: AsyncSession, pack_id: str) -> PackDB | None:
    result = await session.execute(select(PackDB).where(PackDB.pack_id == pack_id))
    return result.scalar_one_or_none()


async def create_pack(session: AsyncSession, pack_id: str, batch: str | None = None) -> PackDB:
    pack = PackDB(pack_id=pack_id, scan_count=0, batch=batch)
    session.add(pack)
    await session.flush()
    return pack


async def increment_pack_scans(session: AsyncSession, pack_id: str) -> bool:
    """Atomically bump a pack's scan counter. Returns False if the pack is unknown."""
    result = await session.execute(
        update(PackDB)
        .where(PackDB.pack_id == pack_id)
        .values(scan_count=PackDB.scan_count + 1)
        .execution_options(synchronize_session=False)
    )
    return int(result.rowcount) == 1  # type: ignore[attr-defined]
