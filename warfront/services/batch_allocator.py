"""
Batch Allocator: print-run labelling and supply tracking.

INVARIANTS:
- Labels are unique per card (unique constraint backs the check)
- NORMAL batches carry a positive max supply; EXCLUSIVE/LIMITED never do
- minted <= max_supply whenever max_supply is set
- A completed batch is never minted against again
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from warfront.db.operations import (
    batch_to_model,
    get_batch,
    get_batch_by_label,
    get_card_by_custom_id,
    increment_minted,
    insert_batch,
    list_batches_for_card,
)
from warfront.models.batch import Batch, BatchType, next_batch_label, validate_supply
from warfront.models.db import UserDB
from warfront.models.failure import ConflictError, NotFoundError, ValidationError
from warfront.services.authz import require_privileged

logger = logging.getLogger(__name__)

DUPLICATE_LABEL = "Batch label already exists for this card"


async def add_batch(
    session: AsyncSession,
    actor: UserDB,
    custom_id: str,
    batch_type: BatchType,
    max_supply: int | None = None,
) -> Batch:
    """
    Create the next print-run of a card.

    Args:
        actor: Privileged user performing the change
        custom_id: External id of the card receiving the batch
        batch_type: NORMAL, EXCLUSIVE or LIMITED
        max_supply: Required (positive) for NORMAL, forbidden otherwise

    Returns:
        The new batch, labelled with the first free label, minted = 0

    Raises:
        PermissionDeniedError: Actor is not a card editor
        NotFoundError: Card does not exist
        ValidationError: Max supply does not fit the batch type
        ConflictError: Label collided with an existing batch
    """
    require_privileged(actor)

    card = await get_card_by_custom_id(session, custom_id)
    if card is None:
        raise NotFoundError("Card not found")
    card_id = card.id

    validate_supply(batch_type, max_supply)

    existing = await list_batches_for_card(session, card_id)
    label = next_batch_label(batch.label for batch in existing)

    if await get_batch_by_label(session, card_id, label):
        raise ConflictError(DUPLICATE_LABEL)

    try:
        batch = await insert_batch(
            session,
            card_id,
            label,
            batch_type,
            max_supply if batch_type == BatchType.NORMAL else None,
        )
    except IntegrityError as e:
        # A concurrent request took the same label first
        raise ConflictError(DUPLICATE_LABEL) from e

    logger.info("Created batch %s for card %s (%s)", label, card_id, batch_type.value)
    return batch_to_model(batch)


async def mark_batch_complete(session: AsyncSession, actor: UserDB, batch_id: int) -> Batch:
    """
    Close a batch once it is fully distributed.

    Raises:
        PermissionDeniedError: Actor is not a card editor
        NotFoundError: Batch does not exist
    """
    require_privileged(actor)

    batch = await get_batch(session, batch_id)
    if batch is None:
        raise NotFoundError("Batch not found")

    batch.is_complete = True
    await session.flush()
    return batch_to_model(batch)


async def list_batches(session: AsyncSession, custom_id: str) -> list[Batch]:
    card = await get_card_by_custom_id(session, custom_id)
    if card is None:
        raise NotFoundError("Card not found")
    return [batch_to_model(b) for b in await list_batches_for_card(session, card.id)]


async def mint_from_batch(
    session: AsyncSession, actor: UserDB, batch_id: int, count: int = 1
) -> Batch:
    """
    Record `count` newly minted copies against a batch.

    The increment is a single conditional write, so concurrent mints can never
    push a batch past its max supply.

    Raises:
        PermissionDeniedError: Actor is not a card editor
        ValidationError: Count is not positive
        NotFoundError: Batch does not exist
        ConflictError: Batch is complete or would exceed its supply
    """
    require_privileged(actor)
    if count <= 0:
        raise ValidationError("Mint count must be positive")

    batch = await get_batch(session, batch_id)
    if batch is None:
        raise NotFoundError("Batch not found")

    if not await increment_minted(session, batch_id, count):
        await session.refresh(batch)
        if batch.is_complete:
            raise ConflictError("Batch is already complete")
        raise ConflictError(
            f"Minting {count} would exceed the max supply of batch {batch.label}",
            detail=f"minted={batch.minted} max_supply={batch.max_supply}",
        )

    await session.refresh(batch)
    return batch_to_model(batch)
