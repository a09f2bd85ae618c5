"""
Card catalogue management.

Every write requires a card editor (see `services.authz`). Reads are public.
"""

import logging
import secrets
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from warfront.db import operations as ops
from warfront.db.accounts import get_user_by_role
from warfront.models.db import CardDB, UserDB
from warfront.models.failure import ConflictError, NotFoundError, ValidationError
from warfront.models.roles import Role
from warfront.services.authz import require_privileged

logger = logging.getLogger(__name__)

BLANK_CARD_TYPE = "Ammo"
BLANK_CARD_NAME = "Missile"
UNASSIGNED_OWNER = "Unassigned"

# Fields an editor may change through update_card
EDITABLE_FIELDS = frozenset(
    {"card_name", "card_type", "rarity", "frame", "numbering", "image_url"}
)


def normalize_claim_code(claim_code: str | None) -> str | None:
    """Trim a printed claim code. Blank codes become None."""
    if claim_code is None:
        return None
    return claim_code.strip() or None


@dataclass(frozen=True)
class CardWithOwner:
    card: CardDB
    owner_name: str


async def get_card(session: AsyncSession, custom_id: str) -> CardDB:
    card = await ops.get_card_by_custom_id(session, custom_id)
    if card is None:
        raise NotFoundError("Card not found")
    return card


async def create_card(
    session: AsyncSession,
    actor: UserDB,
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
    Add a card to the catalogue.

    Raises:
        PermissionDeniedError: Actor is not a card editor
        ValidationError: Blank id, name or type
        ConflictError: Custom id already in use
    """
    require_privileged(actor)

    custom_id = (custom_id or "").strip()
    if not custom_id:
        raise ValidationError("Card id is required")
    if not card_name or not card_name.strip():
        raise ValidationError("Card name is required")
    if not card_type or not card_type.strip():
        raise ValidationError("Card type is required")

    if await ops.get_card_by_custom_id(session, custom_id):
        raise ConflictError(f"Card id already exists: {custom_id}")

    try:
        card = await ops.create_card(
            session,
            custom_id=custom_id,
            card_name=card_name.strip(),
            card_type=card_type.strip(),
            rarity=rarity,
            frame=frame,
            numbering=numbering,
            image_url=image_url,
            claim_code=normalize_claim_code(claim_code),
        )
    except IntegrityError as e:
        raise ConflictError(f"Card id already exists: {custom_id}") from e

    logger.info("User %s created card %s", actor.id, custom_id)
    return card


async def create_blank_card(session: AsyncSession, actor: UserDB) -> CardDB:
    """Create a placeholder card with a generated id for an editor to fill in."""
    custom_id = f"CARD-{secrets.token_hex(4).upper()}"
    return await create_card(session, actor, custom_id, BLANK_CARD_NAME, BLANK_CARD_TYPE)


async def update_card(
    session: AsyncSession, actor: UserDB, custom_id: str, **fields: str | None
) -> CardDB:
    """
    Patch a card's descriptive fields.

    Only keys in EDITABLE_FIELDS are accepted; None values are skipped.

    Raises:
        PermissionDeniedError: Actor is not a card editor
        ValidationError: Unknown field or blank name/type
        NotFoundError: Card does not exist
    """
    require_privileged(actor)

    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown card fields: {', '.join(sorted(unknown))}")

    card = await get_card(session, custom_id)

    for name, value in fields.items():
        if value is None:
            continue
        if name in ("card_name", "card_type") and not value.strip():
            raise ValidationError(f"{name} cannot be blank")
        setattr(card, name, value.strip() if name in ("card_name", "card_type") else value)

    card.name_normalized = card.card_name.lower()
    await session.flush()
    return card


async def set_claim_code(
    session: AsyncSession, actor: UserDB, custom_id: str, claim_code: str
) -> CardDB:
    """
    Attach the printed claim code to a card.

    A claimed card keeps its code; changing it would let the card be claimed
    a second time.
    """
    require_privileged(actor)
    code = normalize_claim_code(claim_code)
    if code is None:
        raise ValidationError("Claim code is required")

    card = await get_card(session, custom_id)
    if card.is_claimed:
        raise ConflictError("This claim code has already been used")

    card.claim_code = code
    await session.flush()
    return card


async def delete_card(session: AsyncSession, actor: UserDB, custom_id: str) -> None:
    """Delete a card with its batches, verify tokens and owned copies."""
    require_privileged(actor)
    card = await get_card(session, custom_id)
    await ops.delete_card(session, card)
    logger.info("User %s deleted card %s", actor.id, custom_id)


async def list_card_names(session: AsyncSession) -> list[CardDB]:
    return await ops.list_cards(session)


async def list_cards_with_owners(session: AsyncSession) -> list[CardWithOwner]:
    """
    Every card, newest first, with the name of whoever holds it.

    Unclaimed cards belong to the owner account when one exists.
    """
    cards = await ops.list_cards(session, newest_first=True)
    owners = await ops.get_card_owner_names(session)
    house = await get_user_by_role(session, Role.OWNER.value)
    default_owner = house.name if house else UNASSIGNED_OWNER

    return [CardWithOwner(card, owners.get(card.id, default_owner)) for card in cards]
