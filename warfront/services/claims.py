"""
Claim Processor: binds a physical card to one user's inventory.

INVARIANTS:
- A card is claimed at most once across all users
- A user owns at most one copy of a card
- The claimed flag flips before the owned copy is written, in the same
  transaction, so a lost race writes nothing
"""

import hmac
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from warfront.db.operations import (
    get_card_by_custom_id,
    get_owned_card,
    insert_owned_card,
    list_owned_cards,
    mark_card_claimed,
)
from warfront.models.claim import (
    MSG_ALREADY_OWNED,
    MSG_ALREADY_USED,
    MSG_CARD_NOT_FOUND,
    MSG_CLAIMED,
    MSG_INVALID_CODE,
    ClaimResult,
)
from warfront.models.db import CardDB, UserDB
from warfront.models.failure import FailureKind
from warfront.services.auth import require_user

logger = logging.getLogger(__name__)


def _codes_match(expected: str | None, supplied: str | None) -> bool:
    if not expected or supplied is None:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), supplied.encode("utf-8"))


async def add_with_claim_code(
    session: AsyncSession,
    session_token: str | None,
    custom_id: str,
    claim_code: str,
) -> ClaimResult:
    """
    Add a card to the caller's inventory by its printed claim code.

    Checks run in a fixed order and the first failure is returned:
    card exists, code matches, card unclaimed, not already owned.

    Raises:
        AuthError: No live session behind `session_token`
    """
    user = await require_user(session, session_token)

    card = await get_card_by_custom_id(session, custom_id)
    if card is None:
        return ClaimResult(False, MSG_CARD_NOT_FOUND, FailureKind.NOT_FOUND)

    if not _codes_match(card.claim_code, claim_code):
        return ClaimResult(False, MSG_INVALID_CODE, FailureKind.INVALID_INPUT)

    if card.is_claimed:
        return ClaimResult(False, MSG_ALREADY_USED, FailureKind.CONFLICT)

    if await get_owned_card(session, user.id, card.id):
        return ClaimResult(False, MSG_ALREADY_OWNED, FailureKind.CONFLICT)

    if not await mark_card_claimed(session, card.id, claim_code):
        logger.info("User %s lost the claim race for card %s", user.id, card.custom_id)
        return ClaimResult(False, MSG_ALREADY_USED, FailureKind.CONFLICT)

    await session.refresh(card)
    await insert_owned_card(session, user.id, card.id)

    logger.info("User %s claimed card %s", user.id, card.custom_id)
    return ClaimResult(True, MSG_CLAIMED)


async def list_inventory(session: AsyncSession, user: UserDB) -> list[CardDB]:
    """Cards owned by `user`, oldest first."""
    return await list_owned_cards(session, user.id)
