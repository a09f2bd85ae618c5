"""
Claim-Token Issuer/Verifier.

A verify token proves that a card's QR code was scanned. The plaintext token
only ever lives in the printed URL; the database keeps its digest bound to
one card with an expiry.

INVARIANTS:
- A token is redeemed at most once, even under concurrent redemption
- Expired or consumed tokens never validate again
- Validation is read-only; only consumption removes the token
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from warfront.config import settings
from warfront.db.operations import (
    delete_card_verify_token,
    get_card_by_custom_id,
    get_card_verify_token,
    insert_card_verify_token,
)
from warfront.models.db import CardDB, UserDB, utcnow
from warfront.models.failure import NotFoundError, ValidationError
from warfront.models.verification import TokenValidation
from warfront.services.authz import require_privileged
from warfront.services.tokens import generate_token, hash_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedToken:
    """A freshly issued token. `token` is never retrievable again."""

    token: str
    custom_id: str
    expires_at: datetime

    @property
    def url(self) -> str:
        return f"/cards/{self.custom_id}?verify={self.token}"


async def issue_verify_token(
    session: AsyncSession,
    actor: UserDB,
    custom_id: str,
    ttl_minutes: int | None = None,
) -> IssuedToken:
    """
    Generate a one-time verify token for a card.

    Args:
        actor: Privileged user printing the card
        custom_id: External id of the card
        ttl_minutes: Lifetime override, defaults to settings.verify_token_ttl_minutes

    Raises:
        PermissionDeniedError: Actor is not a card editor
        NotFoundError: Card does not exist
        ValidationError: Non-positive lifetime
    """
    require_privileged(actor)

    ttl = settings.verify_token_ttl_minutes if ttl_minutes is None else ttl_minutes
    if ttl <= 0:
        raise ValidationError("Token lifetime must be positive")

    card = await get_card_by_custom_id(session, custom_id)
    if card is None:
        raise NotFoundError("Card not found")

    token = generate_token()
    expires_at = utcnow() + timedelta(minutes=ttl)
    await insert_card_verify_token(session, card.id, hash_token(token), expires_at)

    logger.info("Issued verify token for card %s (expires %s)", card.custom_id, expires_at)
    return IssuedToken(token=token, custom_id=card.custom_id, expires_at=expires_at)


async def validate_verify_token(
    session: AsyncSession, card: CardDB, token: str
) -> TokenValidation:
    """Check a token against a card without consuming it."""
    if not token:
        return TokenValidation.rejected("not found")

    record = await get_card_verify_token(session, hash_token(token))
    if record is None:
        return TokenValidation.rejected("not found")
    if record.expires_at <= utcnow():
        return TokenValidation.rejected("expired")
    if record.card_id != card.id:
        return TokenValidation.rejected("mismatched card")
    return TokenValidation.ok()


async def consume_verify_token(session: AsyncSession, card: CardDB, token: str) -> bool:
    """
    Delete a live token bound to `card`.

    Returns True for the single caller whose delete removed the token.
    """
    if not token:
        return False
    return await delete_card_verify_token(session, hash_token(token), card.id, utcnow())


async def redeem_verify_token(session: AsyncSession, card: CardDB, token: str) -> TokenValidation:
    """
    Validate and consume in one step.

    A caller that passes validation but loses the delete to a concurrent
    redemption sees "not found".
    """
    validation = await validate_verify_token(session, card, token)
    if not validation.valid:
        return validation

    if not await consume_verify_token(session, card, token):
        return TokenValidation.rejected("not found")

    logger.info("Redeemed verify token for card %s", card.custom_id)
    return validation
