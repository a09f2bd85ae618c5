"""
Card catalogue, QR verify-token and batch endpoints.

Cards are addressed by their printed custom id. Reads are public; writes
require a card editor.
"""

from datetime import datetime

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, ConfigDict, Field

from warfront.api.deps import CurrentUser, SessionDep
from warfront.models.batch import BatchType
from warfront.services import batch_allocator, claim_tokens
from warfront.services import cards as card_service

router = APIRouter(prefix="/cards", tags=["cards"])


class CardSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    custom_id: str
    card_name: str
    card_type: str


class CardResponse(CardSummary):
    """Public view of a card. The claim code is never exposed."""

    rarity: str | None = None
    frame: str | None = None
    numbering: str | None = None
    image_url: str | None = None
    is_claimed: bool = False


class CardWithOwnerResponse(CardResponse):
    owner_name: str


class CardCreateRequest(BaseModel):
    custom_id: str = Field(..., min_length=1, max_length=64, examples=["X1"])
    card_name: str = Field(..., min_length=1)
    card_type: str = Field(..., min_length=1)
    rarity: str | None = None
    frame: str | None = None
    numbering: str | None = None
    image_url: str | None = None
    claim_code: str | None = None


class CardUpdateRequest(BaseModel):
    card_name: str | None = None
    card_type: str | None = None
    rarity: str | None = None
    frame: str | None = None
    numbering: str | None = None
    image_url: str | None = None


class ClaimCodeRequest(BaseModel):
    claim_code: str = Field(..., min_length=1, max_length=128)


class VerifyTokenRequest(BaseModel):
    ttl_minutes: int | None = Field(default=None, gt=0)


class VerifyTokenResponse(BaseModel):
    """A freshly issued token. It cannot be retrieved again."""

    token: str
    custom_id: str
    expires_at: datetime
    url: str


class TokenCheckRequest(BaseModel):
    token: str


class TokenCheckResponse(BaseModel):
    valid: bool
    reason: str | None = None


class BatchCreateRequest(BaseModel):
    type: BatchType
    max_supply: int | None = None


class BatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    label: str
    type: BatchType
    max_supply: int | None = None
    minted: int = 0
    is_complete: bool = False


@router.get("", response_model=list[CardSummary])
async def list_cards(session: SessionDep) -> list[CardSummary]:
    return [CardSummary.model_validate(c) for c in await card_service.list_card_names(session)]


@router.get("/with-owners", response_model=list[CardWithOwnerResponse])
async def list_cards_with_owners(session: SessionDep) -> list[CardWithOwnerResponse]:
    rows = await card_service.list_cards_with_owners(session)
    return [
        CardWithOwnerResponse(
            **CardResponse.model_validate(row.card).model_dump(), owner_name=row.owner_name
        )
        for row in rows
    ]


@router.post("", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def create_card(
    request: CardCreateRequest, user: CurrentUser, session: SessionDep
) -> CardResponse:
    card = await card_service.create_card(session, user, **request.model_dump())
    return CardResponse.model_validate(card)


@router.post("/blank", response_model=CardResponse, status_code=status.HTTP_201_CREATED)
async def create_blank_card(user: CurrentUser, session: SessionDep) -> CardResponse:
    return CardResponse.model_validate(await card_service.create_blank_card(session, user))


@router.get("/{custom_id}", response_model=CardResponse)
async def get_card(
    custom_id: str, session: SessionDep, verify: str | None = None
) -> CardResponse | RedirectResponse:
    """
    Card page target of the printed QR code.

    With `verify`, the token is redeemed and the caller is redirected to a
    clean URL so the token does not stay in the browser history.
    """
    card = await card_service.get_card(session, custom_id)
    if verify is None:
        return CardResponse.model_validate(card)

    result = await claim_tokens.redeem_verify_token(session, card, verify)
    if not result.valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Verification failed: {result.reason}",
        )
    return RedirectResponse(
        f"/cards/{card.custom_id}?method=valid", status_code=status.HTTP_303_SEE_OTHER
    )


@router.patch("/{custom_id}", response_model=CardResponse)
async def update_card(
    custom_id: str, request: CardUpdateRequest, user: CurrentUser, session: SessionDep
) -> CardResponse:
    card = await card_service.update_card(
        session, user, custom_id, **request.model_dump(exclude_none=True)
    )
    return CardResponse.model_validate(card)


@router.put("/{custom_id}/claim-code", response_model=CardResponse)
async def set_claim_code(
    custom_id: str, request: ClaimCodeRequest, user: CurrentUser, session: SessionDep
) -> CardResponse:
    card = await card_service.set_claim_code(session, user, custom_id, request.claim_code)
    return CardResponse.model_validate(card)


@router.delete("/{custom_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(custom_id: str, user: CurrentUser, session: SessionDep) -> None:
    await card_service.delete_card(session, user, custom_id)


# --- Verify tokens ---


@router.post(
    "/{custom_id}/verify-tokens",
    response_model=VerifyTokenResponse,
    status_code=status.HTTP_201_CREATED,
)
async def issue_verify_token(
    custom_id: str, request: VerifyTokenRequest, user: CurrentUser, session: SessionDep
) -> VerifyTokenResponse:
    issued = await claim_tokens.issue_verify_token(session, user, custom_id, request.ttl_minutes)
    return VerifyTokenResponse(
        token=issued.token,
        custom_id=issued.custom_id,
        expires_at=issued.expires_at,
        url=issued.url,
    )


@router.post("/{custom_id}/verify-tokens/validate", response_model=TokenCheckResponse)
async def validate_verify_token(
    custom_id: str, request: TokenCheckRequest, session: SessionDep
) -> TokenCheckResponse:
    """Check a token without using it up."""
    card = await card_service.get_card(session, custom_id)
    result = await claim_tokens.validate_verify_token(session, card, request.token)
    return TokenCheckResponse(valid=result.valid, reason=result.reason)


@router.post("/{custom_id}/verify-tokens/consume", response_model=TokenCheckResponse)
async def consume_verify_token(
    custom_id: str, request: TokenCheckRequest, session: SessionDep
) -> TokenCheckResponse:
    card = await card_service.get_card(session, custom_id)
    result = await claim_tokens.redeem_verify_token(session, card, request.token)
    return TokenCheckResponse(valid=result.valid, reason=result.reason)


# --- Batches ---


@router.get("/{custom_id}/batches", response_model=list[BatchResponse])
async def list_batches(custom_id: str, session: SessionDep) -> list[BatchResponse]:
    batches = await batch_allocator.list_batches(session, custom_id)
    return [BatchResponse.model_validate(b) for b in batches]


@router.post(
    "/{custom_id}/batches", response_model=BatchResponse, status_code=status.HTTP_201_CREATED
)
async def add_batch(
    custom_id: str, request: BatchCreateRequest, user: CurrentUser, session: SessionDep
) -> BatchResponse:
    batch = await batch_allocator.add_batch(
        session, user, custom_id, request.type, request.max_supply
    )
    return BatchResponse.model_validate(batch)
