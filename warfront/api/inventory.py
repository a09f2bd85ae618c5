"""
Inventory endpoints: claim a card by its printed code, list owned cards.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from warfront.api.cards import CardResponse
from warfront.api.deps import CurrentUser, SessionDep, TokenDep
from warfront.services import claims

router = APIRouter(prefix="/inventory", tags=["inventory"])


class ClaimRequest(BaseModel):
    custom_id: str = Field(..., examples=["X1"])
    claim_code: str = Field(..., examples=["ABC"])


class ClaimResponse(BaseModel):
    success: bool
    message: str


@router.post("/claim", response_model=ClaimResponse)
async def claim_card(request: ClaimRequest, session: SessionDep, token: TokenDep) -> ClaimResponse:
    """
    Add a card to the caller's inventory with its claim code.

    Unauthenticated callers get 401. A rejected claim is still a 200 with
    `success: false` and the reason in `message`.
    """
    result = await claims.add_with_claim_code(
        session, token, request.custom_id, request.claim_code
    )
    return ClaimResponse(success=result.success, message=result.message)


@router.get("", response_model=list[CardResponse])
async def list_inventory(user: CurrentUser, session: SessionDep) -> list[CardResponse]:
    return [CardResponse.model_validate(c) for c in await claims.list_inventory(session, user)]
