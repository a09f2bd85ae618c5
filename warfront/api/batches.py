"""
Batch lifecycle endpoints. Batches are created under their card; see
`api.cards`.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from warfront.api.cards import BatchResponse
from warfront.api.deps import CurrentUser, SessionDep
from warfront.services import batch_allocator

router = APIRouter(prefix="/batches", tags=["batches"])


class MintRequest(BaseModel):
    count: int = Field(default=1, gt=0)


@router.post("/{batch_id}/complete", response_model=BatchResponse)
async def complete_batch(batch_id: int, user: CurrentUser, session: SessionDep) -> BatchResponse:
    batch = await batch_allocator.mark_batch_complete(session, user, batch_id)
    return BatchResponse.model_validate(batch)


@router.post("/{batch_id}/mint", response_model=BatchResponse)
async def mint(
    batch_id: int, request: MintRequest, user: CurrentUser, session: SessionDep
) -> BatchResponse:
    batch = await batch_allocator.mint_from_batch(session, user, batch_id, request.count)
    return BatchResponse.model_validate(batch)
