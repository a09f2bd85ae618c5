"""
Booster pack endpoints.
"""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from warfront.api.deps import CurrentUser, SessionDep
from warfront.services import packs as pack_service

router = APIRouter(prefix="/packs", tags=["packs"])


class PackResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    pack_id: str
    scan_count: int
    batch: str | None = None


class PackCreateRequest(BaseModel):
    pack_id: str = Field(..., min_length=1, max_length=64)
    batch: str | None = None


@router.get("/{pack_id}", response_model=PackResponse)
async def get_pack(pack_id: str, session: SessionDep) -> PackResponse:
    pack = await pack_service.get_pack(session, pack_id)
    if pack is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pack not found")
    return PackResponse.model_validate(pack)


@router.post("/{pack_id}/scan", response_model=PackResponse)
async def scan_pack(pack_id: str, session: SessionDep) -> PackResponse:
    pack = await pack_service.scan_pack(session, pack_id)
    if pack is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pack not found")
    return PackResponse.model_validate(pack)


@router.post("", response_model=PackResponse, status_code=status.HTTP_201_CREATED)
async def create_pack(
    request: PackCreateRequest, user: CurrentUser, session: SessionDep
) -> PackResponse:
    pack = await pack_service.create_pack(session, user, request.pack_id, request.batch)
    return PackResponse.model_validate(pack)
