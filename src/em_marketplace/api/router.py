"""em_marketplace REST endpoints.

POST /listings                      — escrow an asset and list it
GET  /listings                      — all listings (active_only filter)
GET  /listings/{listing_id}         — listing detail
POST /listings/{listing_id}/cancel  — seller takes the asset back
POST /listings/{listing_id}/purchase — settle one listing
POST /listings/batch-purchase       — settle several listings, all or nothing
GET  /fee-policy                    — current fee rate and recipient
PUT  /fee-policy/fee-bps            — owner only
PUT  /fee-policy/recipient          — owner only
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from src.em_common.database import get_db_session
from src.em_common.response import ApiResponse, success_response
from src.em_gateway.auth.dependencies import get_current_identity
from src.em_marketplace.application.bootstrap import get_marketplace_service
from src.em_marketplace.application.schemas import (
    BatchPurchaseRequest,
    CreateListingRequest,
    PurchaseRequest,
    SetFeeRecipientRequest,
    SetFeeRequest,
)
from src.em_marketplace.application.service import MarketplaceApplicationService

router = APIRouter(tags=["marketplace"])

Identity = Annotated[str, Depends(get_current_identity)]
Db = Annotated[AsyncSession, Depends(get_db_session)]
Service = Annotated[MarketplaceApplicationService, Depends(get_marketplace_service)]


def _respond(request: Request, data: BaseModel) -> ApiResponse:
    resp = success_response(data.model_dump(mode="json"))
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/listings", status_code=201)
async def create_listing(
    body: CreateListingRequest,
    request: Request,
    caller: Identity,
    db: Db,
    service: Service,
) -> ApiResponse:
    result = await service.create_listing(db, caller, body)
    return _respond(request, result)


@router.get("/listings")
async def list_listings(
    request: Request,
    caller: Identity,
    service: Service,
    active_only: bool = Query(False),
) -> ApiResponse:
    result = await service.list_listings(active_only)
    return _respond(request, result)


@router.post("/listings/batch-purchase")
async def purchase_batch(
    body: BatchPurchaseRequest,
    request: Request,
    caller: Identity,
    db: Db,
    service: Service,
) -> ApiResponse:
    result = await service.purchase_batch(db, caller, body.listing_ids, body.paid_amount)
    return _respond(request, result)


@router.get("/listings/{listing_id}")
async def get_listing(
    listing_id: int,
    request: Request,
    caller: Identity,
    service: Service,
) -> ApiResponse:
    result = await service.get_listing(listing_id)
    return _respond(request, result)


@router.post("/listings/{listing_id}/cancel")
async def cancel_listing(
    listing_id: int,
    request: Request,
    caller: Identity,
    db: Db,
    service: Service,
) -> ApiResponse:
    result = await service.cancel_listing(db, caller, listing_id)
    return _respond(request, result)


@router.post("/listings/{listing_id}/purchase")
async def purchase(
    listing_id: int,
    body: PurchaseRequest,
    request: Request,
    caller: Identity,
    db: Db,
    service: Service,
) -> ApiResponse:
    result = await service.purchase(db, caller, listing_id, body.paid_amount)
    return _respond(request, result)


@router.get("/fee-policy")
async def get_fee_policy(
    request: Request,
    caller: Identity,
    service: Service,
) -> ApiResponse:
    return _respond(request, await service.get_fee_policy())


@router.put("/fee-policy/fee-bps")
async def set_fee(
    body: SetFeeRequest,
    request: Request,
    caller: Identity,
    db: Db,
    service: Service,
) -> ApiResponse:
    result = await service.set_fee(db, caller, body.fee_bps)
    return _respond(request, result)


@router.put("/fee-policy/recipient")
async def set_fee_recipient(
    body: SetFeeRecipientRequest,
    request: Request,
    caller: Identity,
    db: Db,
    service: Service,
) -> ApiResponse:
    result = await service.set_fee_recipient(db, caller, body.fee_recipient)
    return _respond(request, result)
