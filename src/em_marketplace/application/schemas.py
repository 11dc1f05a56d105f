"""Pydantic schemas for em_marketplace API requests and responses."""

from pydantic import BaseModel, Field

from src.em_common.enums import AssetKind
from src.em_listing.domain.models import Listing
from src.em_marketplace.domain.events import BatchBought, Bought

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateListingRequest(BaseModel):
    contract_id: str = Field(min_length=1)
    token_id: int = Field(ge=0)
    kind: AssetKind
    amount: int = 1
    price: int


class PurchaseRequest(BaseModel):
    paid_amount: int = Field(ge=0)


class BatchPurchaseRequest(BaseModel):
    listing_ids: list[int]
    paid_amount: int = Field(ge=0)


class SetFeeRequest(BaseModel):
    fee_bps: int


class SetFeeRecipientRequest(BaseModel):
    fee_recipient: str


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ListingResponse(BaseModel):
    id: int
    seller: str
    contract_id: str
    token_id: int
    kind: AssetKind
    amount: int
    price: int
    active: bool

    @classmethod
    def from_domain(cls, listing: Listing) -> "ListingResponse":
        return cls(
            id=listing.id,
            seller=listing.seller,
            contract_id=listing.asset.contract_id,
            token_id=listing.asset.token_id,
            kind=listing.kind,
            amount=listing.amount,
            price=listing.price,
            active=listing.active,
        )


class ListingListResponse(BaseModel):
    items: list[ListingResponse]
    next_listing_id: int


class PurchaseResponse(BaseModel):
    listing_id: int
    buyer: str
    amount_paid: int

    @classmethod
    def from_event(cls, event: Bought) -> "PurchaseResponse":
        return cls(listing_id=event.listing_id, buyer=event.buyer, amount_paid=event.amount_paid)


class BatchPurchaseResponse(BaseModel):
    buyer: str
    listing_ids: list[int]
    total_paid: int

    @classmethod
    def from_event(cls, event: BatchBought) -> "BatchPurchaseResponse":
        return cls(
            buyer=event.buyer, listing_ids=list(event.listing_ids), total_paid=event.total_paid
        )


class FeePolicyResponse(BaseModel):
    owner: str
    fee_bps: int
    fee_recipient: str
