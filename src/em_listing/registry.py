"""ListingRegistry — id-indexed listing store; create and cancel.

Listings are frozen; a transition replaces the stored record. Inactive is
terminal. Ids come from a monotonic counter starting at 1.
"""

from dataclasses import replace

from src.em_common.enums import AssetKind
from src.em_common.errors import (
    InvalidPriceError,
    ListingNotActiveError,
    ListingNotFoundError,
    NotSellerError,
)
from src.em_ledger.ledger import JournaledDict, Ledger
from src.em_listing.domain.models import Listing
from src.em_marketplace.domain.events import Cancelled, Listed
from src.em_vault.custody import AssetCustodyVault
from src.em_vault.models import AssetRef

_FIRST_LISTING_ID = 1


class ListingRegistry:
    def __init__(self, ledger: Ledger, vault: AssetCustodyVault) -> None:
        self._ledger = ledger
        self._vault = vault
        self._listings: JournaledDict[int, Listing] = ledger.mapping()
        self._counter: JournaledDict[str, int] = ledger.mapping()
        self._counter["next_id"] = _FIRST_LISTING_ID

    @property
    def next_listing_id(self) -> int:
        return self._counter["next_id"]

    def get(self, listing_id: int) -> Listing:
        listing = self._listings.get(listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return listing

    def require_active(self, listing_id: int) -> Listing:
        listing = self.get(listing_id)
        if not listing.active:
            raise ListingNotActiveError(listing_id)
        return listing

    def listings(self, active_only: bool = False) -> list[Listing]:
        items = sorted(self._listings.values(), key=lambda lst: lst.id)
        if active_only:
            return [lst for lst in items if lst.active]
        return items

    def create(
        self, asset: AssetRef, kind: AssetKind, amount: int, price: int, seller: str
    ) -> Listing:
        if price <= 0:
            raise InvalidPriceError(price)
        kind.validate_amount(amount)

        self._vault.hold_from_seller(asset, kind, amount, seller)

        # Id allocated only once custody is confirmed
        listing_id = self.next_listing_id
        self._counter["next_id"] = listing_id + 1
        listing = Listing(
            id=listing_id, seller=seller, asset=asset, kind=kind, amount=amount, price=price
        )
        self._listings[listing_id] = listing
        self._ledger.emit(
            Listed(
                listing_id=listing_id,
                seller=seller,
                asset=asset,
                amount=amount,
                price=price,
                kind=kind,
            )
        )
        return listing

    def cancel(self, listing_id: int, caller: str) -> Listing:
        listing = self.get(listing_id)
        if caller != listing.seller:
            raise NotSellerError(listing_id, caller)
        if not listing.active:
            raise ListingNotActiveError(listing_id)

        self._vault.release_to(listing.asset, listing.kind, listing.amount, listing.seller)

        closed = self.deactivate(listing_id)
        self._ledger.emit(Cancelled(listing_id=listing_id))
        return closed

    def deactivate(self, listing_id: int) -> Listing:
        closed = replace(self.require_active(listing_id), active=False)
        self._listings[listing_id] = closed
        return closed

    def resume_from(self, next_listing_id: int) -> None:
        """Continue id allocation after a restart; ids already issued are never reissued."""
        if next_listing_id < self.next_listing_id:
            raise ValueError(
                f"cannot move the listing counter back from {self.next_listing_id} "
                f"to {next_listing_id}"
            )
        self._counter["next_id"] = next_listing_id
