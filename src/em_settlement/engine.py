"""SettlementEngine — single-listing purchase.

Order per settlement:
  1. listing must be active            (StateError)
  2. paid_amount must equal price      (PaymentError)
  3. fee = floor(price * fee_bps / 10000), seller_amount = price - fee
  4. push fee to recipient, then seller_amount to seller
  5. release asset to buyer
  6. deactivate listing, emit Bought

Steps 1-2 are check(); the facade runs it before the payment is moved in, so
a buyer who cannot pay still sees the precondition error first.

Steps 4-5 call into externally controlled identities while the listing is
still active. That is only safe under the caller's ReentrancyGuard; this
class must never be reachable except through a guarded entry point.
"""

import logging

from src.em_common.errors import PaymentMismatchError
from src.em_fee.policy import FeePolicy
from src.em_ledger.ledger import Ledger
from src.em_listing.domain.models import Listing
from src.em_listing.registry import ListingRegistry
from src.em_marketplace.domain.events import Bought
from src.em_vault.custody import AssetCustodyVault

logger = logging.getLogger(__name__)


class SettlementEngine:
    def __init__(
        self,
        ledger: Ledger,
        registry: ListingRegistry,
        fee_policy: FeePolicy,
        vault: AssetCustodyVault,
        custodian: str,
    ) -> None:
        self._ledger = ledger
        self._registry = registry
        self._fee_policy = fee_policy
        self._vault = vault
        self._custodian = custodian

    def check(self, listing_id: int, paid_amount: int) -> Listing:
        """Preconditions of settle; evaluated before any value moves."""
        listing = self._registry.require_active(listing_id)
        if paid_amount != listing.price:
            raise PaymentMismatchError(listing.price, paid_amount)
        return listing

    def settle(self, listing_id: int, buyer: str, paid_amount: int) -> Bought:
        """Distribute paid_amount (already held by the custodian) and deliver the asset."""
        listing = self.check(listing_id, paid_amount)

        fee, seller_amount = self._fee_policy.split(listing.price)
        self._push(self._fee_policy.fee_recipient, fee)
        self._push(listing.seller, seller_amount)

        self._vault.release_to(listing.asset, listing.kind, listing.amount, buyer)

        self._registry.deactivate(listing_id)
        event = Bought(listing_id=listing_id, buyer=buyer, amount_paid=paid_amount)
        self._ledger.emit(event)
        logger.debug(
            "Listing %d settled: fee=%d seller_amount=%d buyer=%s",
            listing_id, fee, seller_amount, buyer,
        )
        return event

    def _push(self, recipient: str, amount: int) -> None:
        if amount == 0:
            return
        self._ledger.transfer_value(self._custodian, recipient, amount)
