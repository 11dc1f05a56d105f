"""Marketplace — the escrow engine's guarded entry points.

Every mutating call runs under the ReentrancyGuard and inside one ledger
transaction: it commits all value moves, asset moves, listing changes and
events, or none of them. Callbacks triggered by outgoing transfers that try
to call back in get ReentrancyError.
"""

import logging
from collections.abc import Sequence

from src.em_common.enums import AssetKind
from src.em_fee.policy import FeePolicy
from src.em_ledger.ledger import Ledger
from src.em_listing.domain.models import Listing
from src.em_listing.registry import ListingRegistry
from src.em_marketplace.domain.events import (
    BatchBought,
    Bought,
    FeeRecipientUpdated,
    FeeUpdated,
)
from src.em_marketplace.guard import ReentrancyGuard
from src.em_settlement.batch import BatchPurchaseCoordinator
from src.em_settlement.engine import SettlementEngine
from src.em_vault.custody import AssetCustodyVault
from src.em_vault.models import AssetRef

logger = logging.getLogger(__name__)


class Marketplace:
    def __init__(
        self,
        ledger: Ledger,
        address: str,
        owner: str,
        fee_recipient: str,
        fee_bps: int = 0,
    ) -> None:
        self.ledger = ledger
        self.address = address
        self._guard = ReentrancyGuard()
        self._vault = AssetCustodyVault(ledger, address)
        self._fees = FeePolicy(ledger, owner, fee_recipient, fee_bps)
        self._registry = ListingRegistry(ledger, self._vault)
        self._settlement = SettlementEngine(
            ledger, self._registry, self._fees, self._vault, address
        )
        self._batch = BatchPurchaseCoordinator(ledger, self._registry, self._settlement)
        ledger.register_receiver(address, self)

    # ------------------------------------------------------------------
    # Receiver hooks
    # ------------------------------------------------------------------

    def on_asset_received(
        self, operator: str, sender: str, contract_id: str, token_id: int, amount: int
    ) -> bool:
        # Only escrow deposits the engine itself pulled are accepted
        return operator == self.address

    # No on_value_received: plain value sends to the engine are rejected;
    # payments arrive only attached to settle / settle_batch.

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def create(
        self, asset: AssetRef, kind: AssetKind, amount: int, price: int, seller: str
    ) -> Listing:
        with self._guard, self.ledger.atomic():
            listing = self._registry.create(asset, kind, amount, price, seller)
        logger.info(
            "Listing %d created: seller=%s asset=%s#%d kind=%s amount=%d price=%d",
            listing.id, seller, asset.contract_id, asset.token_id, kind.value, amount, price,
        )
        return listing

    def cancel(self, listing_id: int, caller: str) -> Listing:
        with self._guard, self.ledger.atomic():
            listing = self._registry.cancel(listing_id, caller)
        logger.info("Listing %d cancelled by seller %s", listing_id, caller)
        return listing

    def settle(self, listing_id: int, buyer: str, paid_amount: int) -> Bought:
        with self._guard, self.ledger.atomic():
            self._settlement.check(listing_id, paid_amount)
            self.ledger.attach_value(buyer, self.address, paid_amount)
            event = self._settlement.settle(listing_id, buyer, paid_amount)
        logger.info("Listing %d bought by %s for %d", listing_id, buyer, paid_amount)
        return event

    def settle_batch(
        self, listing_ids: Sequence[int], buyer: str, paid_amount: int
    ) -> BatchBought:
        with self._guard, self.ledger.atomic():
            self._batch.check(listing_ids, paid_amount)
            self.ledger.attach_value(buyer, self.address, paid_amount)
            event = self._batch.settle_batch(listing_ids, buyer, paid_amount)
        logger.info(
            "Batch of %d listings bought by %s for %d", len(listing_ids), buyer, paid_amount
        )
        return event

    def set_fee(self, new_bps: int, caller: str) -> FeeUpdated:
        with self._guard, self.ledger.atomic():
            event = self._fees.set_fee(new_bps, caller)
        logger.info("Fee updated to %d bps", new_bps)
        return event

    def set_fee_recipient(self, new_recipient: str, caller: str) -> FeeRecipientUpdated:
        with self._guard, self.ledger.atomic():
            event = self._fees.set_fee_recipient(new_recipient, caller)
        logger.info("Fee recipient updated to %s", new_recipient)
        return event

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def get_listing(self, listing_id: int) -> Listing:
        return self._registry.get(listing_id)

    def listings(self, active_only: bool = False) -> list[Listing]:
        return self._registry.listings(active_only)

    @property
    def next_listing_id(self) -> int:
        return self._registry.next_listing_id

    @property
    def owner(self) -> str:
        return self._fees.owner

    @property
    def fee_bps(self) -> int:
        return self._fees.fee_bps

    @property
    def fee_recipient(self) -> str:
        return self._fees.fee_recipient

    def quote(self, price: int) -> tuple[int, int]:
        """(fee, seller_amount) a sale at price would pay out right now."""
        return self._fees.split(price)

    def custody_of(self, asset: AssetRef) -> int:
        return self._vault.held(asset)

    # ------------------------------------------------------------------
    # Recovery
    # ------------------------------------------------------------------

    def restore(self, next_listing_id: int, fee_bps: int, fee_recipient: str) -> None:
        """Resume from persisted config. Runs before serving, outside any transaction."""
        if self.ledger.in_transaction or self._guard.entered:
            raise RuntimeError("restore must run before any marketplace operation")
        self._registry.resume_from(next_listing_id)
        self._fees.restore(fee_bps, fee_recipient)
        logger.info(
            "Marketplace %s restored: next_listing_id=%d fee_bps=%d fee_recipient=%s",
            self.address, next_listing_id, fee_bps, fee_recipient,
        )
