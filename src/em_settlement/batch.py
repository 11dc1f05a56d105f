"""BatchPurchaseCoordinator — all-or-nothing settlement of several listings.

Phase 1 validates every id against current state and sums prices without
side effects. Phase 2 replays SettlementEngine.settle per id with that
listing's own price. Duplicate ids pass phase 1 but the second occurrence
hits an inactive listing in phase 2, failing the whole batch.
"""

from collections.abc import Sequence

from src.em_common.errors import EmptyBatchError, PaymentMismatchError
from src.em_ledger.ledger import Ledger
from src.em_listing.registry import ListingRegistry
from src.em_marketplace.domain.events import BatchBought
from src.em_settlement.engine import SettlementEngine


class BatchPurchaseCoordinator:
    def __init__(
        self, ledger: Ledger, registry: ListingRegistry, engine: SettlementEngine
    ) -> None:
        self._ledger = ledger
        self._registry = registry
        self._engine = engine

    def quote(self, listing_ids: Sequence[int]) -> int:
        """Phase 1: total price; raises StateError on any missing or inactive listing."""
        if not listing_ids:
            raise EmptyBatchError()
        return sum(self._registry.require_active(lid).price for lid in listing_ids)

    def check(self, listing_ids: Sequence[int], paid_amount: int) -> int:
        """Phase 1 plus the exact-payment rule; returns the total. No value moves."""
        total = self.quote(listing_ids)
        if paid_amount != total:
            raise PaymentMismatchError(total, paid_amount)
        return total

    def settle_batch(
        self, listing_ids: Sequence[int], buyer: str, paid_amount: int
    ) -> BatchBought:
        total = self.check(listing_ids, paid_amount)

        for listing_id in listing_ids:
            price = self._registry.get(listing_id).price
            self._engine.settle(listing_id, buyer, price)

        event = BatchBought(buyer=buyer, listing_ids=tuple(listing_ids), total_paid=total)
        self._ledger.emit(event)
        return event
