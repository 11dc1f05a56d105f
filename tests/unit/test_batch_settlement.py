"""Unit tests for batch settlement: all-or-nothing across several listings."""

import pytest

from src.em_common.enums import AssetKind
from src.em_common.errors import (
    EmptyBatchError,
    ListingNotActiveError,
    ListingNotFoundError,
    PaymentMismatchError,
    ReceiverRejectedError,
)
from src.em_ledger.assets import FungibleAssetContract, UniqueAssetContract
from src.em_marketplace.domain.events import BatchBought, Bought
from src.em_marketplace.engine import Marketplace
from src.em_vault.models import AssetRef

MARKET = "escrow-marketplace"
OWNER = "owner"
TREASURY = "treasury"
SELLER = "seller-1"
BUYER = "buyer-1"
BUYER_FUNDS = 5_000_000

ITEM_7 = AssetRef("items", 7)


class _RejectsValue:
    def on_value_received(self, sender: str, amount: int) -> None:
        raise RuntimeError("no thanks")


@pytest.fixture
def two_listings(marketplace: Marketplace) -> tuple[int, int]:
    first = marketplace.create(ITEM_7, AssetKind.FUNGIBLE, 10, 500_000, SELLER)
    second = marketplace.create(ITEM_7, AssetKind.FUNGIBLE, 20, 500_000, SELLER)
    return first.id, second.id


class TestScenarioB:
    def test_combined_fee_and_delivery(
        self,
        marketplace: Marketplace,
        items: FungibleAssetContract,
        two_listings: tuple[int, int],
    ) -> None:
        ledger = marketplace.ledger

        event = marketplace.settle_batch(list(two_listings), BUYER, 1_000_000)

        assert event.total_paid == 1_000_000
        assert ledger.balance_of(TREASURY) == 25_000
        assert ledger.balance_of(SELLER) == 975_000
        assert ledger.balance_of(BUYER) == BUYER_FUNDS - 1_000_000
        assert ledger.balance_of(MARKET) == 0
        assert items.balance_of(BUYER, 7) == 30
        assert items.balance_of(MARKET, 7) == 0
        assert marketplace.custody_of(ITEM_7) == 0
        assert marketplace.listings(active_only=True) == []

    def test_events_per_listing_then_batch(
        self, marketplace: Marketplace, two_listings: tuple[int, int]
    ) -> None:
        first, second = two_listings
        marketplace.settle_batch([first, second], BUYER, 1_000_000)

        assert marketplace.ledger.events[-3:] == (
            Bought(listing_id=first, buyer=BUYER, amount_paid=500_000),
            Bought(listing_id=second, buyer=BUYER, amount_paid=500_000),
            BatchBought(buyer=BUYER, listing_ids=(first, second), total_paid=1_000_000),
        )


class TestBatchAtomicity:
    def test_inactive_listing_fails_whole_batch(
        self,
        marketplace: Marketplace,
        items: FungibleAssetContract,
        two_listings: tuple[int, int],
    ) -> None:
        first, second = two_listings
        marketplace.cancel(second, SELLER)
        events_before = marketplace.ledger.events

        with pytest.raises(ListingNotActiveError):
            marketplace.settle_batch([first, second], BUYER, 1_000_000)

        assert marketplace.ledger.balance_of(BUYER) == BUYER_FUNDS
        assert marketplace.get_listing(first).active is True
        assert items.balance_of(BUYER, 7) == 0
        assert marketplace.ledger.events == events_before

    def test_unknown_listing_fails_whole_batch(
        self, marketplace: Marketplace, two_listings: tuple[int, int]
    ) -> None:
        with pytest.raises(ListingNotFoundError):
            marketplace.settle_batch([two_listings[0], 99], BUYER, 500_000)
        assert marketplace.ledger.balance_of(BUYER) == BUYER_FUNDS

    def test_duplicate_ids_fail_closed(
        self,
        marketplace: Marketplace,
        items: FungibleAssetContract,
        two_listings: tuple[int, int],
    ) -> None:
        first, _ = two_listings

        with pytest.raises(ListingNotActiveError):
            marketplace.settle_batch([first, first], BUYER, 1_000_000)

        ledger = marketplace.ledger
        assert ledger.balance_of(BUYER) == BUYER_FUNDS
        assert ledger.balance_of(TREASURY) == 0
        assert ledger.balance_of(SELLER) == 0
        assert items.balance_of(BUYER, 7) == 0
        assert marketplace.get_listing(first).active is True

    def test_late_transfer_failure_undoes_earlier_settlements(
        self,
        marketplace: Marketplace,
        punks: UniqueAssetContract,
        items: FungibleAssetContract,
    ) -> None:
        ledger = marketplace.ledger
        punk_seller = "punk-seller"
        item_listing = marketplace.create(ITEM_7, AssetKind.FUNGIBLE, 5, 1_000, SELLER)
        ledger.register_receiver(punk_seller, _RejectsValue())
        # the contract seller can list, but refuses the payout
        punks.mint(punk_seller, 99)
        punks.set_approval_for_all(punk_seller, MARKET, True)
        punk_listing = marketplace.create(
            AssetRef("punks", 99), AssetKind.UNIQUE, 1, 2_000, punk_seller
        )

        with pytest.raises(ReceiverRejectedError):
            marketplace.settle_batch([item_listing.id, punk_listing.id], BUYER, 3_000)

        assert ledger.balance_of(BUYER) == BUYER_FUNDS
        assert ledger.balance_of(SELLER) == 0
        assert items.balance_of(BUYER, 7) == 0
        assert punks.owner_of(99) == MARKET
        assert marketplace.get_listing(item_listing.id).active is True


class TestBatchValidation:
    @pytest.mark.parametrize("paid", [999_999, 1_000_001, 500_000])
    def test_payment_must_equal_total(
        self, marketplace: Marketplace, two_listings: tuple[int, int], paid: int
    ) -> None:
        with pytest.raises(PaymentMismatchError):
            marketplace.settle_batch(list(two_listings), BUYER, paid)
        assert marketplace.ledger.balance_of(BUYER) == BUYER_FUNDS

    def test_empty_batch_rejected(self, marketplace: Marketplace) -> None:
        with pytest.raises(EmptyBatchError):
            marketplace.settle_batch([], BUYER, 0)
        assert marketplace.ledger.balance_of(MARKET) == 0


class TestPreconditionsBeforePayment:
    def test_inactive_listing_reported_before_funds(
        self, marketplace: Marketplace, two_listings: tuple[int, int]
    ) -> None:
        first, second = two_listings
        marketplace.cancel(second, SELLER)

        with pytest.raises(ListingNotActiveError):
            marketplace.settle_batch([first, second], "poor-buyer", 1_000_000)

    def test_payment_mismatch_reported_before_funds(
        self, marketplace: Marketplace, two_listings: tuple[int, int]
    ) -> None:
        with pytest.raises(PaymentMismatchError):
            marketplace.settle_batch(list(two_listings), "poor-buyer", 999_999)

    def test_empty_batch_reported_before_funds(self, marketplace: Marketplace) -> None:
        with pytest.raises(EmptyBatchError):
            marketplace.settle_batch([], "poor-buyer", 1)
