"""Unit tests for fee math and the owner-only fee setters."""

import pytest

from src.em_common.amounts import calc_fee, split_payment
from src.em_common.errors import (
    AuthorizationError,
    FeeOutOfRangeError,
    NotOwnerError,
    NullRecipientError,
    ValidationError,
)
from src.em_common.identity import NULL_IDENTITY
from src.em_fee.policy import FeePolicy
from src.em_ledger.ledger import Ledger
from src.em_marketplace.domain.events import FeeRecipientUpdated, FeeUpdated
from src.em_marketplace.engine import Marketplace

OWNER = "owner"


class TestFeeMath:
    def test_floor_division(self) -> None:
        # 399 * 250 / 10000 = 9.975 -> 9
        assert calc_fee(399, 250) == 9

    def test_scenario_a_split(self) -> None:
        assert split_payment(1_000_000, 250) == (25_000, 975_000)

    def test_split_always_sums_to_price(self) -> None:
        for price in (1, 7, 399, 10_001, 123_456_789):
            fee, seller_amount = split_payment(price, 1000)
            assert fee + seller_amount == price
            assert fee <= price

    def test_zero_rate(self) -> None:
        assert split_payment(500, 0) == (0, 500)


class TestFeePolicyInit:
    def test_rejects_fee_above_cap(self) -> None:
        with pytest.raises(FeeOutOfRangeError):
            FeePolicy(Ledger(), OWNER, "treasury", 1001)

    def test_rejects_null_recipient(self) -> None:
        with pytest.raises(NullRecipientError):
            FeePolicy(Ledger(), OWNER, NULL_IDENTITY, 250)

    def test_rejects_null_owner(self) -> None:
        with pytest.raises(ValueError):
            FeePolicy(Ledger(), "", "treasury", 250)


class TestSetFee:
    def test_above_cap_is_validation_error(self, marketplace: Marketplace) -> None:
        with pytest.raises(ValidationError):
            marketplace.set_fee(1001, OWNER)
        assert marketplace.fee_bps == 250

    def test_cap_is_inclusive(self, marketplace: Marketplace) -> None:
        event = marketplace.set_fee(1000, OWNER)
        assert event == FeeUpdated(fee_bps=1000)
        assert marketplace.fee_bps == 1000

    def test_negative_rejected(self, marketplace: Marketplace) -> None:
        with pytest.raises(FeeOutOfRangeError):
            marketplace.set_fee(-1, OWNER)

    @pytest.mark.parametrize("new_bps", [0, 250, 1000, 1001])
    def test_non_owner_always_authorization_error(
        self, marketplace: Marketplace, new_bps: int
    ) -> None:
        with pytest.raises(AuthorizationError):
            marketplace.set_fee(new_bps, "seller-1")
        assert marketplace.fee_bps == 250

    def test_emits_event(self, marketplace: Marketplace) -> None:
        marketplace.set_fee(0, OWNER)
        assert marketplace.ledger.events[-1] == FeeUpdated(fee_bps=0)


class TestSetFeeRecipient:
    def test_owner_updates_recipient(self, marketplace: Marketplace) -> None:
        event = marketplace.set_fee_recipient("new-treasury", OWNER)
        assert event == FeeRecipientUpdated(fee_recipient="new-treasury")
        assert marketplace.fee_recipient == "new-treasury"

    @pytest.mark.parametrize("recipient", ["", NULL_IDENTITY])
    def test_null_recipient_rejected(self, marketplace: Marketplace, recipient: str) -> None:
        with pytest.raises(NullRecipientError):
            marketplace.set_fee_recipient(recipient, OWNER)
        assert marketplace.fee_recipient == "treasury"

    def test_non_owner_rejected(self, marketplace: Marketplace) -> None:
        with pytest.raises(NotOwnerError):
            marketplace.set_fee_recipient("mallory", "mallory")
        assert marketplace.fee_recipient == "treasury"
