"""Shared test fixtures.

Required settings are injected before any src/config import.
"""

import os

os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")
os.environ.setdefault("MARKETPLACE_OWNER", "owner")
os.environ.setdefault("FEE_RECIPIENT", "treasury")

import pytest  # noqa: E402

from src.em_ledger.assets import FungibleAssetContract, UniqueAssetContract  # noqa: E402
from src.em_ledger.ledger import Ledger  # noqa: E402
from src.em_marketplace.engine import Marketplace  # noqa: E402

MARKET = "escrow-marketplace"
OWNER = "owner"
TREASURY = "treasury"
SELLER = "seller-1"
BUYER = "buyer-1"
BUYER_FUNDS = 5_000_000


@pytest.fixture
def ledger() -> Ledger:
    return Ledger()


@pytest.fixture
def punks(ledger: Ledger) -> UniqueAssetContract:
    """Unique-asset contract; SELLER owns #42 and #43 and approved the marketplace."""
    contract = UniqueAssetContract(ledger, "punks")
    contract.mint(SELLER, 42)
    contract.mint(SELLER, 43)
    contract.set_approval_for_all(SELLER, MARKET, True)
    ledger.register_contract(contract)
    return contract


@pytest.fixture
def items(ledger: Ledger) -> FungibleAssetContract:
    """Fungible-asset contract; SELLER holds 100 of token 7 and approved the marketplace."""
    contract = FungibleAssetContract(ledger, "items")
    contract.mint(SELLER, 7, 100)
    contract.set_approval_for_all(SELLER, MARKET, True)
    ledger.register_contract(contract)
    return contract


@pytest.fixture
def marketplace(
    ledger: Ledger, punks: UniqueAssetContract, items: FungibleAssetContract
) -> Marketplace:
    ledger.deposit(BUYER, BUYER_FUNDS)
    return Marketplace(ledger, address=MARKET, owner=OWNER, fee_recipient=TREASURY, fee_bps=250)
