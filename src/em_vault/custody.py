"""AssetCustodyVault — moves escrowed assets in and out of engine custody.

Dispatches on AssetKind to the matching transfer primitive:
  UNIQUE:   safe_transfer_from(operator, sender, recipient, token_id)
  FUNGIBLE: safe_transfer_from(operator, sender, recipient, token_id, amount)

The engine is always the operator. Any primitive failure propagates and
aborts the enclosing ledger transaction.
"""

from typing import Any

from src.em_common.enums import AssetKind
from src.em_common.errors import AssetKindMismatchError, InsufficientCustodyError
from src.em_ledger.ledger import JournaledDict, Ledger
from src.em_vault.models import AssetRef


def _transfer_unique(
    contract: Any, operator: str, sender: str, recipient: str, token_id: int, amount: int
) -> None:
    contract.safe_transfer_from(operator, sender, recipient, token_id)


def _transfer_fungible(
    contract: Any, operator: str, sender: str, recipient: str, token_id: int, amount: int
) -> None:
    contract.safe_transfer_from(operator, sender, recipient, token_id, amount)


_TRANSFERS = {
    AssetKind.UNIQUE: _transfer_unique,
    AssetKind.FUNGIBLE: _transfer_fungible,
}


class AssetCustodyVault:
    def __init__(self, ledger: Ledger, custodian: str) -> None:
        self._ledger = ledger
        self._custodian = custodian
        self._held: JournaledDict[AssetRef, int] = ledger.mapping()

    def held(self, asset: AssetRef) -> int:
        """Quantity of asset currently escrowed by the engine."""
        return self._held.get(asset, 0)

    def hold_from_seller(self, asset: AssetRef, kind: AssetKind, amount: int, seller: str) -> None:
        self._transfer(asset, kind, amount, seller, self._custodian)
        self._held[asset] = self.held(asset) + amount

    def release_to(self, asset: AssetRef, kind: AssetKind, amount: int, recipient: str) -> None:
        held = self.held(asset)
        if held < amount:
            raise InsufficientCustodyError(
                f"vault holds {held} of {asset.contract_id}#{asset.token_id}, "
                f"cannot release {amount}"
            )
        # Decrement first: a receiver hook must not observe stale custody
        self._held[asset] = held - amount
        self._transfer(asset, kind, amount, self._custodian, recipient)

    def _transfer(
        self, asset: AssetRef, kind: AssetKind, amount: int, sender: str, recipient: str
    ) -> None:
        contract = self._ledger.contract(asset.contract_id)
        if getattr(contract, "kind", None) is not kind:
            raise AssetKindMismatchError(asset.contract_id, kind.value)
        _TRANSFERS[kind](contract, self._custodian, sender, recipient, asset.token_id, amount)
