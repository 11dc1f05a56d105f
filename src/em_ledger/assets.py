"""Reference asset primitives living on the ledger.

Stand-ins for the external unique-asset and fungible-asset contracts: the
marketplace only relies on their safe-transfer primitives, operator approval
and receiver-hook behaviour.
"""

from src.em_common.enums import AssetKind
from src.em_common.errors import InsufficientFundsError, TransferNotAuthorizedError
from src.em_common.identity import is_null_identity
from src.em_ledger.ledger import JournaledDict, Ledger


class _ApprovalMixin:
    _ledger: Ledger
    _operators: JournaledDict[tuple[str, str], bool]

    def set_approval_for_all(self, owner: str, operator: str, approved: bool) -> None:
        self._operators[(owner, operator)] = approved

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return self._operators.get((owner, operator), False)

    def _check_transfer(self, operator: str, sender: str, recipient: str) -> None:
        if operator != sender and not self.is_approved_for_all(sender, operator):
            raise TransferNotAuthorizedError(
                f"{operator} is not approved to move assets of {sender}"
            )
        if is_null_identity(recipient):
            raise TransferNotAuthorizedError("cannot transfer to the null identity")


class UniqueAssetContract(_ApprovalMixin):
    """Indivisible items: each token id has exactly one owner."""

    kind = AssetKind.UNIQUE

    def __init__(self, ledger: Ledger, contract_id: str) -> None:
        self._ledger = ledger
        self.contract_id = contract_id
        self._owners: JournaledDict[int, str] = ledger.mapping()
        self._operators = ledger.mapping()

    def mint(self, to: str, token_id: int) -> None:
        if token_id in self._owners:
            raise ValueError(f"token {token_id} already minted in {self.contract_id}")
        self._owners[token_id] = to

    def owner_of(self, token_id: int) -> str | None:
        return self._owners.get(token_id)

    def balance_of(self, holder: str, token_id: int) -> int:
        return 1 if self._owners.get(token_id) == holder else 0

    def safe_transfer_from(self, operator: str, sender: str, recipient: str, token_id: int) -> None:
        self._check_transfer(operator, sender, recipient)
        if self._owners.get(token_id) != sender:
            raise TransferNotAuthorizedError(
                f"{sender} does not own token {token_id} of {self.contract_id}"
            )
        self._owners[token_id] = recipient
        self._ledger.notify_asset_received(
            recipient, operator, sender, self.contract_id, token_id, 1
        )


class FungibleAssetContract(_ApprovalMixin):
    """Divisible-by-id items: balances keyed by (token id, holder)."""

    kind = AssetKind.FUNGIBLE

    def __init__(self, ledger: Ledger, contract_id: str) -> None:
        self._ledger = ledger
        self.contract_id = contract_id
        self._balances: JournaledDict[tuple[int, str], int] = ledger.mapping()
        self._operators = ledger.mapping()

    def mint(self, to: str, token_id: int, amount: int) -> None:
        if amount <= 0:
            raise ValueError(f"mint amount must be positive, got {amount}")
        self._balances[(token_id, to)] = self.balance_of(to, token_id) + amount

    def balance_of(self, holder: str, token_id: int) -> int:
        return self._balances.get((token_id, holder), 0)

    def safe_transfer_from(
        self, operator: str, sender: str, recipient: str, token_id: int, amount: int
    ) -> None:
        self._check_transfer(operator, sender, recipient)
        available = self.balance_of(sender, token_id)
        if available < amount:
            raise InsufficientFundsError(f"{sender} (token {token_id})", amount, available)
        self._balances[(token_id, sender)] = available - amount
        self._balances[(token_id, recipient)] = self.balance_of(recipient, token_id) + amount
        self._ledger.notify_asset_received(
            recipient, operator, sender, self.contract_id, token_id, amount
        )
