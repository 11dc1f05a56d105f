"""In-process host ledger.

Holds native-value balances, the registry of asset contracts, receiver hooks
for contract identities, and the event log. Every mutation made through a
JournaledDict or the event log is recorded in the undo journal of the
innermost open ``atomic()`` frame, so a failing operation leaves no trace.
"""

import logging
from collections.abc import Callable, Iterator, MutableMapping
from contextlib import contextmanager
from typing import Any, Generic, Protocol, TypeVar

from src.em_common.errors import (
    InsufficientFundsError,
    InvalidAmountError,
    ReceiverRejectedError,
    UnknownAssetContractError,
)

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")

_MISSING: Any = object()


class AssetContract(Protocol):
    contract_id: str
    kind: Any


class JournaledDict(MutableMapping[K, V], Generic[K, V]):
    """dict whose writes are undone when the enclosing ledger transaction fails."""

    def __init__(self, ledger: "Ledger") -> None:
        self._ledger = ledger
        self._data: dict[K, V] = {}

    def __getitem__(self, key: K) -> V:
        return self._data[key]

    def __setitem__(self, key: K, value: V) -> None:
        previous = self._data.get(key, _MISSING)
        self._data[key] = value
        self._ledger.record_undo(lambda: self._restore(key, previous))

    def __delitem__(self, key: K) -> None:
        previous = self._data.pop(key)
        self._ledger.record_undo(lambda: self._restore(key, previous))

    def __iter__(self) -> Iterator[K]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def _restore(self, key: K, previous: V) -> None:
        if previous is _MISSING:
            self._data.pop(key, None)
        else:
            self._data[key] = previous


class Ledger:
    def __init__(self) -> None:
        self._frames: list[list[Callable[[], None]]] = []
        self._events: list[object] = []
        self._balances: JournaledDict[str, int] = JournaledDict(self)
        self._contracts: dict[str, AssetContract] = {}
        self._receivers: dict[str, object] = {}

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Run the block as one transaction; any exception undoes every write in it."""
        frame: list[Callable[[], None]] = []
        self._frames.append(frame)
        try:
            yield
        except Exception:
            self._frames.pop()
            for undo in reversed(frame):
                undo()
            raise
        self._frames.pop()
        if self._frames:
            # Nested success: the parent may still roll these writes back
            self._frames[-1].extend(frame)

    @property
    def in_transaction(self) -> bool:
        return bool(self._frames)

    def record_undo(self, undo: Callable[[], None]) -> None:
        # Writes outside any transaction (genesis seeding) are permanent
        if self._frames:
            self._frames[-1].append(undo)

    def mapping(self) -> JournaledDict[Any, Any]:
        return JournaledDict(self)

    # ------------------------------------------------------------------
    # Event log
    # ------------------------------------------------------------------

    def emit(self, event: object) -> None:
        self._events.append(event)
        self.record_undo(lambda: self._events.pop())

    @property
    def events(self) -> tuple[object, ...]:
        return tuple(self._events)

    @property
    def event_count(self) -> int:
        return len(self._events)

    def events_since(self, start: int) -> list[object]:
        """Events emitted after the first ``start`` entries of the log."""
        return self._events[start:]

    def drain_events(self) -> list[object]:
        """Hand over and forget the committed log once it has been persisted elsewhere."""
        if self._frames:
            raise RuntimeError("cannot drain events inside an open transaction")
        drained, self._events = self._events, []
        return drained

    # ------------------------------------------------------------------
    # Contracts and receiver hooks
    # ------------------------------------------------------------------

    def register_contract(self, contract: AssetContract) -> None:
        self._contracts[contract.contract_id] = contract

    def contract(self, contract_id: str) -> AssetContract:
        contract = self._contracts.get(contract_id)
        if contract is None:
            raise UnknownAssetContractError(contract_id)
        return contract

    def register_receiver(self, identity: str, receiver: object) -> None:
        """Mark identity as a contract whose hooks run on incoming transfers."""
        self._receivers[identity] = receiver

    def notify_asset_received(
        self,
        recipient: str,
        operator: str,
        sender: str,
        contract_id: str,
        token_id: int,
        amount: int,
    ) -> None:
        """Run the recipient's asset hook; plain identities accept everything."""
        receiver = self._receivers.get(recipient)
        if receiver is None:
            return
        hook = getattr(receiver, "on_asset_received", None)
        if hook is None:
            raise ReceiverRejectedError(recipient, "not an asset receiver")
        accepted = self._call_hook(
            recipient, hook, operator, sender, contract_id, token_id, amount
        )
        if not accepted:
            raise ReceiverRejectedError(recipient, "asset hook returned false")

    def _call_hook(self, recipient: str, hook: Callable[..., Any], *args: Any) -> Any:
        try:
            return hook(*args)
        except Exception as exc:
            logger.warning("Receiver hook of %s failed: %r", recipient, exc)
            raise ReceiverRejectedError(recipient, str(exc)) from exc

    # ------------------------------------------------------------------
    # Native value
    # ------------------------------------------------------------------

    def balance_of(self, identity: str) -> int:
        return self._balances.get(identity, 0)

    def deposit(self, identity: str, amount: int) -> None:
        """Credit new native value (genesis / faucet)."""
        if amount < 0:
            raise InvalidAmountError(f"deposit amount must be non-negative, got {amount}")
        self._balances[identity] = self.balance_of(identity) + amount

    def transfer_value(self, sender: str, recipient: str, amount: int) -> None:
        """Push native value; a contract recipient's on_value_received hook may reject it."""
        self._move_value(sender, recipient, amount)
        receiver = self._receivers.get(recipient)
        if receiver is None:
            return
        hook = getattr(receiver, "on_value_received", None)
        if hook is None:
            raise ReceiverRejectedError(recipient, "does not accept native value")
        self._call_hook(recipient, hook, sender, amount)

    def attach_value(self, sender: str, recipient: str, amount: int) -> None:
        """Move value sent along with a call into recipient; no hook runs."""
        self._move_value(sender, recipient, amount)

    def _move_value(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise InvalidAmountError(f"transfer amount must be non-negative, got {amount}")
        available = self.balance_of(sender)
        if available < amount:
            raise InsufficientFundsError(sender, amount, available)
        self._balances[sender] = available - amount
        self._balances[recipient] = self.balance_of(recipient) + amount
