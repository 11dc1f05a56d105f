"""FeePolicy — platform fee rate and recipient, mutable only by the owner."""

import logging

from src.em_common.amounts import MAX_FEE_BPS, split_payment
from src.em_common.errors import FeeOutOfRangeError, NotOwnerError, NullRecipientError
from src.em_common.identity import is_null_identity
from src.em_ledger.ledger import JournaledDict, Ledger
from src.em_marketplace.domain.events import FeeRecipientUpdated, FeeUpdated

logger = logging.getLogger(__name__)


def _validate_fee_bps(fee_bps: int) -> None:
    if not (0 <= fee_bps <= MAX_FEE_BPS):
        raise FeeOutOfRangeError(fee_bps, MAX_FEE_BPS)


def _validate_recipient(recipient: str) -> None:
    if is_null_identity(recipient):
        raise NullRecipientError()


class FeePolicy:
    def __init__(self, ledger: Ledger, owner: str, fee_recipient: str, fee_bps: int) -> None:
        if is_null_identity(owner):
            raise ValueError("marketplace owner must not be the null identity")
        _validate_fee_bps(fee_bps)
        _validate_recipient(fee_recipient)
        self._ledger = ledger
        self._owner = owner
        self._state: JournaledDict[str, int | str] = ledger.mapping()
        self._state["fee_bps"] = fee_bps
        self._state["fee_recipient"] = fee_recipient

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def fee_bps(self) -> int:
        return int(self._state["fee_bps"])

    @property
    def fee_recipient(self) -> str:
        return str(self._state["fee_recipient"])

    def require_owner(self, caller: str) -> None:
        if caller != self._owner:
            raise NotOwnerError(caller)

    def split(self, price: int) -> tuple[int, int]:
        """(fee, seller_amount) for price at the current rate."""
        return split_payment(price, self.fee_bps)

    def set_fee(self, new_bps: int, caller: str) -> FeeUpdated:
        self.require_owner(caller)
        _validate_fee_bps(new_bps)
        self._state["fee_bps"] = new_bps
        event = FeeUpdated(fee_bps=new_bps)
        self._ledger.emit(event)
        return event

    def set_fee_recipient(self, new_recipient: str, caller: str) -> FeeRecipientUpdated:
        self.require_owner(caller)
        _validate_recipient(new_recipient)
        self._state["fee_recipient"] = new_recipient
        event = FeeRecipientUpdated(fee_recipient=new_recipient)
        self._ledger.emit(event)
        return event

    def restore(self, fee_bps: int, fee_recipient: str) -> None:
        """Load persisted settings at startup; no event, no owner check."""
        _validate_fee_bps(fee_bps)
        _validate_recipient(fee_recipient)
        self._state["fee_bps"] = fee_bps
        self._state["fee_recipient"] = fee_recipient
