"""Global enums — values must match DB CHECK constraints exactly."""

from enum import Enum

from src.em_common.errors import InvalidAmountError


class AssetKind(str, Enum):
    """Closed set of escrowable asset kinds; each carries its own quantity rule."""

    UNIQUE = "UNIQUE"
    FUNGIBLE = "FUNGIBLE"

    def validate_amount(self, amount: int) -> None:
        if amount <= 0:
            raise InvalidAmountError(f"amount must be positive, got {amount}")
        if self is AssetKind.UNIQUE and amount != 1:
            raise InvalidAmountError(f"UNIQUE assets are listed one at a time, got amount {amount}")


class EventType(str, Enum):
    LISTED = "LISTED"
    CANCELLED = "CANCELLED"
    BOUGHT = "BOUGHT"
    BATCH_BOUGHT = "BATCH_BOUGHT"
    FEE_UPDATED = "FEE_UPDATED"
    FEE_RECIPIENT_UPDATED = "FEE_RECIPIENT_UPDATED"
