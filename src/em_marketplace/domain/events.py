"""Marketplace events — emitted into the ledger log, rolled back with their operation."""

from dataclasses import asdict, dataclass
from typing import Any, ClassVar

from src.em_common.enums import AssetKind, EventType
from src.em_vault.models import AssetRef


@dataclass(frozen=True)
class MarketplaceEvent:
    event_type: ClassVar[EventType]

    def to_payload(self) -> dict[str, Any]:
        return {"event_type": self.event_type.value, **asdict(self)}


@dataclass(frozen=True)
class Listed(MarketplaceEvent):
    event_type: ClassVar[EventType] = EventType.LISTED

    listing_id: int
    seller: str
    asset: AssetRef
    amount: int
    price: int
    kind: AssetKind


@dataclass(frozen=True)
class Cancelled(MarketplaceEvent):
    event_type: ClassVar[EventType] = EventType.CANCELLED

    listing_id: int


@dataclass(frozen=True)
class Bought(MarketplaceEvent):
    event_type: ClassVar[EventType] = EventType.BOUGHT

    listing_id: int
    buyer: str
    amount_paid: int


@dataclass(frozen=True)
class BatchBought(MarketplaceEvent):
    event_type: ClassVar[EventType] = EventType.BATCH_BOUGHT

    buyer: str
    listing_ids: tuple[int, ...]
    total_paid: int


@dataclass(frozen=True)
class FeeUpdated(MarketplaceEvent):
    event_type: ClassVar[EventType] = EventType.FEE_UPDATED

    fee_bps: int


@dataclass(frozen=True)
class FeeRecipientUpdated(MarketplaceEvent):
    event_type: ClassVar[EventType] = EventType.FEE_RECIPIENT_UPDATED

    fee_recipient: str
