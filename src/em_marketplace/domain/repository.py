"""Repository / publisher Protocols — dependency inversion for testability.

Unit tests inject mocks conforming to these Protocols.
Infrastructure layer provides the real implementations.
"""

from collections.abc import Sequence
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.em_marketplace.domain.events import MarketplaceEvent
from src.em_marketplace.domain.models import MarketplaceConfig


class MarketplaceRepositoryProtocol(Protocol):
    async def load_config(self, db: AsyncSession) -> MarketplaceConfig | None: ...

    async def count_active_listings(self, db: AsyncSession) -> int: ...

    async def ensure_config(
        self,
        db: AsyncSession,
        owner: str,
        fee_bps: int,
        fee_recipient: str,
        next_listing_id: int,
    ) -> None: ...

    async def record_events(
        self,
        db: AsyncSession,
        events: Sequence[MarketplaceEvent],
        next_listing_id: int,
    ) -> None: ...


class EventPublisherProtocol(Protocol):
    async def publish(self, events: Sequence[MarketplaceEvent]) -> None: ...
