"""MarketplaceApplicationService — async composition layer over the engine.

One asyncio.Lock per engine serializes concurrent callers, so one operation
finalizes before the next begins. Each operation's events are projected into
PostgreSQL inside the same ledger transaction: if the DB write or commit
fails, the in-memory operation is rolled back too. Queries take the same
lock, so they never observe an operation that is still being persisted.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from src.em_common.enums import AssetKind
from src.em_common.errors import InternalError
from src.em_marketplace.application.schemas import (
    BatchPurchaseResponse,
    CreateListingRequest,
    FeePolicyResponse,
    ListingListResponse,
    ListingResponse,
    PurchaseResponse,
)
from src.em_marketplace.domain.events import MarketplaceEvent
from src.em_marketplace.domain.repository import (
    EventPublisherProtocol,
    MarketplaceRepositoryProtocol,
)
from src.em_marketplace.engine import Marketplace
from src.em_marketplace.infrastructure.event_publisher import RedisEventPublisher
from src.em_marketplace.infrastructure.persistence import MarketplaceRepository
from src.em_vault.models import AssetRef

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MarketplaceApplicationService:
    def __init__(
        self,
        marketplace: Marketplace,
        repo: MarketplaceRepositoryProtocol | None = None,
        publisher: EventPublisherProtocol | None = None,
    ) -> None:
        self._marketplace = marketplace
        self._repo: MarketplaceRepositoryProtocol = repo or MarketplaceRepository(
            marketplace.address
        )
        self._publisher: EventPublisherProtocol = publisher or RedisEventPublisher()
        self._lock = asyncio.Lock()

    @property
    def marketplace(self) -> Marketplace:
        return self._marketplace

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def create_listing(
        self, db: AsyncSession, seller: str, req: CreateListingRequest
    ) -> ListingResponse:
        asset = AssetRef(contract_id=req.contract_id, token_id=req.token_id)
        listing = await self._execute(
            db,
            lambda: self._marketplace.create(
                asset, AssetKind(req.kind), req.amount, req.price, seller
            ),
        )
        return ListingResponse.from_domain(listing)

    async def cancel_listing(
        self, db: AsyncSession, caller: str, listing_id: int
    ) -> ListingResponse:
        listing = await self._execute(db, lambda: self._marketplace.cancel(listing_id, caller))
        return ListingResponse.from_domain(listing)

    async def purchase(
        self, db: AsyncSession, buyer: str, listing_id: int, paid_amount: int
    ) -> PurchaseResponse:
        event = await self._execute(
            db, lambda: self._marketplace.settle(listing_id, buyer, paid_amount)
        )
        return PurchaseResponse.from_event(event)

    async def purchase_batch(
        self, db: AsyncSession, buyer: str, listing_ids: list[int], paid_amount: int
    ) -> BatchPurchaseResponse:
        event = await self._execute(
            db, lambda: self._marketplace.settle_batch(listing_ids, buyer, paid_amount)
        )
        return BatchPurchaseResponse.from_event(event)

    async def set_fee(self, db: AsyncSession, caller: str, fee_bps: int) -> FeePolicyResponse:
        await self._execute(db, lambda: self._marketplace.set_fee(fee_bps, caller))
        return await self.get_fee_policy()

    async def set_fee_recipient(
        self, db: AsyncSession, caller: str, fee_recipient: str
    ) -> FeePolicyResponse:
        await self._execute(
            db, lambda: self._marketplace.set_fee_recipient(fee_recipient, caller)
        )
        return await self.get_fee_policy()

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def resume(self, db: AsyncSession) -> None:
        """Align the fresh engine with the persisted config row.

        First start writes the row. Later starts continue the listing counter
        and fee settings from it, so ids are never reissued and fee changes
        survive a restart. A row owned by a different owner refuses to start.
        """
        async with self._lock:
            config = await self._repo.load_config(db)
            if config is None:
                await self._repo.ensure_config(
                    db,
                    owner=self._marketplace.owner,
                    fee_bps=self._marketplace.fee_bps,
                    fee_recipient=self._marketplace.fee_recipient,
                    next_listing_id=self._marketplace.next_listing_id,
                )
                await db.commit()
                logger.info("Marketplace %s config row created", self._marketplace.address)
                return

            if config.owner != self._marketplace.owner:
                raise InternalError(
                    f"persisted owner {config.owner} of {config.address} does not match "
                    f"configured owner {self._marketplace.owner}"
                )
            self._marketplace.restore(
                config.next_listing_id, config.fee_bps, config.fee_recipient
            )
            stale = await self._repo.count_active_listings(db)
            if stale:
                # Custody lives in the ledger, which starts fresh on every boot
                logger.warning(
                    "%d listings were active at last shutdown and are not restored", stale
                )

    # ------------------------------------------------------------------
    # Queries (read under the lock: only committed state is visible)
    # ------------------------------------------------------------------

    async def get_listing(self, listing_id: int) -> ListingResponse:
        async with self._lock:
            return ListingResponse.from_domain(self._marketplace.get_listing(listing_id))

    async def list_listings(self, active_only: bool) -> ListingListResponse:
        async with self._lock:
            return ListingListResponse(
                items=[
                    ListingResponse.from_domain(lst)
                    for lst in self._marketplace.listings(active_only)
                ],
                next_listing_id=self._marketplace.next_listing_id,
            )

    async def get_fee_policy(self) -> FeePolicyResponse:
        async with self._lock:
            return FeePolicyResponse(
                owner=self._marketplace.owner,
                fee_bps=self._marketplace.fee_bps,
                fee_recipient=self._marketplace.fee_recipient,
            )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _execute(self, db: AsyncSession, operation: Callable[[], T]) -> T:
        async with self._lock:
            ledger = self._marketplace.ledger
            start = ledger.event_count
            try:
                with ledger.atomic():
                    result = operation()
                    events = [
                        e for e in ledger.events_since(start)
                        if isinstance(e, MarketplaceEvent)
                    ]
                    await self._repo.record_events(db, events, self._marketplace.next_listing_id)
                    await db.commit()
            except Exception:
                await db.rollback()
                raise
            # marketplace_events now holds them durably
            ledger.drain_events()
        await self._publish(events)
        return result

    async def _publish(self, events: list[MarketplaceEvent]) -> None:
        try:
            await self._publisher.publish(events)
        except Exception:
            # Already committed; subscribers can replay from marketplace_events
            logger.exception("Publishing %d committed events failed", len(events))
