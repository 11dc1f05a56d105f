"""MarketplaceRepository — projects committed marketplace events into PostgreSQL.

All statements use raw text() SQL (no ORM) and run inside the caller's
transaction; the application service commits.
"""

import json
import logging
from collections.abc import Sequence

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.em_marketplace.domain.events import (
    Bought,
    Cancelled,
    FeeRecipientUpdated,
    FeeUpdated,
    Listed,
    MarketplaceEvent,
)
from src.em_marketplace.domain.models import MarketplaceConfig

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_GET_CONFIG_SQL = text("""
    SELECT address, owner, fee_bps, fee_recipient, next_listing_id
    FROM marketplace_config
    WHERE address = :address
""")

_COUNT_ACTIVE_LISTINGS_SQL = text("""
    SELECT COUNT(*) FROM listings WHERE active = TRUE
""")

_ENSURE_CONFIG_SQL = text("""
    INSERT INTO marketplace_config
        (address, owner, fee_bps, fee_recipient, next_listing_id)
    VALUES (:address, :owner, :fee_bps, :fee_recipient, :next_listing_id)
    ON CONFLICT (address) DO NOTHING
""")

_INSERT_LISTING_SQL = text("""
    INSERT INTO listings
        (id, seller, contract_id, token_id, asset_kind, amount, price, active)
    VALUES (:id, :seller, :contract_id, :token_id, :asset_kind, :amount, :price, TRUE)
""")

_CLOSE_LISTING_SQL = text("""
    UPDATE listings
    SET active = FALSE,
        closed_reason = :closed_reason,
        buyer = CAST(:buyer AS TEXT),
        updated_at = NOW()
    WHERE id = :id AND active = TRUE
""")

_UPDATE_FEE_BPS_SQL = text("""
    UPDATE marketplace_config
    SET fee_bps = :fee_bps, updated_at = NOW()
    WHERE address = :address
""")

_UPDATE_FEE_RECIPIENT_SQL = text("""
    UPDATE marketplace_config
    SET fee_recipient = :fee_recipient, updated_at = NOW()
    WHERE address = :address
""")

_UPDATE_NEXT_ID_SQL = text("""
    UPDATE marketplace_config
    SET next_listing_id = :next_listing_id, updated_at = NOW()
    WHERE address = :address
""")

_INSERT_EVENT_SQL = text("""
    INSERT INTO marketplace_events (address, event_type, listing_id, payload)
    VALUES (:address, :event_type, :listing_id, :payload)
""")


# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------

def _row_to_config(row: object) -> MarketplaceConfig:
    return MarketplaceConfig(
        address=row.address,  # type: ignore[attr-defined]
        owner=row.owner,  # type: ignore[attr-defined]
        fee_bps=row.fee_bps,  # type: ignore[attr-defined]
        fee_recipient=row.fee_recipient,  # type: ignore[attr-defined]
        next_listing_id=row.next_listing_id,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class MarketplaceRepository:
    def __init__(self, address: str) -> None:
        self._address = address

    async def load_config(self, db: AsyncSession) -> MarketplaceConfig | None:
        result = await db.execute(_GET_CONFIG_SQL, {"address": self._address})
        row = result.fetchone()
        return _row_to_config(row) if row is not None else None

    async def count_active_listings(self, db: AsyncSession) -> int:
        result = await db.execute(_COUNT_ACTIVE_LISTINGS_SQL)
        return int(result.scalar_one())

    async def ensure_config(
        self,
        db: AsyncSession,
        owner: str,
        fee_bps: int,
        fee_recipient: str,
        next_listing_id: int,
    ) -> None:
        """Create the config row on first start; existing rows are left alone."""
        await db.execute(
            _ENSURE_CONFIG_SQL,
            {
                "address": self._address,
                "owner": owner,
                "fee_bps": fee_bps,
                "fee_recipient": fee_recipient,
                "next_listing_id": next_listing_id,
            },
        )

    async def record_events(
        self,
        db: AsyncSession,
        events: Sequence[MarketplaceEvent],
        next_listing_id: int,
    ) -> None:
        for event in events:
            await self._project(db, event)
            payload = event.to_payload()
            await db.execute(
                _INSERT_EVENT_SQL,
                {
                    "address": self._address,
                    "event_type": event.event_type.value,
                    "listing_id": payload.get("listing_id"),
                    "payload": json.dumps(payload),
                },
            )
        await db.execute(
            _UPDATE_NEXT_ID_SQL,
            {"address": self._address, "next_listing_id": next_listing_id},
        )
        logger.debug("Recorded %d marketplace events", len(events))

    async def _project(self, db: AsyncSession, event: MarketplaceEvent) -> None:
        if isinstance(event, Listed):
            await db.execute(
                _INSERT_LISTING_SQL,
                {
                    "id": event.listing_id,
                    "seller": event.seller,
                    "contract_id": event.asset.contract_id,
                    "token_id": event.asset.token_id,
                    "asset_kind": event.kind.value,
                    "amount": event.amount,
                    "price": event.price,
                },
            )
        elif isinstance(event, Cancelled):
            await db.execute(
                _CLOSE_LISTING_SQL,
                {"id": event.listing_id, "closed_reason": "CANCELLED", "buyer": None},
            )
        elif isinstance(event, Bought):
            await db.execute(
                _CLOSE_LISTING_SQL,
                {"id": event.listing_id, "closed_reason": "SOLD", "buyer": event.buyer},
            )
        elif isinstance(event, FeeUpdated):
            await db.execute(
                _UPDATE_FEE_BPS_SQL, {"address": self._address, "fee_bps": event.fee_bps}
            )
        elif isinstance(event, FeeRecipientUpdated):
            await db.execute(
                _UPDATE_FEE_RECIPIENT_SQL,
                {"address": self._address, "fee_recipient": event.fee_recipient},
            )
        # BatchBought only lands in the journal; its Bought events close the rows
