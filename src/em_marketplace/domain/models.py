"""Domain models for em_marketplace — pure dataclasses, no business logic."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MarketplaceConfig:
    """Persisted marketplace_config row; the engine resumes from it on restart."""

    address: str
    owner: str
    fee_bps: int
    fee_recipient: str
    next_listing_id: int
