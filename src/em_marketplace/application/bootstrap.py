"""Process-wide engine wiring from settings.

The marketplace lives for the whole process; get_marketplace_service is the
FastAPI dependency (tests override it with an engine built on a test ledger).
"""

import logging

from config.settings import settings
from src.em_ledger.genesis import apply_genesis, load_genesis
from src.em_ledger.ledger import Ledger
from src.em_marketplace.application.service import MarketplaceApplicationService
from src.em_marketplace.engine import Marketplace

logger = logging.getLogger(__name__)

_service: MarketplaceApplicationService | None = None


def build_marketplace() -> Marketplace:
    ledger = Ledger()
    if settings.GENESIS_PATH:
        apply_genesis(ledger, load_genesis(settings.GENESIS_PATH))
    marketplace = Marketplace(
        ledger,
        address=settings.MARKETPLACE_ADDRESS,
        owner=settings.MARKETPLACE_OWNER,
        fee_recipient=settings.FEE_RECIPIENT,
        fee_bps=settings.FEE_BPS,
    )
    logger.info(
        "Marketplace %s ready: owner=%s fee_bps=%d",
        marketplace.address, marketplace.owner, marketplace.fee_bps,
    )
    return marketplace


def get_marketplace_service() -> MarketplaceApplicationService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = MarketplaceApplicationService(build_marketplace())
    return _service
