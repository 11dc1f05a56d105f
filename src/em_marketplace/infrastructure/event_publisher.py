"""Redis pub/sub fan-out of committed marketplace events.

Publishing happens after the DB commit; a subscriber that misses a message
can replay from the marketplace_events table.
"""

import json
import logging
from collections.abc import Sequence

from config.settings import settings
from src.em_common.redis_client import get_redis
from src.em_marketplace.domain.events import MarketplaceEvent

logger = logging.getLogger(__name__)


class RedisEventPublisher:
    def __init__(self, channel: str | None = None) -> None:
        self._channel = channel or settings.EVENTS_CHANNEL

    async def publish(self, events: Sequence[MarketplaceEvent]) -> None:
        redis = await get_redis()
        for event in events:
            await redis.publish(self._channel, json.dumps(event.to_payload()))
