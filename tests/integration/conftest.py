"""API-test fixtures.

The app runs against an in-memory engine: the DB session and the service
dependency are overridden, so no PostgreSQL or Redis is needed. httpx's
ASGITransport does not run the lifespan, so startup never connects out.
"""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.em_common.database import get_db_session
from src.em_marketplace.application.bootstrap import get_marketplace_service
from src.em_marketplace.application.service import MarketplaceApplicationService
from src.em_marketplace.engine import Marketplace
from src.main import app


@pytest_asyncio.fixture
async def client(marketplace: Marketplace) -> AsyncGenerator[AsyncClient, None]:
    repo = MagicMock()
    repo.record_events = AsyncMock()
    publisher = MagicMock()
    publisher.publish = AsyncMock()
    service = MarketplaceApplicationService(marketplace, repo=repo, publisher=publisher)

    async def _db_session() -> AsyncGenerator[MagicMock, None]:
        session = MagicMock()
        session.commit = AsyncMock()
        session.rollback = AsyncMock()
        yield session

    app.dependency_overrides[get_db_session] = _db_session
    app.dependency_overrides[get_marketplace_service] = lambda: service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
