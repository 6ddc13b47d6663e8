from collections.abc import AsyncIterator

import pytest
from factories import SCRYFALL_URL
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from magicgest.db import upsert_card
from magicgest.db.database import Database, get_session
from magicgest.main import app
from magicgest.models.card import CardRecord
from magicgest.services.scryfall import ScryfallClient, get_scryfall_client


@pytest.fixture
async def database() -> AsyncIterator[Database]:
    """In-memory database with all tables created."""
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest.fixture
async def session(database: Database) -> AsyncIterator[AsyncSession]:
    """Session for operation tests. Nothing is committed; writes are flushed only."""
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def seed_cards(database: Database):
    """Coroutine that caches cards in a committed transaction."""

    async def _seed(*cards: CardRecord) -> list[CardRecord]:
        async with database.session() as session:
            for card in cards:
                await upsert_card(session, card)
        return list(cards)

    return _seed


@pytest.fixture
async def scryfall() -> AsyncIterator[ScryfallClient]:
    client = ScryfallClient(base_url=SCRYFALL_URL)
    yield client
    await client.aclose()


@pytest.fixture
async def client(database: Database, scryfall: ScryfallClient) -> AsyncIterator[AsyncClient]:
    """Provide an async test client with overridden database session and Scryfall client."""

    async def override_get_session() -> AsyncIterator[AsyncSession]:
        async with database.session() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_scryfall_client] = lambda: scryfall

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
