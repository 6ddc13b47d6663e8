"""
Card catalog API endpoints.

Search and lookups go to Scryfall; every card returned is written to the
local cache before it is relayed.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from magicgest.db import card_to_model, get_card, search_cached_cards, upsert_card
from magicgest.db.database import get_session
from magicgest.models.card import CardRecord, sort_colors
from magicgest.parsers.scryfall import parse_card
from magicgest.services.scryfall import ScryfallClient, get_scryfall_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cards", tags=["cards"])


class CardResponse(BaseModel):
    """A cached card as returned by every endpoint that embeds one."""

    id: str
    name: str
    set_code: str | None = None
    set_name: str | None = None
    collector_number: str | None = None
    rarity: str = "common"
    image_uri: str | None = None
    mana_cost: str | None = None
    type_line: str = ""
    oracle_text: str | None = None
    colors: list[str] = Field(default_factory=list)
    cmc: float = 0.0
    prices: dict[str, str | None] = Field(default_factory=dict)
    scryfall_uri: str | None = None

    @classmethod
    def from_record(cls, card: CardRecord) -> "CardResponse":
        return cls(
            id=card.id,
            name=card.name,
            set_code=card.set_code,
            set_name=card.set_name,
            collector_number=card.collector_number,
            rarity=card.rarity,
            image_uri=card.image_uri,
            mana_cost=card.mana_cost,
            type_line=card.type_line,
            oracle_text=card.oracle_text,
            colors=sort_colors(card.colors),
            cmc=card.cmc,
            prices={k: None if v is None else str(v) for k, v in card.prices.items()},
            scryfall_uri=card.scryfall_uri,
        )


class SearchResponse(BaseModel):
    """One page of search results."""

    cards: list[CardResponse]
    has_more: bool = False
    total_cards: int = 0


@router.get("/search", response_model=SearchResponse)
async def search_cards(
    session: Annotated[AsyncSession, Depends(get_session)],
    scryfall: Annotated[ScryfallClient, Depends(get_scryfall_client)],
    q: str | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
) -> SearchResponse:
    """
    Search Scryfall.

    Uses Scryfall query syntax. Every card in the page is cached locally.
    """
    if not q or not q.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Query parameter required",
        )

    result = await scryfall.search(q, page=page)

    cards: list[CardResponse] = []
    for raw in result.cards:
        try:
            record = parse_card(raw)
        except ValueError as e:
            logger.warning("Skipping malformed Scryfall card: %s", e)
            continue
        await upsert_card(session, record)
        cards.append(CardResponse.from_record(record))

    return SearchResponse(cards=cards, has_more=result.has_more, total_cards=result.total_cards)


@router.get("/random/card", response_model=CardResponse)
async def random_card(
    session: Annotated[AsyncSession, Depends(get_session)],
    scryfall: Annotated[ScryfallClient, Depends(get_scryfall_client)],
) -> CardResponse:
    """Fetch a random card from Scryfall and cache it."""
    record = parse_card(await scryfall.random_card())
    await upsert_card(session, record)
    return CardResponse.from_record(record)


@router.get("", response_model=list[CardResponse])
async def list_cached_cards(
    session: Annotated[AsyncSession, Depends(get_session)],
    name: str | None = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> list[CardResponse]:
    """Cards already in the local cache, optionally filtered by name."""
    cards = await search_cached_cards(session, name=name, limit=limit)
    return [CardResponse.from_record(c) for c in cards]


@router.get("/{card_id}", response_model=CardResponse)
async def get_card_by_id(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    scryfall: Annotated[ScryfallClient, Depends(get_scryfall_client)],
    refresh: bool = False,
) -> CardResponse:
    """
    Get a card by Scryfall id.

    Served from the cache when present. Otherwise, or with refresh=true,
    fetched from Scryfall and cached.
    """
    if not refresh:
        cached = await get_card(session, card_id)
        if cached is not None:
            return CardResponse.from_record(card_to_model(cached))

    record = parse_card(await scryfall.get_card(card_id))
    await upsert_card(session, record)
    return CardResponse.from_record(record)
