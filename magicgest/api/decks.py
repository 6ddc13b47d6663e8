"""
Deck API endpoints.

Deck CRUD, the nested card-membership resource, and the analysis
endpoints (statistics, format checks, opening-hand draws).
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from magicgest.analysis import analyze_deck, compute_deck_statistics, draw_opening_hand
from magicgest.analysis.playtest import DEFAULT_HAND_SIZE
from magicgest.api.cards import CardResponse
from magicgest.db import (
    add_card_to_deck,
    create_deck,
    delete_deck,
    get_deck_cards,
    list_decks,
    remove_card_from_deck,
    require_deck,
    update_deck,
    update_deck_card,
)
from magicgest.db.database import get_session
from magicgest.db.operations import deck_to_model
from magicgest.models.deck import Deck, DeckCardEntry, DeckCategory
from magicgest.models.failure import NotFoundError
from magicgest.models.platform import PriceSource

router = APIRouter(prefix="/decks", tags=["decks"])

# Deck value is always reported in USD
DECK_VALUE_SOURCE = PriceSource.SCRYFALL_USD


class DeckSummaryResponse(BaseModel):
    """A deck in the deck list."""

    id: int
    name: str
    format: str = ""
    description: str = ""
    color_identity: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    card_count: int = 0
    total_cards: int = 0

    @classmethod
    def from_deck(
        cls, deck: Deck, card_count: int = 0, total_cards: int = 0
    ) -> "DeckSummaryResponse":
        return cls(
            id=deck.id,
            name=deck.name,
            format=deck.format,
            description=deck.description,
            color_identity=deck.color_identity,
            created_at=deck.created_at,
            updated_at=deck.updated_at,
            card_count=card_count,
            total_cards=total_cards,
        )


class DeckCardResponse(BaseModel):
    id: int
    card: CardResponse
    quantity: int
    category: DeckCategory

    @classmethod
    def from_entry(cls, entry: DeckCardEntry) -> "DeckCardResponse":
        return cls(
            id=entry.id,
            card=CardResponse.from_record(entry.card),
            quantity=entry.quantity,
            category=entry.category,
        )


class DeckDetailResponse(DeckSummaryResponse):
    """A deck with its cards and USD value."""

    cards: list[DeckCardResponse] = Field(default_factory=list)
    value: float = 0.0


class DeckCreateRequest(BaseModel):
    name: str | None = None
    format: str = ""
    description: str = ""
    color_identity: str = ""


class DeckUpdateRequest(BaseModel):
    name: str | None = None
    format: str | None = None
    description: str | None = None
    color_identity: str | None = None


class DeckCardAddRequest(BaseModel):
    card_id: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1)
    category: DeckCategory = DeckCategory.MAINBOARD


class DeckCardAddResponse(BaseModel):
    message: str
    created: bool
    entry: DeckCardResponse


class DeckCardUpdateRequest(BaseModel):
    """Quantity below 1 removes the entry."""

    quantity: int | None = None
    category: DeckCategory | None = None


class DeckCardUpdateResponse(BaseModel):
    message: str
    deleted: bool = False
    entry: DeckCardResponse | None = None


class MessageResponse(BaseModel):
    message: str


class ManaCurvePointResponse(BaseModel):
    cmc: str
    count: int


class DeckStatsResponse(BaseModel):
    mana_curve: list[ManaCurvePointResponse] = Field(default_factory=list)
    color_distribution: dict[str, int] = Field(default_factory=dict)
    type_distribution: dict[str, int] = Field(default_factory=dict)
    total_cards: int = 0
    avg_cmc: float = 0.0


class DeckAnalysisResponse(BaseModel):
    deck_name: str
    format: str
    total_cards: int
    land_count: int
    land_percentage: float
    avg_cmc: float
    is_legal: bool
    issues: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class PlaytestRequest(BaseModel):
    hand_size: int = Field(default=DEFAULT_HAND_SIZE, ge=1)
    mulligans: int = Field(default=0, ge=0)


class HandStatsResponse(BaseModel):
    hand_size: int
    lands: int
    spells: int
    avg_cmc: float
    colors: dict[str, int]
    mulligans: int


class PlaytestResponse(BaseModel):
    hand: list[CardResponse]
    stats: HandStatsResponse
    deck_size: int


def _deck_value(entries: list[DeckCardEntry]) -> float:
    total = 0.0
    for entry in entries:
        price = entry.card.price_for(DECK_VALUE_SOURCE)
        if price is not None:
            total += price * entry.quantity
    return round(total, 2)


@router.get("", response_model=list[DeckSummaryResponse])
async def get_decks(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[DeckSummaryResponse]:
    """All decks, most recently updated first, with card counts."""
    rows = await list_decks(session)
    return [
        DeckSummaryResponse.from_deck(deck, card_count=count, total_cards=total)
        for deck, count, total in rows
    ]


@router.post("", response_model=DeckSummaryResponse)
async def create_new_deck(
    request: DeckCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckSummaryResponse:
    """Create an empty deck."""
    if not request.name or not request.name.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Deck name is required",
        )

    deck = await create_deck(
        session,
        request.name.strip(),
        format_name=request.format,
        description=request.description,
        color_identity=request.color_identity,
    )
    return DeckSummaryResponse.from_deck(deck)


@router.get("/{deck_id}", response_model=DeckDetailResponse)
async def get_deck_detail(
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckDetailResponse:
    """
    Get a deck with its cards.

    Cards are ordered by category, mana value, then name. `value` is the
    deck's price in USD, counting only cards that have a USD price.
    """
    deck = deck_to_model(await require_deck(session, deck_id))
    entries = await get_deck_cards(session, deck_id)

    summary = DeckSummaryResponse.from_deck(
        deck,
        card_count=len(entries),
        total_cards=sum(e.quantity for e in entries),
    )
    return DeckDetailResponse(
        **summary.model_dump(),
        cards=[DeckCardResponse.from_entry(e) for e in entries],
        value=_deck_value(entries),
    )


@router.put("/{deck_id}", response_model=DeckSummaryResponse)
async def update_deck_metadata(
    deck_id: int,
    request: DeckUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckSummaryResponse:
    """Update name, format, description or color identity."""
    fields = request.model_dump(exclude_unset=True, exclude_none=True)
    if not fields:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )
    name = request.name.strip() if request.name is not None else None
    if name == "":
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Deck name is required",
        )

    deck = await update_deck(
        session,
        deck_id,
        name=name,
        format_name=request.format,
        description=request.description,
        color_identity=request.color_identity,
    )
    return DeckSummaryResponse.from_deck(deck)


@router.delete("/{deck_id}", response_model=MessageResponse)
async def delete_deck_by_id(
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MessageResponse:
    """Delete a deck and every card entry in it."""
    if not await delete_deck(session, deck_id):
        raise NotFoundError("Deck not found")
    return MessageResponse(message="Deck deleted successfully")


# --- Card membership ---


@router.post("/{deck_id}/cards", response_model=DeckCardAddResponse)
async def add_deck_card(
    deck_id: int,
    request: DeckCardAddRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckCardAddResponse:
    """
    Add copies of a cached card to a deck.

    Adding a card already in the same category increases its quantity.
    """
    entry, created = await add_card_to_deck(
        session,
        deck_id,
        request.card_id,
        quantity=request.quantity,
        category=request.category,
    )
    return DeckCardAddResponse(
        message="Card added to deck" if created else "Card quantity updated",
        created=created,
        entry=DeckCardResponse.from_entry(entry),
    )


@router.put("/{deck_id}/cards/{entry_id}", response_model=DeckCardUpdateResponse)
async def update_deck_card_entry(
    deck_id: int,
    entry_id: int,
    request: DeckCardUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckCardUpdateResponse:
    """Change quantity or move the card between mainboard and sideboard."""
    if request.quantity is None and request.category is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )

    entry = await update_deck_card(
        session,
        deck_id,
        entry_id,
        quantity=request.quantity,
        category=request.category,
    )
    if entry is None:
        return DeckCardUpdateResponse(message="Card removed from deck", deleted=True)

    return DeckCardUpdateResponse(
        message="Card updated successfully",
        entry=DeckCardResponse.from_entry(entry),
    )


@router.delete("/{deck_id}/cards/{entry_id}", response_model=MessageResponse)
async def delete_deck_card_entry(
    deck_id: int,
    entry_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MessageResponse:
    await remove_card_from_deck(session, deck_id, entry_id)
    return MessageResponse(message="Card removed from deck")


# --- Analysis ---


@router.get("/{deck_id}/stats", response_model=DeckStatsResponse)
async def get_deck_stats(
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
    category: DeckCategory = DeckCategory.MAINBOARD,
) -> DeckStatsResponse:
    """
    Mana curve, color and type distributions for one category.

    An empty category returns empty distributions and zero totals.
    """
    await require_deck(session, deck_id)
    stats = compute_deck_statistics(await get_deck_cards(session, deck_id, category))

    return DeckStatsResponse(
        mana_curve=[ManaCurvePointResponse(cmc=p.cmc, count=p.count) for p in stats.mana_curve],
        color_distribution=stats.color_distribution,
        type_distribution=stats.type_distribution,
        total_cards=stats.total_cards,
        avg_cmc=stats.avg_cmc,
    )


@router.get("/{deck_id}/analyze", response_model=DeckAnalysisResponse)
async def analyze_deck_legality(
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckAnalysisResponse:
    """Format checks (issues) and deck-building advice (suggestions) for the mainboard."""
    deck = deck_to_model(await require_deck(session, deck_id))
    report = analyze_deck(deck, await get_deck_cards(session, deck_id, DeckCategory.MAINBOARD))

    return DeckAnalysisResponse(
        deck_name=report.deck_name,
        format=report.format,
        total_cards=report.total_cards,
        land_count=report.land_count,
        land_percentage=report.land_percentage,
        avg_cmc=report.avg_cmc,
        is_legal=report.is_legal,
        issues=report.issues,
        suggestions=report.suggestions,
    )


@router.post("/{deck_id}/playtest/draw", response_model=PlaytestResponse)
async def draw_hand(
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
    request: Annotated[PlaytestRequest | None, Body()] = None,
) -> PlaytestResponse:
    """
    Shuffle the mainboard and draw an opening hand.

    Each mulligan draws one card fewer, down to a single card. Nothing is
    saved; every call reshuffles.
    """
    request = request or PlaytestRequest()
    await require_deck(session, deck_id)
    mainboard = await get_deck_cards(session, deck_id, DeckCategory.MAINBOARD)

    result = draw_opening_hand(mainboard, hand_size=request.hand_size, mulligans=request.mulligans)

    return PlaytestResponse(
        hand=[CardResponse.from_record(c) for c in result.hand],
        stats=HandStatsResponse(
            hand_size=result.stats.hand_size,
            lands=result.stats.lands,
            spells=result.stats.spells,
            avg_cmc=result.stats.avg_cmc,
            colors=result.stats.colors,
            mulligans=result.stats.mulligans,
        ),
        deck_size=result.deck_size,
    )
