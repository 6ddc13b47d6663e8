"""
Collection API endpoints.

Owned copies of cached cards, one row per (card, condition, foil).
"""

from collections import Counter
from datetime import datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from magicgest.analysis.budget import collection_value
from magicgest.api.cards import CardResponse
from magicgest.db import (
    add_to_collection,
    list_collection,
    remove_from_collection,
    update_collection_entry,
)
from magicgest.db.database import get_session
from magicgest.models.card import CollectionEntry
from magicgest.models.failure import NotFoundError
from magicgest.models.platform import DEFAULT_PRICE_SOURCE, PriceSource

router = APIRouter(prefix="/collection", tags=["collection"])

TOP_SETS = 10


class CollectionEntryResponse(BaseModel):
    """An owned-card row with its card."""

    id: int
    card: CardResponse
    quantity: int
    condition: str
    foil: bool
    language: str
    notes: str = ""
    added_at: datetime | None = None

    @classmethod
    def from_entry(cls, entry: CollectionEntry) -> "CollectionEntryResponse":
        return cls(
            id=entry.id,
            card=CardResponse.from_record(entry.card),
            quantity=entry.quantity,
            condition=entry.condition,
            foil=entry.foil,
            language=entry.language,
            notes=entry.notes,
            added_at=entry.added_at,
        )


class CollectionAddRequest(BaseModel):
    """Request model for adding cards to the collection."""

    card_id: str = Field(..., min_length=1, description="Scryfall id of a cached card")
    quantity: int = Field(default=1, ge=1)
    condition: str = Field(default="NM", examples=["NM", "LP", "MP", "HP", "DMG"])
    foil: bool = False
    language: str = "en"
    notes: str = ""


class CollectionAddResponse(BaseModel):
    message: str
    created: bool
    entry: CollectionEntryResponse


class CollectionUpdateRequest(BaseModel):
    """Partial update. A quantity below 1 removes the row."""

    quantity: int | None = None
    condition: str | None = None
    foil: bool | None = None
    language: str | None = None
    notes: str | None = None


class CollectionUpdateResponse(BaseModel):
    message: str
    deleted: bool = False
    entry: CollectionEntryResponse | None = None


class MessageResponse(BaseModel):
    message: str


class RarityCount(BaseModel):
    rarity: str
    count: int


class SetCount(BaseModel):
    set_code: str | None
    set_name: str | None
    count: int


class CollectionStatsResponse(BaseModel):
    """Response model for collection statistics."""

    total_cards: int = 0
    unique_cards: int = 0
    total_value: float = 0.0
    platform: PriceSource = DEFAULT_PRICE_SOURCE
    currency: str = "USD"
    by_rarity: list[RarityCount] = Field(default_factory=list)
    top_sets: list[SetCount] = Field(default_factory=list)


@router.get("", response_model=list[CollectionEntryResponse])
async def get_collection(
    session: Annotated[AsyncSession, Depends(get_session)],
    filter_text: Annotated[str | None, Query(alias="filter")] = None,
    sort_by: str = "added_at",
    order: Literal["asc", "desc"] = "desc",
) -> list[CollectionEntryResponse]:
    """
    List owned cards.

    `filter` matches card or set name. `sort_by` is one of added_at,
    quantity, condition, language, name.
    """
    try:
        entries = await list_collection(
            session, filter_text=filter_text, sort_by=sort_by, descending=order == "desc"
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    return [CollectionEntryResponse.from_entry(e) for e in entries]


@router.post("", response_model=CollectionAddResponse)
async def add_card(
    request: CollectionAddRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionAddResponse:
    """
    Add copies of a cached card.

    Adding a (card, condition, foil) combination that is already owned
    increases its quantity.
    """
    entry, created = await add_to_collection(
        session,
        request.card_id,
        quantity=request.quantity,
        condition=request.condition,
        foil=request.foil,
        language=request.language,
        notes=request.notes,
    )
    message = "Card added to collection" if created else "Card quantity updated"
    return CollectionAddResponse(
        message=message,
        created=created,
        entry=CollectionEntryResponse.from_entry(entry),
    )


@router.get("/stats", response_model=CollectionStatsResponse)
async def get_collection_stats(
    session: Annotated[AsyncSession, Depends(get_session)],
    platform: PriceSource = DEFAULT_PRICE_SOURCE,
) -> CollectionStatsResponse:
    """
    Collection totals, value against a price source, rarity breakdown and
    the ten sets with the most owned copies.
    """
    entries = await list_collection(session)
    value = collection_value(entries, platform)

    by_rarity: Counter[str] = Counter()
    by_set: Counter[tuple[str | None, str | None]] = Counter()
    for entry in entries:
        by_rarity[entry.card.rarity] += entry.quantity
        by_set[(entry.card.set_code, entry.card.set_name)] += entry.quantity

    return CollectionStatsResponse(
        total_cards=value.total_cards,
        unique_cards=value.unique_cards,
        total_value=value.total_value,
        platform=platform,
        currency=platform.currency.value,
        by_rarity=[RarityCount(rarity=r, count=c) for r, c in sorted(by_rarity.items())],
        top_sets=[
            SetCount(set_code=code, set_name=name, count=count)
            for (code, name), count in by_set.most_common(TOP_SETS)
        ],
    )


@router.put("/{entry_id}", response_model=CollectionUpdateResponse)
async def update_card(
    entry_id: int,
    request: CollectionUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionUpdateResponse:
    """
    Update an owned-card row.

    Moving the row onto a condition/foil combination that already exists
    merges the two rows.
    """
    fields = request.model_dump(exclude_unset=True, exclude_none=True)
    if not fields:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )

    entry = await update_collection_entry(session, entry_id, **fields)
    if entry is None:
        return CollectionUpdateResponse(message="Card removed from collection", deleted=True)

    return CollectionUpdateResponse(
        message="Card updated successfully",
        entry=CollectionEntryResponse.from_entry(entry),
    )


@router.delete("/{entry_id}", response_model=MessageResponse)
async def delete_card(
    entry_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MessageResponse:
    """Remove an owned-card row."""
    if not await remove_from_collection(session, entry_id):
        raise NotFoundError("Card not found in collection")
    return MessageResponse(message="Card removed from collection")
