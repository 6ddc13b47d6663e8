"""
Wishlist API endpoints.

Wanted cards with a priority tier and an optional price ceiling.
"""

from collections import Counter
from datetime import datetime
from typing import Annotated, Any, Literal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from magicgest.api.cards import CardResponse
from magicgest.db import (
    add_to_wishlist,
    list_wishlist,
    remove_from_wishlist,
    update_wishlist_entry,
)
from magicgest.db.database import get_session
from magicgest.models.card import WishlistEntry
from magicgest.models.failure import NotFoundError
from magicgest.models.platform import DEFAULT_PRICE_SOURCE, PriceSource

router = APIRouter(prefix="/wishlist", tags=["wishlist"])

Priority = Literal["high", "medium", "low"]


class WishlistEntryResponse(BaseModel):
    id: int
    card: CardResponse
    quantity: int
    max_price: float | None = None
    priority: str
    notes: str = ""
    added_at: datetime | None = None

    @classmethod
    def from_entry(cls, entry: WishlistEntry) -> "WishlistEntryResponse":
        return cls(
            id=entry.id,
            card=CardResponse.from_record(entry.card),
            quantity=entry.quantity,
            max_price=entry.max_price,
            priority=entry.priority,
            notes=entry.notes,
            added_at=entry.added_at,
        )


class AffordableItemResponse(WishlistEntryResponse):
    """A wishlist entry whose current price is within its ceiling."""

    current_price: float


class WishlistAddRequest(BaseModel):
    card_id: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1)
    max_price: float | None = Field(default=None, ge=0)
    priority: Priority = "medium"
    notes: str = ""


class WishlistUpdateRequest(BaseModel):
    """Partial update. An explicit null max_price clears the ceiling."""

    quantity: int | None = Field(default=None, ge=1)
    max_price: float | None = Field(default=None, ge=0)
    priority: Priority | None = None
    notes: str | None = None


class MessageResponse(BaseModel):
    message: str


class WishlistStatsResponse(BaseModel):
    total_items: int = 0
    total_value: float = 0.0
    affordable_value: float = 0.0
    affordable_count: int = 0
    platform: PriceSource = DEFAULT_PRICE_SOURCE
    currency: str = "USD"
    by_priority: dict[str, int] = Field(default_factory=dict)


def _affordable_price(entry: WishlistEntry, platform: PriceSource) -> float | None:
    """Current price when it is at or under the entry's ceiling, else None."""
    if entry.max_price is None:
        return None
    price = entry.card.price_for(platform)
    if price is None or price > entry.max_price:
        return None
    return price


@router.get("", response_model=list[WishlistEntryResponse])
async def get_wishlist(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> list[WishlistEntryResponse]:
    """Wishlist ordered by priority (high, medium, low), newest first within each."""
    entries = await list_wishlist(session)
    return [WishlistEntryResponse.from_entry(e) for e in entries]


@router.post("", response_model=WishlistEntryResponse)
async def add_item(
    request: WishlistAddRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> WishlistEntryResponse:
    """
    Add a cached card to the wishlist.

    A card can only be wishlisted once; a second add returns 409.
    """
    entry = await add_to_wishlist(
        session,
        request.card_id,
        quantity=request.quantity,
        max_price=request.max_price,
        priority=request.priority,
        notes=request.notes,
    )
    return WishlistEntryResponse.from_entry(entry)


@router.get("/affordable", response_model=list[AffordableItemResponse])
async def get_affordable(
    session: Annotated[AsyncSession, Depends(get_session)],
    platform: PriceSource = DEFAULT_PRICE_SOURCE,
) -> list[AffordableItemResponse]:
    """Entries with a ceiling whose current price on `platform` is within it."""
    items: list[AffordableItemResponse] = []
    for entry in await list_wishlist(session):
        price = _affordable_price(entry, platform)
        if price is None:
            continue
        base = WishlistEntryResponse.from_entry(entry)
        items.append(AffordableItemResponse(**base.model_dump(), current_price=price))
    return items


@router.get("/stats", response_model=WishlistStatsResponse)
async def get_wishlist_stats(
    session: Annotated[AsyncSession, Depends(get_session)],
    platform: PriceSource = DEFAULT_PRICE_SOURCE,
) -> WishlistStatsResponse:
    """Wishlist value on a platform and counts per priority."""
    entries = await list_wishlist(session)

    total_value = 0.0
    affordable_value = 0.0
    affordable_count = 0
    by_priority: Counter[str] = Counter()

    for entry in entries:
        price = entry.card.price_for(platform) or 0.0
        item_total = price * entry.quantity
        total_value += item_total
        by_priority[entry.priority] += 1

        if _affordable_price(entry, platform) is not None:
            affordable_value += item_total
            affordable_count += 1

    return WishlistStatsResponse(
        total_items=len(entries),
        total_value=round(total_value, 2),
        affordable_value=round(affordable_value, 2),
        affordable_count=affordable_count,
        platform=platform,
        currency=platform.currency.value,
        by_priority=dict(by_priority),
    )


@router.put("/{entry_id}", response_model=WishlistEntryResponse)
async def update_item(
    entry_id: int,
    request: WishlistUpdateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> WishlistEntryResponse:
    """Update quantity, ceiling, priority or notes."""
    fields: dict[str, Any] = request.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )

    # None means "leave alone" for every field except max_price
    updates = {k: v for k, v in fields.items() if v is not None or k == "max_price"}
    entry = await update_wishlist_entry(session, entry_id, **updates)
    return WishlistEntryResponse.from_entry(entry)


@router.delete("/{entry_id}", response_model=MessageResponse)
async def delete_item(
    entry_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MessageResponse:
    if not await remove_from_wishlist(session, entry_id):
        raise NotFoundError("Item not found")
    return MessageResponse(message="Item removed from wishlist")
