"""
Price tracking API endpoints.

Current prices come from the cached Scryfall snapshot. Recording copies
that snapshot into price history, at most once per card, platform and UTC
day unless forced.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from magicgest.analysis.trends import (
    DEFAULT_TREND_DAYS,
    DEFAULT_TREND_LIMIT,
    compute_price_trends,
)
from magicgest.db import (
    card_to_model,
    get_card,
    get_cards_by_ids,
    get_platform_history,
    get_price_history,
    record_collection_prices,
    record_price,
    require_card,
)
from magicgest.db.database import get_session
from magicgest.models.platform import DEFAULT_PRICE_SOURCE, PriceSource
from magicgest.models.price import PriceTrend

router = APIRouter(prefix="/prices", tags=["prices"])


class PlatformResponse(BaseModel):
    id: PriceSource
    name: str
    key: str
    currency: str


class CardPriceResponse(BaseModel):
    card_id: str
    card_name: str
    platform: PriceSource
    price: float | None
    currency: str
    last_updated: datetime | None = None


class RecordPriceRequest(BaseModel):
    platform: PriceSource = DEFAULT_PRICE_SOURCE
    force: bool = False


class RecordPriceResponse(BaseModel):
    message: str
    recorded: bool
    skipped: bool
    price: float | None = None
    currency: str


class HistoryCard(BaseModel):
    name: str
    set_name: str | None = None


class HistoryPointResponse(BaseModel):
    price: float | None
    currency: str
    date: datetime


class PriceHistoryResponse(BaseModel):
    card: HistoryCard | None = None
    platform: PriceSource
    history: list[HistoryPointResponse] = Field(default_factory=list)


class RecordCollectionRequest(BaseModel):
    platform: PriceSource = DEFAULT_PRICE_SOURCE


class RecordCollectionResponse(BaseModel):
    message: str
    recorded: int = 0
    skipped: int = 0
    failed: int = 0
    total: int = 0


class TrendResponse(BaseModel):
    card_id: str
    name: str
    set_name: str | None = None
    image_uri: str | None = None
    old_price: float
    new_price: float
    percent_change: float

    @classmethod
    def from_trend(cls, trend: PriceTrend) -> "TrendResponse":
        return cls(
            card_id=trend.card_id,
            name=trend.name,
            set_name=trend.set_name,
            image_uri=trend.image_uri,
            old_price=trend.old_price,
            new_price=trend.new_price,
            percent_change=trend.percent_change,
        )


class TrendsResponse(BaseModel):
    platform: PriceSource
    days: int
    gainers: list[TrendResponse] = Field(default_factory=list)
    losers: list[TrendResponse] = Field(default_factory=list)


@router.get("/platforms", response_model=list[PlatformResponse])
async def list_platforms() -> list[PlatformResponse]:
    """Every supported price source."""
    return [
        PlatformResponse(
            id=source,
            name=source.display_name,
            key=source.price_field,
            currency=source.currency.value,
        )
        for source in PriceSource
    ]


@router.get("/card/{card_id}", response_model=CardPriceResponse)
async def get_card_price(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    platform: PriceSource = DEFAULT_PRICE_SOURCE,
) -> CardPriceResponse:
    """Current cached price of a card on a platform. Price is null when unavailable."""
    card = card_to_model(await require_card(session, card_id))
    return CardPriceResponse(
        card_id=card.id,
        card_name=card.name,
        platform=platform,
        price=card.price_for(platform),
        currency=platform.currency.value,
        last_updated=card.updated_at,
    )


@router.post("/record/{card_id}", response_model=RecordPriceResponse)
async def record_card_price(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    request: Annotated[RecordPriceRequest | None, Body()] = None,
) -> RecordPriceResponse:
    """
    Record a card's current price.

    A second recording on the same UTC day is skipped unless `force` is set.
    """
    request = request or RecordPriceRequest()
    outcome = await record_price(session, card_id, request.platform, force=request.force)

    if outcome.recorded:
        message = "Price recorded successfully"
    else:
        message = "Price already recorded today"

    return RecordPriceResponse(
        message=message,
        recorded=outcome.recorded,
        skipped=outcome.skipped,
        price=outcome.price,
        currency=outcome.currency,
    )


@router.get("/history/{card_id}", response_model=PriceHistoryResponse)
async def get_card_price_history(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    platform: PriceSource = DEFAULT_PRICE_SOURCE,
    days: Annotated[int, Query(ge=1)] = 30,
) -> PriceHistoryResponse:
    """Recorded prices for the last `days` days, oldest first."""
    history = await get_price_history(session, card_id, platform, days=days)
    card = await get_card(session, card_id)

    return PriceHistoryResponse(
        card=HistoryCard(name=card.name, set_name=card.set_name) if card else None,
        platform=platform,
        history=[
            HistoryPointResponse(price=p.price, currency=p.currency, date=p.recorded_at)
            for p in history
        ],
    )


@router.post("/record-collection", response_model=RecordCollectionResponse)
async def record_collection(
    session: Annotated[AsyncSession, Depends(get_session)],
    request: Annotated[RecordCollectionRequest | None, Body()] = None,
) -> RecordCollectionResponse:
    """Record today's price for every distinct card in the collection."""
    request = request or RecordCollectionRequest()
    result = await record_collection_prices(session, request.platform)

    return RecordCollectionResponse(
        message="Bulk price recording completed",
        recorded=result.recorded,
        skipped=result.skipped,
        failed=result.failed,
        total=result.total,
    )


@router.get("/trends", response_model=TrendsResponse)
async def get_price_trends(
    session: Annotated[AsyncSession, Depends(get_session)],
    platform: PriceSource = DEFAULT_PRICE_SOURCE,
    days: Annotated[int, Query(ge=1)] = DEFAULT_TREND_DAYS,
    limit: Annotated[int, Query(ge=2, le=200)] = DEFAULT_TREND_LIMIT,
) -> TrendsResponse:
    """
    Biggest movers in the window.

    Compares each card's earliest and latest recorded price. Gainers and
    losers each get half of `limit`.
    """
    points = await get_platform_history(session, platform, days=days)
    cards = await get_cards_by_ids(session, {p.card_id for p in points})
    report = compute_price_trends(points, cards, limit=limit)

    return TrendsResponse(
        platform=platform,
        days=days,
        gainers=[TrendResponse.from_trend(t) for t in report.gainers],
        losers=[TrendResponse.from_trend(t) for t in report.losers],
    )
