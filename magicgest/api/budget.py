"""
Budget API endpoints.

Purchase/sale/trade ledger, spending summaries, and collection value
snapshots.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from magicgest.analysis.budget import build_budget_summary
from magicgest.db import (
    add_transaction,
    create_collection_snapshot,
    delete_transaction,
    get_value_history,
    list_transactions,
)
from magicgest.db.database import get_session
from magicgest.models.budget import (
    BudgetPeriod,
    BudgetTransaction,
    CollectionSnapshot,
    TransactionType,
)
from magicgest.models.db import utcnow
from magicgest.models.failure import NotFoundError
from magicgest.models.platform import DEFAULT_PRICE_SOURCE, Currency, PriceSource

router = APIRouter(prefix="/budget", tags=["budget"])


class TransactionResponse(BaseModel):
    id: int
    type: TransactionType
    amount: float
    currency: str
    transaction_date: datetime
    description: str = ""
    card_id: str | None = None
    card_name: str | None = None
    set_name: str | None = None
    image_uri: str | None = None
    quantity: int | None = None

    @classmethod
    def from_transaction(cls, tx: BudgetTransaction) -> "TransactionResponse":
        return cls(
            id=tx.id,
            type=tx.type,
            amount=tx.amount,
            currency=tx.currency,
            transaction_date=tx.transaction_date,
            description=tx.description,
            card_id=tx.card_id,
            card_name=tx.card_name,
            set_name=tx.set_name,
            image_uri=tx.image_uri,
            quantity=tx.quantity,
        )


class TransactionCreateRequest(BaseModel):
    type: TransactionType
    amount: float = Field(..., gt=0)
    currency: Currency = Currency.USD
    description: str = ""
    card_id: str | None = None
    quantity: int | None = Field(default=None, ge=1)
    transaction_date: datetime | None = None


class MessageResponse(BaseModel):
    message: str


class BudgetTotalsResponse(BaseModel):
    total_spent: float = 0.0
    total_earned: float = 0.0
    net_spent: float = 0.0
    purchase_count: int = 0
    sale_count: int = 0
    trade_count: int = 0


class MonthlyTotalsResponse(BaseModel):
    month: str
    spent: float
    earned: float


class BudgetSummaryResponse(BaseModel):
    period: BudgetPeriod
    currency: Currency
    summary: BudgetTotalsResponse
    by_month: list[MonthlyTotalsResponse] = Field(default_factory=list)
    top_purchases: list[TransactionResponse] = Field(default_factory=list)


class SnapshotRequest(BaseModel):
    platform: PriceSource = DEFAULT_PRICE_SOURCE


class SnapshotResponse(BaseModel):
    id: int
    total_value: float
    total_cards: int
    unique_cards: int
    platform: str
    snapshot_date: datetime

    @classmethod
    def from_snapshot(cls, snapshot: CollectionSnapshot) -> "SnapshotResponse":
        return cls(
            id=snapshot.id,
            total_value=snapshot.total_value,
            total_cards=snapshot.total_cards,
            unique_cards=snapshot.unique_cards,
            platform=snapshot.platform,
            snapshot_date=snapshot.snapshot_date,
        )


# --- Transactions ---


@router.get("/transactions", response_model=list[TransactionResponse])
async def get_transactions(
    session: Annotated[AsyncSession, Depends(get_session)],
    tx_type: Annotated[TransactionType | None, Query(alias="type")] = None,
    limit: Annotated[int, Query(ge=1, le=1000)] = 50,
) -> list[TransactionResponse]:
    """Transactions, newest first."""
    transactions = await list_transactions(session, tx_type=tx_type, limit=limit)
    return [TransactionResponse.from_transaction(tx) for tx in transactions]


@router.post("/transactions", response_model=TransactionResponse)
async def create_transaction(
    request: TransactionCreateRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> TransactionResponse:
    """
    Log a purchase, sale or trade.

    The date defaults to now. A card id, when given, must be cached.
    """
    tx = await add_transaction(
        session,
        request.type,
        request.amount,
        currency=request.currency.value,
        description=request.description,
        card_id=request.card_id or None,
        quantity=request.quantity,
        transaction_date=request.transaction_date,
    )
    return TransactionResponse.from_transaction(tx)


@router.delete("/transactions/{tx_id}", response_model=MessageResponse)
async def remove_transaction(
    tx_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> MessageResponse:
    if not await delete_transaction(session, tx_id):
        raise NotFoundError("Transaction not found")
    return MessageResponse(message="Transaction deleted")


# --- Summary ---


@router.get("/summary", response_model=BudgetSummaryResponse)
async def get_budget_summary(
    session: Annotated[AsyncSession, Depends(get_session)],
    period: BudgetPeriod = BudgetPeriod.ALL,
    currency: Currency = Currency.USD,
) -> BudgetSummaryResponse:
    """
    Spending totals for a period in one currency.

    Also returns the last 12 months by calendar month and the five largest
    purchases. Trades are counted but carry no money.
    """
    transactions = await list_transactions(session, currency=currency.value, limit=None)
    result = build_budget_summary(transactions, period, utcnow())
    totals = result.summary

    return BudgetSummaryResponse(
        period=period,
        currency=currency,
        summary=BudgetTotalsResponse(
            total_spent=round(totals.total_spent, 2),
            total_earned=round(totals.total_earned, 2),
            net_spent=round(totals.net_spent, 2),
            purchase_count=totals.purchase_count,
            sale_count=totals.sale_count,
            trade_count=totals.trade_count,
        ),
        by_month=[
            MonthlyTotalsResponse(
                month=m.month, spent=round(m.spent, 2), earned=round(m.earned, 2)
            )
            for m in result.by_month
        ],
        top_purchases=[TransactionResponse.from_transaction(tx) for tx in result.top_purchases],
    )


# --- Collection value ---


@router.post("/snapshot", response_model=SnapshotResponse)
async def create_snapshot(
    session: Annotated[AsyncSession, Depends(get_session)],
    request: Annotated[SnapshotRequest | None, Body()] = None,
) -> SnapshotResponse:
    """Value the whole collection on a platform and store it as a snapshot."""
    request = request or SnapshotRequest()
    snapshot = await create_collection_snapshot(session, request.platform)
    return SnapshotResponse.from_snapshot(snapshot)


@router.get("/value-history", response_model=list[SnapshotResponse])
async def get_collection_value_history(
    session: Annotated[AsyncSession, Depends(get_session)],
    platform: PriceSource = DEFAULT_PRICE_SOURCE,
    days: Annotated[int, Query(ge=1)] = 30,
) -> list[SnapshotResponse]:
    """Snapshots for a platform over the last `days` days, oldest first."""
    snapshots = await get_value_history(session, platform, days=days)
    return [SnapshotResponse.from_snapshot(s) for s in snapshots]
