"""
Budget ledger models.

Transactions are an append/delete log; snapshots are an append-only time
series of collection value.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class TransactionType(str, Enum):
    PURCHASE = "purchase"
    SALE = "sale"
    TRADE = "trade"


class BudgetPeriod(str, Enum):
    """Window applied to budget totals."""

    ALL = "all"
    MONTH = "month"
    YEAR = "year"
    LAST_30_DAYS = "30days"


@dataclass(frozen=True, slots=True)
class BudgetTransaction:
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


@dataclass
class BudgetTotals:
    """
    Monetary totals over a set of transactions.

    Trades count towards trade_count but never towards money totals.
    """

    total_spent: float = 0.0
    total_earned: float = 0.0
    net_spent: float = 0.0
    purchase_count: int = 0
    sale_count: int = 0
    trade_count: int = 0


@dataclass(frozen=True, slots=True)
class MonthlyTotals:
    month: str  # "YYYY-MM"
    spent: float
    earned: float


@dataclass
class BudgetSummary:
    summary: BudgetTotals
    by_month: list[MonthlyTotals] = field(default_factory=list)
    top_purchases: list[BudgetTransaction] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class CollectionValue:
    """Collection totals priced against one source."""

    total_value: float
    total_cards: int
    unique_cards: int


@dataclass(frozen=True, slots=True)
class CollectionSnapshot:
    id: int
    total_value: float
    total_cards: int
    unique_cards: int
    platform: str
    snapshot_date: datetime
