"""
Budget aggregation.

Totals and monthly series over budget transactions, and collection value
for a price source.
"""

import calendar
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from magicgest.models.budget import (
    BudgetPeriod,
    BudgetSummary,
    BudgetTotals,
    BudgetTransaction,
    CollectionValue,
    MonthlyTotals,
    TransactionType,
)
from magicgest.models.card import CollectionEntry
from magicgest.models.platform import PriceSource

MONTHLY_SERIES_MONTHS = 12
TOP_PURCHASES = 5


def shift_months(moment: datetime, months: int) -> datetime:
    """Same wall-clock time `months` calendar months away, day clamped to month end."""
    month_index = moment.year * 12 + (moment.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_start(period: BudgetPeriod, now: datetime) -> datetime | None:
    """Earliest transaction date inside a period, or None for all-time."""
    if period == BudgetPeriod.MONTH:
        return shift_months(now, -1)
    if period == BudgetPeriod.YEAR:
        return shift_months(now, -12)
    if period == BudgetPeriod.LAST_30_DAYS:
        return now - timedelta(days=30)
    return None


def summarize_transactions(transactions: Iterable[BudgetTransaction]) -> BudgetTotals:
    """
    Sum spending and earnings.

    Net spent is purchases minus sales; trades only bump trade_count.
    """
    totals = BudgetTotals()
    for tx in transactions:
        if tx.type == TransactionType.PURCHASE:
            totals.total_spent += tx.amount
            totals.purchase_count += 1
        elif tx.type == TransactionType.SALE:
            totals.total_earned += tx.amount
            totals.sale_count += 1
        elif tx.type == TransactionType.TRADE:
            totals.trade_count += 1

    totals.net_spent = totals.total_spent - totals.total_earned
    return totals


def monthly_series(
    transactions: Iterable[BudgetTransaction],
    now: datetime,
    months: int = MONTHLY_SERIES_MONTHS,
) -> list[MonthlyTotals]:
    """Spent/earned per calendar month over the last `months` months, oldest first."""
    since = shift_months(now, -months)
    spent: dict[str, float] = {}
    earned: dict[str, float] = {}

    for tx in transactions:
        if tx.transaction_date < since:
            continue
        month = tx.transaction_date.strftime("%Y-%m")
        spent.setdefault(month, 0.0)
        earned.setdefault(month, 0.0)
        if tx.type == TransactionType.PURCHASE:
            spent[month] += tx.amount
        elif tx.type == TransactionType.SALE:
            earned[month] += tx.amount

    return [
        MonthlyTotals(month=month, spent=spent[month], earned=earned[month])
        for month in sorted(spent)
    ]


def build_budget_summary(
    transactions: Sequence[BudgetTransaction],
    period: BudgetPeriod,
    now: datetime,
) -> BudgetSummary:
    """
    Full budget summary for one currency.

    Args:
        transactions: Every transaction in the currency
        period: Window for the totals (the monthly series always spans 12 months)
        now: Reference time
    """
    start = period_start(period, now)
    windowed = [tx for tx in transactions if start is None or tx.transaction_date >= start]

    purchases = [tx for tx in transactions if tx.type == TransactionType.PURCHASE]
    top = sorted(purchases, key=lambda tx: tx.amount, reverse=True)[:TOP_PURCHASES]

    return BudgetSummary(
        summary=summarize_transactions(windowed),
        by_month=monthly_series(transactions, now),
        top_purchases=top,
    )


def collection_value(entries: Iterable[CollectionEntry], source: PriceSource) -> CollectionValue:
    """
    Value the collection against one price source.

    Entries without a price for the source count as zero value.
    """
    total_value = 0.0
    total_cards = 0
    unique_cards = 0

    for entry in entries:
        price = entry.card.price_for(source) or 0.0
        total_value += price * entry.quantity
        total_cards += entry.quantity
        unique_cards += 1

    return CollectionValue(
        total_value=round(total_value, 2),
        total_cards=total_cards,
        unique_cards=unique_cards,
    )
