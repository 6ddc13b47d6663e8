"""Tests for budget aggregation."""

from datetime import UTC, datetime, timedelta

from factories import make_card

from magicgest.analysis.budget import (
    build_budget_summary,
    collection_value,
    monthly_series,
    period_start,
    shift_months,
    summarize_transactions,
)
from magicgest.models.budget import BudgetPeriod, BudgetTransaction, TransactionType
from magicgest.models.card import CollectionEntry
from magicgest.models.platform import PriceSource

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


def _tx(tx_id: int, tx_type: TransactionType, amount: float, when: datetime) -> BudgetTransaction:
    return BudgetTransaction(
        id=tx_id,
        type=tx_type,
        amount=amount,
        currency="USD",
        transaction_date=when,
    )


class TestShiftMonths:
    def test_back_one_month(self) -> None:
        assert shift_months(NOW, -1) == datetime(2024, 5, 15, 12, 0, tzinfo=UTC)

    def test_across_year_boundary(self) -> None:
        moment = datetime(2024, 1, 10, tzinfo=UTC)
        assert shift_months(moment, -2) == datetime(2023, 11, 10, tzinfo=UTC)

    def test_clamps_to_month_end(self) -> None:
        moment = datetime(2024, 3, 31, tzinfo=UTC)
        assert shift_months(moment, -1) == datetime(2024, 2, 29, tzinfo=UTC)


class TestPeriodStart:
    def test_periods(self) -> None:
        assert period_start(BudgetPeriod.ALL, NOW) is None
        assert period_start(BudgetPeriod.MONTH, NOW) == datetime(2024, 5, 15, 12, 0, tzinfo=UTC)
        assert period_start(BudgetPeriod.YEAR, NOW) == datetime(2023, 6, 15, 12, 0, tzinfo=UTC)
        assert period_start(BudgetPeriod.LAST_30_DAYS, NOW) == NOW - timedelta(days=30)


class TestSummarizeTransactions:
    def test_totals(self) -> None:
        txs = [
            _tx(1, TransactionType.PURCHASE, 20.0, NOW),
            _tx(2, TransactionType.PURCHASE, 5.5, NOW),
            _tx(3, TransactionType.SALE, 8.0, NOW),
            _tx(4, TransactionType.TRADE, 100.0, NOW),
        ]

        totals = summarize_transactions(txs)

        assert totals.total_spent == 25.5
        assert totals.total_earned == 8.0
        assert totals.net_spent == 17.5
        assert totals.purchase_count == 2
        assert totals.sale_count == 1
        assert totals.trade_count == 1

    def test_empty(self) -> None:
        totals = summarize_transactions([])

        assert totals.total_spent == 0.0
        assert totals.net_spent == 0.0


class TestMonthlySeries:
    def test_groups_by_month_oldest_first(self) -> None:
        txs = [
            _tx(1, TransactionType.PURCHASE, 10.0, datetime(2024, 6, 1, tzinfo=UTC)),
            _tx(2, TransactionType.SALE, 4.0, datetime(2024, 6, 2, tzinfo=UTC)),
            _tx(3, TransactionType.PURCHASE, 3.0, datetime(2024, 4, 20, tzinfo=UTC)),
            _tx(4, TransactionType.TRADE, 50.0, datetime(2024, 5, 5, tzinfo=UTC)),
        ]

        series = monthly_series(txs, NOW)

        assert [(m.month, m.spent, m.earned) for m in series] == [
            ("2024-04", 3.0, 0.0),
            ("2024-05", 0.0, 0.0),
            ("2024-06", 10.0, 4.0),
        ]

    def test_drops_transactions_older_than_twelve_months(self) -> None:
        txs = [_tx(1, TransactionType.PURCHASE, 10.0, datetime(2023, 5, 1, tzinfo=UTC))]

        assert monthly_series(txs, NOW) == []


class TestBuildBudgetSummary:
    def test_period_window_applies_to_totals_only(self) -> None:
        txs = [
            _tx(1, TransactionType.PURCHASE, 10.0, NOW - timedelta(days=3)),
            _tx(2, TransactionType.PURCHASE, 40.0, NOW - timedelta(days=90)),
        ]

        result = build_budget_summary(txs, BudgetPeriod.MONTH, NOW)

        assert result.summary.total_spent == 10.0
        assert len(result.by_month) == 2
        assert [tx.id for tx in result.top_purchases] == [2, 1]

    def test_top_purchases_capped_at_five(self) -> None:
        txs = [_tx(i, TransactionType.PURCHASE, float(i), NOW) for i in range(1, 9)]
        txs.append(_tx(99, TransactionType.SALE, 500.0, NOW))

        result = build_budget_summary(txs, BudgetPeriod.ALL, NOW)

        assert [tx.id for tx in result.top_purchases] == [8, 7, 6, 5, 4]


class TestCollectionValue:
    def test_sums_quantity_times_price(self) -> None:
        entries = [
            CollectionEntry(id=1, card=make_card("a", "Bolt", usd="2.50"), quantity=4),
            CollectionEntry(id=2, card=make_card("b", "Unpriced", usd=None), quantity=3),
        ]

        value = collection_value(entries, PriceSource.SCRYFALL_USD)

        assert value.total_value == 10.0
        assert value.total_cards == 7
        assert value.unique_cards == 2

    def test_uses_requested_source(self) -> None:
        entries = [CollectionEntry(id=1, card=make_card("a", "Bolt", eur="1.10"), quantity=2)]

        assert collection_value(entries, PriceSource.CARDMARKET).total_value == 2.2
