"""
Deck, price and budget analysis.

Pure functions over domain models; nothing here touches the database.
"""

from magicgest.analysis.alerts import current_price, should_trigger
from magicgest.analysis.budget import (
    build_budget_summary,
    collection_value,
    monthly_series,
    period_start,
    summarize_transactions,
)
from magicgest.analysis.deck_stats import classify_type, compute_deck_statistics, curve_bucket
from magicgest.analysis.legality import analyze_deck
from magicgest.analysis.playtest import (
    draw_opening_hand,
    expand_deck,
    hand_statistics,
    kept_hand_size,
)
from magicgest.analysis.trends import compute_price_trends, percent_change

__all__ = [
    "analyze_deck",
    "build_budget_summary",
    "classify_type",
    "collection_value",
    "compute_deck_statistics",
    "compute_price_trends",
    "current_price",
    "curve_bucket",
    "draw_opening_hand",
    "expand_deck",
    "hand_statistics",
    "kept_hand_size",
    "monthly_series",
    "percent_change",
    "period_start",
    "should_trigger",
    "summarize_transactions",
]
