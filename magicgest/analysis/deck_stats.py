"""
Deck statistics.

Mana curve, color and type breakdowns and average mana value for one
category of a deck, computed in a single pass over its entries.
"""

import math
from collections.abc import Sequence

from magicgest.models.deck import DeckCardEntry, DeckStatistics, ManaCurvePoint

MAX_CURVE_BUCKET = 7
OVERFLOW_BUCKET = "7+"

COLOR_BUCKETS = ("W", "U", "B", "R", "G", "C")

# Order matters - first substring match wins
TYPE_BUCKETS = (
    "creature",
    "instant",
    "sorcery",
    "enchantment",
    "artifact",
    "planeswalker",
    "land",
)
OTHER_TYPE = "other"


def curve_bucket(cmc: float | None) -> int:
    """Integer curve bucket for a mana value, capped at MAX_CURVE_BUCKET."""
    value = cmc or 0
    return min(math.floor(value), MAX_CURVE_BUCKET)


def classify_type(type_line: str) -> str:
    """First matching type bucket for a type line, or "other"."""
    lowered = (type_line or "").lower()
    for bucket in TYPE_BUCKETS:
        if bucket in lowered:
            return bucket
    return OTHER_TYPE


def compute_deck_statistics(entries: Sequence[DeckCardEntry]) -> DeckStatistics:
    """
    Aggregate statistics for a set of deck entries.

    Args:
        entries: Entries already filtered to one category

    Returns:
        DeckStatistics. An empty input returns the empty result.
    """
    if not entries:
        return DeckStatistics()

    curve: dict[int, int] = {}
    colors = dict.fromkeys(COLOR_BUCKETS, 0)
    types = dict.fromkeys((*TYPE_BUCKETS, OTHER_TYPE), 0)
    total_cmc = 0.0
    total_cards = 0

    for entry in entries:
        card = entry.card
        qty = entry.quantity

        bucket = curve_bucket(card.cmc)
        curve[bucket] = curve.get(bucket, 0) + qty
        total_cmc += (card.cmc or 0) * qty
        total_cards += qty

        # No colored symbol means colorless, lands included
        if not card.colors:
            colors["C"] += qty
        else:
            for color in card.colors:
                if color in colors:
                    colors[color] += qty

        types[classify_type(card.type_line)] += qty

    mana_curve = [
        ManaCurvePoint(
            cmc=OVERFLOW_BUCKET if bucket == MAX_CURVE_BUCKET else str(bucket),
            count=count,
        )
        for bucket, count in sorted(curve.items())
    ]

    avg_cmc = round(total_cmc / total_cards, 2) if total_cards > 0 else 0.0

    return DeckStatistics(
        mana_curve=mana_curve,
        color_distribution=colors,
        type_distribution=types,
        total_cards=total_cards,
        avg_cmc=avg_cmc,
    )
