"""
Price trends.

Percent change between the earliest and latest recorded price of each card
in a window, split into gainers and losers.
"""

from collections.abc import Mapping, Sequence

from magicgest.models.card import CardRecord
from magicgest.models.price import PricePoint, PriceTrend, TrendReport

DEFAULT_TREND_DAYS = 7
DEFAULT_TREND_LIMIT = 10


def percent_change(old_price: float | None, new_price: float | None) -> float | None:
    """
    Percent change from old to new.

    Returns None when the old price is missing or not positive, so callers
    never divide by zero.
    """
    if old_price is None or new_price is None or old_price <= 0:
        return None
    return (new_price - old_price) / old_price * 100


def compute_price_trends(
    points: Sequence[PricePoint],
    cards: Mapping[str, CardRecord],
    limit: int = DEFAULT_TREND_LIMIT,
) -> TrendReport:
    """
    Rank cards by how much their price moved.

    Args:
        points: History points inside the window, any order
        cards: Cached cards keyed by id, for display fields
        limit: Total result size; gainers and losers get half each

    Returns:
        TrendReport with gainers (largest rise first) and losers
        (largest drop first)
    """
    earliest: dict[str, PricePoint] = {}
    latest: dict[str, PricePoint] = {}

    for point in sorted(points, key=lambda p: (p.recorded_at, p.id)):
        earliest.setdefault(point.card_id, point)
        latest[point.card_id] = point

    trends: list[PriceTrend] = []
    for card_id, first in earliest.items():
        last = latest[card_id]
        change = percent_change(first.price, last.price)
        if change is None:
            continue

        card = cards.get(card_id)
        trends.append(
            PriceTrend(
                card_id=card_id,
                name=card.name if card else card_id,
                set_name=card.set_name if card else None,
                image_uri=card.image_uri if card else None,
                old_price=first.price,  # type: ignore[arg-type]
                new_price=last.price,  # type: ignore[arg-type]
                percent_change=round(change, 2),
            )
        )

    trends.sort(key=lambda t: abs(t.percent_change), reverse=True)

    half = limit // 2
    gainers = [t for t in trends if t.percent_change > 0][:half]
    losers = [t for t in trends if t.percent_change < 0][:half]

    return TrendReport(gainers=gainers, losers=losers)
