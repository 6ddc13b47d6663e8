"""
Price alert evaluation.

An alert fires once its card's cached price crosses the target in the
alert's direction. Boundaries are inclusive. Missing prices never fire.
"""

from magicgest.models.card import CardRecord
from magicgest.models.platform import PriceSource
from magicgest.models.price import AlertCondition


def should_trigger(
    condition: AlertCondition,
    target_price: float,
    current_price: float | None,
) -> bool:
    """True when the current price satisfies the alert condition."""
    if current_price is None:
        return False
    if condition == AlertCondition.BELOW:
        return current_price <= target_price
    if condition == AlertCondition.ABOVE:
        return current_price >= target_price
    return False


def current_price(card: CardRecord, source: PriceSource) -> float | None:
    """Cached price the alert compares against."""
    return card.price_for(source)
