from dataclasses import dataclass, field
from datetime import datetime

from magicgest.models.platform import PriceSource, parse_price

# WUBRG order, used whenever colors are listed
COLOR_ORDER = ("W", "U", "B", "R", "G")

VALID_RARITIES = frozenset({"common", "uncommon", "rare", "mythic"})


def sort_colors(colors: frozenset[str] | set[str] | list[str]) -> list[str]:
    """Colors in WUBRG order, unknown symbols last."""
    return sorted(
        set(colors),
        key=lambda c: (COLOR_ORDER.index(c) if c in COLOR_ORDER else len(COLOR_ORDER), c),
    )


@dataclass(frozen=True, slots=True)
class CardRecord:
    """
    A cached Scryfall card.

    Attributes:
        id: Scryfall card id
        name: Card name
        set_code: Set code (e.g., "dmu")
        set_name: Full set name
        collector_number: Collector number within set
        rarity: One of common, uncommon, rare, mythic
        image_uri: Normal-size image URL
        mana_cost: Symbolic mana cost (e.g., "{2}{B}{B}")
        type_line: Full type line (e.g., "Creature — Human Wizard")
        oracle_text: Rules text
        colors: Color symbols from {W, U, B, R, G}
        cmc: Mana value
        prices: Scryfall price snapshot {"usd": "1.23", "eur": None, ...}
        scryfall_uri: Scryfall permalink
    """

    id: str
    name: str
    set_code: str | None = None
    set_name: str | None = None
    collector_number: str | None = None
    rarity: str = "common"
    image_uri: str | None = None
    mana_cost: str | None = None
    type_line: str = ""
    oracle_text: str | None = None
    colors: frozenset[str] = frozenset()
    cmc: float = 0.0
    prices: dict[str, str | None] = field(default_factory=dict, hash=False, compare=False)
    scryfall_uri: str | None = None
    updated_at: datetime | None = field(default=None, compare=False)

    def price_for(self, source: PriceSource) -> float | None:
        """Current cached price for a source, or None when not available."""
        return parse_price(self.prices.get(source.price_field))


@dataclass(frozen=True, slots=True)
class CollectionEntry:
    """Owned copies of one card in one condition/finish."""

    id: int
    card: CardRecord
    quantity: int
    condition: str = "NM"
    foil: bool = False
    language: str = "en"
    notes: str = ""
    added_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class WishlistEntry:
    """A card the user wants to acquire."""

    id: int
    card: CardRecord
    quantity: int = 1
    max_price: float | None = None
    priority: str = "medium"
    notes: str = ""
    added_at: datetime | None = None
