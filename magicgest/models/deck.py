from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from magicgest.models.card import CardRecord


class DeckCategory(str, Enum):
    """Partition a deck card belongs to."""

    MAINBOARD = "mainboard"
    SIDEBOARD = "sideboard"


@dataclass
class Deck:
    """
    A user deck.

    Attributes:
        id: Database id
        name: Deck name
        format: Format name as entered (e.g., "Commander", "Modern")
        description: Free text
        color_identity: Free text color identity (e.g., "WU")
        created_at: Creation time
        updated_at: Last change to the deck or its card list
    """

    id: int
    name: str
    format: str = ""
    description: str = ""
    color_identity: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class DeckCardEntry:
    """Copies of one card in one category of a deck."""

    id: int
    deck_id: int
    card: CardRecord
    quantity: int
    category: DeckCategory = DeckCategory.MAINBOARD


@dataclass(frozen=True, slots=True)
class ManaCurvePoint:
    cmc: str  # "0".."6" or "7+"
    count: int


@dataclass
class DeckStatistics:
    """Aggregates over one category of a deck."""

    mana_curve: list[ManaCurvePoint] = field(default_factory=list)
    color_distribution: dict[str, int] = field(default_factory=dict)
    type_distribution: dict[str, int] = field(default_factory=dict)
    total_cards: int = 0
    avg_cmc: float = 0.0


@dataclass
class LegalityReport:
    """
    Format checks for a deck's mainboard.

    Issues are rule violations; suggestions are advisory.
    """

    deck_name: str
    format: str
    total_cards: int
    land_count: int
    land_percentage: float
    avg_cmc: float
    issues: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    @property
    def is_legal(self) -> bool:
        return not self.issues


@dataclass
class HandStatistics:
    hand_size: int
    lands: int
    spells: int
    avg_cmc: float
    colors: dict[str, int]
    mulligans: int


@dataclass
class OpeningHand:
    """A drawn hand plus the size of the shuffled library it came from."""

    hand: list[CardRecord]
    stats: HandStatistics
    deck_size: int
