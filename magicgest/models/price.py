from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from magicgest.models.card import CardRecord
from magicgest.models.platform import PriceSource


class AlertCondition(str, Enum):
    """Direction of a price alert."""

    BELOW = "below"
    ABOVE = "above"


@dataclass(frozen=True, slots=True)
class PricePoint:
    """One recorded price for a card on a platform."""

    id: int
    card_id: str
    platform: str
    price: float | None
    currency: str
    recorded_at: datetime


@dataclass(frozen=True, slots=True)
class PriceTrend:
    """Change between the earliest and latest price of a card in a window."""

    card_id: str
    name: str
    set_name: str | None
    image_uri: str | None
    old_price: float
    new_price: float
    percent_change: float


@dataclass
class TrendReport:
    gainers: list[PriceTrend] = field(default_factory=list)
    losers: list[PriceTrend] = field(default_factory=list)


@dataclass
class PriceAlert:
    """
    A threshold alert on a card's cached price.

    Once triggered, stays triggered until manually reset.
    """

    id: int
    card: CardRecord
    platform: PriceSource
    target_price: float
    condition: AlertCondition = AlertCondition.BELOW
    active: bool = True
    triggered: bool = False
    triggered_at: datetime | None = None
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class TriggeredAlert:
    alert: PriceAlert
    current_price: float


@dataclass(frozen=True, slots=True)
class RecordOutcome:
    """Result of recording one card's price."""

    recorded: bool
    price: float | None
    currency: str

    @property
    def skipped(self) -> bool:
        return not self.recorded


@dataclass
class BulkRecordResult:
    """Per-item counters for a bulk price recording run."""

    recorded: int = 0
    skipped: int = 0
    failed: int = 0
    total: int = 0
