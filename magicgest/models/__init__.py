from magicgest.models.budget import (
    BudgetPeriod,
    BudgetSummary,
    BudgetTotals,
    BudgetTransaction,
    CollectionSnapshot,
    CollectionValue,
    MonthlyTotals,
    TransactionType,
)
from magicgest.models.card import CardRecord, CollectionEntry, WishlistEntry
from magicgest.models.deck import (
    Deck,
    DeckCardEntry,
    DeckCategory,
    DeckStatistics,
    HandStatistics,
    LegalityReport,
    ManaCurvePoint,
    OpeningHand,
)
from magicgest.models.failure import (
    ConflictError,
    EmptyDeckError,
    ErrorResponse,
    FailureDetail,
    FailureKind,
    InvalidInputError,
    KnownError,
    NotFoundError,
    UpstreamError,
)
from magicgest.models.platform import Currency, PriceSource
from magicgest.models.price import (
    AlertCondition,
    PriceAlert,
    PricePoint,
    PriceTrend,
    TrendReport,
    TriggeredAlert,
)

__all__ = [
    "AlertCondition",
    "BudgetPeriod",
    "BudgetSummary",
    "BudgetTotals",
    "BudgetTransaction",
    "CardRecord",
    "CollectionEntry",
    "CollectionSnapshot",
    "CollectionValue",
    "ConflictError",
    "Currency",
    "Deck",
    "DeckCardEntry",
    "DeckCategory",
    "DeckStatistics",
    "EmptyDeckError",
    "ErrorResponse",
    "FailureDetail",
    "FailureKind",
    "HandStatistics",
    "InvalidInputError",
    "KnownError",
    "LegalityReport",
    "ManaCurvePoint",
    "MonthlyTotals",
    "NotFoundError",
    "OpeningHand",
    "PriceAlert",
    "PricePoint",
    "PriceSource",
    "PriceTrend",
    "TransactionType",
    "TrendReport",
    "TriggeredAlert",
    "UpstreamError",
    "WishlistEntry",
]
