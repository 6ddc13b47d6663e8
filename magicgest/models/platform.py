"""
Price sources.

A price source names a feed/currency pairing. Each one reads exactly one
field of a card's cached Scryfall price snapshot.
"""

from dataclasses import dataclass
from enum import Enum


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"


@dataclass(frozen=True, slots=True)
class PriceSourceInfo:
    display_name: str
    price_field: str  # key in the Scryfall "prices" object
    currency: Currency


class PriceSource(str, Enum):
    """Known price sources, keyed by their public identifier."""

    SCRYFALL_USD = "scryfall_usd"
    SCRYFALL_USD_FOIL = "scryfall_usd_foil"
    SCRYFALL_EUR = "scryfall_eur"
    SCRYFALL_EUR_FOIL = "scryfall_eur_foil"
    TCGPLAYER = "tcgplayer"
    CARDMARKET = "cardmarket"

    @property
    def info(self) -> PriceSourceInfo:
        return _SOURCE_INFO[self]

    @property
    def display_name(self) -> str:
        return self.info.display_name

    @property
    def price_field(self) -> str:
        return self.info.price_field

    @property
    def currency(self) -> Currency:
        return self.info.currency


# Scryfall relays TCGplayer prices as usd and Cardmarket prices as eur
_SOURCE_INFO: dict[PriceSource, PriceSourceInfo] = {
    PriceSource.SCRYFALL_USD: PriceSourceInfo("Scryfall USD", "usd", Currency.USD),
    PriceSource.SCRYFALL_USD_FOIL: PriceSourceInfo("Scryfall USD Foil", "usd_foil", Currency.USD),
    PriceSource.SCRYFALL_EUR: PriceSourceInfo("Scryfall EUR", "eur", Currency.EUR),
    PriceSource.SCRYFALL_EUR_FOIL: PriceSourceInfo("Scryfall EUR Foil", "eur_foil", Currency.EUR),
    PriceSource.TCGPLAYER: PriceSourceInfo("TCGPlayer", "usd", Currency.USD),
    PriceSource.CARDMARKET: PriceSourceInfo("Cardmarket", "eur", Currency.EUR),
}

DEFAULT_PRICE_SOURCE = PriceSource.SCRYFALL_USD


def parse_price(raw: object) -> float | None:
    """
    Parse a Scryfall price value.

    Scryfall sends prices as decimal strings or null. Anything that is not
    a finite number comes back as None.
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if value != value or value in (float("inf"), float("-inf")):
        return None
    return value
