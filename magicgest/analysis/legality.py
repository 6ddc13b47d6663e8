"""
Format legality analysis.

Checks a deck's mainboard against deck-size and copy-limit rules and adds
advisory suggestions about land ratio and curve height.
"""

from collections.abc import Sequence

from magicgest.models.deck import Deck, DeckCardEntry, LegalityReport

COMMANDER_FORMAT = "Commander"
COMMANDER_DECK_SIZE = 99

CONSTRUCTED_FORMATS = frozenset({"Standard", "Modern", "Pioneer"})
CONSTRUCTED_MIN_DECK_SIZE = 60

MAX_COPIES = 4

MIN_LAND_PERCENTAGE = 30.0
MAX_LAND_PERCENTAGE = 50.0
MAX_AVERAGE_CMC = 4.0


def _is_basic_land(type_line: str) -> bool:
    return "Basic" in type_line and "Land" in type_line


def _is_land(type_line: str) -> bool:
    return "land" in type_line.lower()


def analyze_deck(deck: Deck, mainboard: Sequence[DeckCardEntry]) -> LegalityReport:
    """
    Analyze a deck for format issues.

    Args:
        deck: The deck being checked (its format drives the size rules)
        mainboard: The deck's mainboard entries

    Returns:
        LegalityReport with issues, suggestions and summary numbers.
        An empty mainboard reports 0% lands and 0 average mana value.
    """
    issues: list[str] = []
    suggestions: list[str] = []

    total_cards = sum(entry.quantity for entry in mainboard)

    if deck.format == COMMANDER_FORMAT:
        if total_cards != COMMANDER_DECK_SIZE:
            issues.append(
                f"Commander decks must have exactly {COMMANDER_DECK_SIZE} cards "
                f"(current: {total_cards})"
            )
    elif deck.format in CONSTRUCTED_FORMATS and total_cards < CONSTRUCTED_MIN_DECK_SIZE:
        issues.append(
            f"{deck.format} decks must have at least {CONSTRUCTED_MIN_DECK_SIZE} cards "
            f"(current: {total_cards})"
        )

    land_count = sum(entry.quantity for entry in mainboard if _is_land(entry.card.type_line))
    land_percentage = land_count / total_cards * 100 if total_cards > 0 else 0.0

    if land_percentage < MIN_LAND_PERCENTAGE:
        suggestions.append(f"Consider adding more lands (current: {land_percentage:.1f}%)")
    elif land_percentage > MAX_LAND_PERCENTAGE:
        suggestions.append(f"Too many lands (current: {land_percentage:.1f}%)")

    if deck.format != COMMANDER_FORMAT:
        for entry in mainboard:
            if not _is_basic_land(entry.card.type_line) and entry.quantity > MAX_COPIES:
                issues.append(
                    f"{entry.card.name}: {entry.quantity} copies (max {MAX_COPIES} allowed)"
                )

    weighted_cmc = sum((entry.card.cmc or 0) * entry.quantity for entry in mainboard)
    avg_cmc = weighted_cmc / total_cards if total_cards > 0 else 0.0

    if avg_cmc > MAX_AVERAGE_CMC:
        suggestions.append(
            f"High average CMC ({avg_cmc:.2f}). Consider adding more low-cost cards."
        )

    return LegalityReport(
        deck_name=deck.name,
        format=deck.format,
        total_cards=total_cards,
        land_count=land_count,
        land_percentage=round(land_percentage, 1),
        avg_cmc=round(avg_cmc, 2),
        issues=issues,
        suggestions=suggestions,
    )
