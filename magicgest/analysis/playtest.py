"""
Opening hand simulator.

Shuffles a deck's mainboard and draws a starting hand. Each mulligan keeps
one card fewer (a simplified London mulligan with no "bottom N" step).
Nothing here is persisted; every call reshuffles.
"""

import random
from collections.abc import Sequence

from magicgest.models.card import CardRecord
from magicgest.models.deck import DeckCardEntry, HandStatistics, OpeningHand
from magicgest.models.failure import EmptyDeckError

DEFAULT_HAND_SIZE = 7
MIN_HAND_SIZE = 1


def expand_deck(entries: Sequence[DeckCardEntry]) -> list[CardRecord]:
    """One list item per physical copy."""
    library: list[CardRecord] = []
    for entry in entries:
        library.extend([entry.card] * entry.quantity)
    return library


def kept_hand_size(hand_size: int = DEFAULT_HAND_SIZE, mulligans: int = 0) -> int:
    """Cards kept after taking the given number of mulligans, never below one."""
    return max(hand_size - mulligans, MIN_HAND_SIZE)


def hand_statistics(hand: Sequence[CardRecord], mulligans: int = 0) -> HandStatistics:
    """
    Summarize a drawn hand.

    Colorless nonland cards count under "C"; colorless lands are not
    tallied at all.
    """
    lands = 0
    colors: dict[str, int] = {}
    total_cmc = 0.0

    for card in hand:
        is_land = "land" in card.type_line.lower()
        if is_land:
            lands += 1
        total_cmc += card.cmc or 0

        if not card.colors and not is_land:
            colors["C"] = colors.get("C", 0) + 1
        else:
            for color in card.colors:
                colors[color] = colors.get(color, 0) + 1

    avg_cmc = round(total_cmc / len(hand), 2) if hand else 0.0

    return HandStatistics(
        hand_size=len(hand),
        lands=lands,
        spells=len(hand) - lands,
        avg_cmc=avg_cmc,
        colors=colors,
        mulligans=mulligans,
    )


def draw_opening_hand(
    mainboard: Sequence[DeckCardEntry],
    hand_size: int = DEFAULT_HAND_SIZE,
    mulligans: int = 0,
    rng: random.Random | None = None,
) -> OpeningHand:
    """
    Shuffle the mainboard and draw an opening hand.

    Args:
        mainboard: The deck's mainboard entries
        hand_size: Cards in a full hand
        mulligans: Mulligans taken; each one shrinks the hand by one
        rng: Random source, defaults to the module-level generator

    Returns:
        OpeningHand with the drawn cards, their statistics and deck size

    Raises:
        EmptyDeckError: If the mainboard has no cards
    """
    library = expand_deck(mainboard)
    if not library:
        raise EmptyDeckError(mainboard[0].deck_id if mainboard else None)

    # Fisher-Yates; every permutation equally likely
    (rng or random).shuffle(library)

    hand = library[: kept_hand_size(hand_size, mulligans)]

    return OpeningHand(
        hand=hand,
        stats=hand_statistics(hand, mulligans),
        deck_size=len(library),
    )
