"""Tests for the opening hand simulator."""

import random

import pytest
from factories import make_card, make_entry, make_land

from magicgest.analysis.playtest import (
    draw_opening_hand,
    expand_deck,
    hand_statistics,
    kept_hand_size,
)
from magicgest.models.failure import EmptyDeckError


@pytest.fixture
def forty_card_deck() -> list:
    """One 4-of plus 36 singles."""
    entries = [make_entry(make_card("bolt", "Lightning Bolt"), 4)]
    entries += [
        make_entry(make_card(f"c{i}", f"Card {i}", cmc=i % 5), 1, entry_id=i + 1)
        for i in range(36)
    ]
    return entries


class TestKeptHandSize:
    def test_no_mulligan(self) -> None:
        assert kept_hand_size() == 7

    def test_each_mulligan_removes_one(self) -> None:
        assert kept_hand_size(7, 2) == 5

    def test_never_below_one(self) -> None:
        assert kept_hand_size(7, 10) == 1


class TestExpandDeck:
    def test_one_item_per_copy(self, forty_card_deck: list) -> None:
        library = expand_deck(forty_card_deck)

        assert len(library) == 40
        assert sum(1 for card in library if card.name == "Lightning Bolt") == 4


class TestDrawOpeningHand:
    def test_draws_seven(self, forty_card_deck: list) -> None:
        result = draw_opening_hand(forty_card_deck, rng=random.Random(42))

        assert len(result.hand) == 7
        assert result.deck_size == 40
        assert result.stats.hand_size == 7
        assert result.stats.mulligans == 0

    def test_mulligans_shrink_hand(self, forty_card_deck: list) -> None:
        result = draw_opening_hand(forty_card_deck, mulligans=3, rng=random.Random(1))

        assert len(result.hand) == 4
        assert result.stats.mulligans == 3

    def test_small_deck_draws_everything(self) -> None:
        entries = [make_entry(make_card("a", "Only Card"), 3)]

        result = draw_opening_hand(entries, rng=random.Random(0))

        assert len(result.hand) == 3
        assert result.deck_size == 3

    def test_same_seed_same_hand(self, forty_card_deck: list) -> None:
        first = draw_opening_hand(forty_card_deck, rng=random.Random(7))
        second = draw_opening_hand(forty_card_deck, rng=random.Random(7))

        assert [c.id for c in first.hand] == [c.id for c in second.hand]

    def test_empty_deck_raises(self) -> None:
        with pytest.raises(EmptyDeckError):
            draw_opening_hand([])


class TestHandStatistics:
    def test_counts_lands_and_colors(self) -> None:
        hand = [
            make_land("l1", "Mountain"),
            make_land("l2", "Island"),
            make_card("b", "Lightning Bolt", cmc=1),
            make_card("c", "Izzet Charm", cmc=2, colors=frozenset({"U", "R"})),
            make_card("s", "Sol Ring", type_line="Artifact", colors=frozenset(), cmc=1),
        ]

        stats = hand_statistics(hand, mulligans=2)

        assert stats.lands == 2
        assert stats.spells == 3
        assert stats.colors == {"R": 2, "U": 1, "C": 1}
        assert stats.avg_cmc == 0.8
        assert stats.mulligans == 2

    def test_empty_hand(self) -> None:
        stats = hand_statistics([])

        assert stats.hand_size == 0
        assert stats.avg_cmc == 0.0
