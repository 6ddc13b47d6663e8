"""Tests for deck statistics."""

from factories import make_card, make_entry, make_land

from magicgest.analysis.deck_stats import (
    classify_type,
    compute_deck_statistics,
    curve_bucket,
)


class TestCurveBucket:
    def test_integer_values(self) -> None:
        assert curve_bucket(0) == 0
        assert curve_bucket(3) == 3

    def test_fractional_values_floor(self) -> None:
        assert curve_bucket(2.5) == 2

    def test_caps_at_seven(self) -> None:
        assert curve_bucket(7) == 7
        assert curve_bucket(15) == 7

    def test_missing_is_zero(self) -> None:
        assert curve_bucket(None) == 0


class TestClassifyType:
    def test_creature_wins_over_artifact(self) -> None:
        """First matching bucket wins."""
        assert classify_type("Artifact Creature — Golem") == "creature"

    def test_land(self) -> None:
        assert classify_type("Basic Land — Island") == "land"

    def test_unknown_is_other(self) -> None:
        assert classify_type("Battle — Siege") == "other"
        assert classify_type("") == "other"


class TestComputeDeckStatistics:
    def test_empty_input(self) -> None:
        stats = compute_deck_statistics([])

        assert stats.total_cards == 0
        assert stats.avg_cmc == 0.0
        assert stats.mana_curve == []

    def test_totals_agree(self) -> None:
        """Curve counts and type counts both sum to total_cards."""
        entries = [
            make_entry(make_card("a", "Lightning Bolt", cmc=1), 4),
            make_entry(
                make_card("b", "Shivan Dragon", type_line="Creature — Dragon", cmc=6), 2
            ),
            make_entry(make_card("c", "Ulamog", type_line="Creature", cmc=10), 1),
            make_entry(make_land("d", "Mountain"), 17),
        ]

        stats = compute_deck_statistics(entries)

        assert stats.total_cards == 24
        assert sum(p.count for p in stats.mana_curve) == 24
        assert sum(stats.type_distribution.values()) == 24

    def test_curve_overflow_bucket(self) -> None:
        entries = [
            make_entry(make_card("a", "Big", cmc=7), 1),
            make_entry(make_card("b", "Bigger", cmc=12), 2),
            make_entry(make_card("c", "Small", cmc=2), 3),
        ]

        stats = compute_deck_statistics(entries)
        curve = {p.cmc: p.count for p in stats.mana_curve}

        assert curve == {"2": 3, "7+": 3}
        assert [p.cmc for p in stats.mana_curve] == ["2", "7+"]

    def test_colorless_counts_under_c(self) -> None:
        entries = [
            make_entry(make_land("a", "Mountain"), 10),
            make_entry(make_card("b", "Izzet Charm", colors=frozenset({"U", "R"})), 2),
        ]

        stats = compute_deck_statistics(entries)

        assert stats.color_distribution["C"] == 10
        assert stats.color_distribution["U"] == 2
        assert stats.color_distribution["R"] == 2
        assert stats.color_distribution["W"] == 0

    def test_weighted_average_cmc(self) -> None:
        entries = [
            make_entry(make_card("a", "One", cmc=1), 3),
            make_entry(make_card("b", "Four", cmc=4), 1),
        ]

        stats = compute_deck_statistics(entries)

        assert stats.avg_cmc == 1.75
