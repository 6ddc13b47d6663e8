"""Tests for format legality analysis."""

from factories import make_card, make_entry, make_land

from magicgest.analysis.legality import analyze_deck
from magicgest.models.deck import Deck


def _spells(count: int, cmc: float = 2.0) -> list:
    return [
        make_entry(make_card(f"s{i}", f"Spell {i}", cmc=cmc), 1, entry_id=i)
        for i in range(count)
    ]


class TestDeckSize:
    def test_commander_needs_exactly_99(self) -> None:
        deck = Deck(id=1, name="EDH", format="Commander")
        mainboard = [make_entry(make_land("l", "Forest"), 38), *_spells(60)]

        report = analyze_deck(deck, mainboard)

        assert report.total_cards == 98
        assert not report.is_legal
        assert any("99" in issue and "98" in issue for issue in report.issues)

    def test_commander_with_99_is_legal(self) -> None:
        deck = Deck(id=1, name="EDH", format="Commander")
        mainboard = [make_entry(make_land("l", "Forest"), 39), *_spells(60)]

        report = analyze_deck(deck, mainboard)

        assert report.is_legal

    def test_constructed_minimum(self) -> None:
        deck = Deck(id=1, name="Burn", format="Modern")
        mainboard = [make_entry(make_land("l", "Mountain"), 20), *_spells(30)]

        report = analyze_deck(deck, mainboard)

        assert report.issues == ["Modern decks must have at least 60 cards (current: 50)"]

    def test_unknown_format_has_no_size_rule(self) -> None:
        deck = Deck(id=1, name="Kitchen Table", format="Casual")
        mainboard = [make_entry(make_land("l", "Mountain"), 5), *_spells(10)]

        assert analyze_deck(deck, mainboard).is_legal

    def test_format_match_is_case_sensitive(self) -> None:
        deck = Deck(id=1, name="Burn", format="modern")
        mainboard = [make_entry(make_land("l", "Mountain"), 5), *_spells(10)]

        assert analyze_deck(deck, mainboard).issues == []


class TestCopyLimit:
    def test_more_than_four_copies(self) -> None:
        deck = Deck(id=1, name="Burn", format="Standard")
        bolt = make_card("bolt", "Lightning Bolt")
        mainboard = [
            make_entry(bolt, 5),
            make_entry(make_land("l", "Mountain"), 24),
            *_spells(31),
        ]

        report = analyze_deck(deck, mainboard)

        assert "Lightning Bolt: 5 copies (max 4 allowed)" in report.issues

    def test_basic_lands_are_exempt(self) -> None:
        deck = Deck(id=1, name="Burn", format="Standard")
        mainboard = [make_entry(make_land("l", "Mountain"), 24), *_spells(36)]

        assert analyze_deck(deck, mainboard).is_legal

    def test_nonbasic_lands_are_limited(self) -> None:
        deck = Deck(id=1, name="Burn", format="Standard")
        mainboard = [
            make_entry(make_land("l", "Mountain"), 20),
            make_entry(make_land("n", "Sunbaked Canyon", basic=False), 5),
            *_spells(35),
        ]

        report = analyze_deck(deck, mainboard)

        assert "Sunbaked Canyon: 5 copies (max 4 allowed)" in report.issues

    def test_commander_skips_copy_limit(self) -> None:
        deck = Deck(id=1, name="Rats", format="Commander")
        rats = make_card("rat", "Relentless Rats", type_line="Creature — Rat")
        mainboard = [make_entry(rats, 30), make_entry(make_land("l", "Swamp"), 35), *_spells(34)]

        assert analyze_deck(deck, mainboard).is_legal


class TestSuggestions:
    def test_few_lands(self) -> None:
        deck = Deck(id=1, name="Burn", format="Modern")
        mainboard = [make_entry(make_land("l", "Mountain"), 10), *_spells(50)]

        report = analyze_deck(deck, mainboard)

        assert report.land_percentage == 16.7
        assert "Consider adding more lands (current: 16.7%)" in report.suggestions
        assert report.is_legal

    def test_too_many_lands(self) -> None:
        deck = Deck(id=1, name="Lands", format="Modern")
        mainboard = [make_entry(make_land("l", "Mountain"), 40), *_spells(20)]

        report = analyze_deck(deck, mainboard)

        assert "Too many lands (current: 66.7%)" in report.suggestions

    def test_high_curve(self) -> None:
        deck = Deck(id=1, name="Ramp", format="")
        mainboard = [make_entry(make_land("l", "Forest"), 20), *_spells(20, cmc=9)]

        report = analyze_deck(deck, mainboard)

        assert report.avg_cmc == 4.5
        assert any(s.startswith("High average CMC (4.50)") for s in report.suggestions)

    def test_empty_mainboard(self) -> None:
        deck = Deck(id=1, name="Empty", format="")

        report = analyze_deck(deck, [])

        assert report.total_cards == 0
        assert report.land_percentage == 0.0
        assert report.avg_cmc == 0.0
        assert report.suggestions == ["Consider adding more lands (current: 0.0%)"]
