"""Tests for price trend computation."""

from datetime import UTC, datetime, timedelta

from factories import make_card

from magicgest.analysis.trends import compute_price_trends, percent_change
from magicgest.models.price import PricePoint

T0 = datetime(2024, 3, 1, tzinfo=UTC)


def _point(point_id: int, card_id: str, price: float | None, day: int) -> PricePoint:
    return PricePoint(
        id=point_id,
        card_id=card_id,
        platform="scryfall_usd",
        price=price,
        currency="USD",
        recorded_at=T0 + timedelta(days=day),
    )


class TestPercentChange:
    def test_rise(self) -> None:
        assert percent_change(5.0, 6.0) == 20.0

    def test_zero_or_missing_old_price(self) -> None:
        assert percent_change(0.0, 6.0) is None
        assert percent_change(None, 6.0) is None
        assert percent_change(5.0, None) is None


class TestComputePriceTrends:
    def test_gainer_and_loser(self) -> None:
        points = [
            _point(1, "a", 5.0, 0),
            _point(2, "a", 6.0, 3),
            _point(3, "b", 10.0, 0),
            _point(4, "b", 7.5, 3),
        ]
        cards = {"a": make_card("a", "Gainer"), "b": make_card("b", "Loser")}

        report = compute_price_trends(points, cards)

        assert [t.name for t in report.gainers] == ["Gainer"]
        assert report.gainers[0].percent_change == 20.0
        assert report.gainers[0].old_price == 5.0
        assert report.gainers[0].new_price == 6.0
        assert report.losers[0].percent_change == -25.0

    def test_uses_earliest_and_latest_regardless_of_input_order(self) -> None:
        points = [_point(3, "a", 8.0, 6), _point(1, "a", 4.0, 0), _point(2, "a", 100.0, 2)]

        report = compute_price_trends(points, {})

        assert report.gainers[0].percent_change == 100.0
        assert report.gainers[0].name == "a"

    def test_zero_earliest_price_excluded(self) -> None:
        points = [_point(1, "a", 0.0, 0), _point(2, "a", 3.0, 1)]

        report = compute_price_trends(points, {})

        assert report.gainers == []
        assert report.losers == []

    def test_unchanged_price_in_neither_list(self) -> None:
        points = [_point(1, "a", 2.0, 0), _point(2, "a", 2.0, 1)]

        report = compute_price_trends(points, {})

        assert report.gainers == [] and report.losers == []

    def test_limit_split_between_gainers_and_losers(self) -> None:
        points = []
        for i in range(5):
            points += [_point(i * 2, f"up{i}", 10.0, 0), _point(i * 2 + 1, f"up{i}", 11.0 + i, 1)]
        for i in range(5):
            points += [
                _point(100 + i * 2, f"down{i}", 10.0, 0),
                _point(101 + i * 2, f"down{i}", 9.0 - i, 1),
            ]

        report = compute_price_trends(points, {}, limit=4)

        assert [t.card_id for t in report.gainers] == ["up4", "up3"]
        assert [t.card_id for t in report.losers] == ["down4", "down3"]
