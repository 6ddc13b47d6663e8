"""Tests for domain models and the failure envelope."""

import pytest

from magicgest.models.card import sort_colors
from magicgest.models.failure import (
    ConflictError,
    EmptyDeckError,
    FailureKind,
    NotFoundError,
    error_payload,
    storage_failure,
)
from magicgest.models.platform import Currency, PriceSource, parse_price


class TestParsePrice:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("1.23", 1.23),
            ("0.00", 0.0),
            (4, 4.0),
            (None, None),
            ("", None),
            ("n/a", None),
            ("nan", None),
            (True, None),
        ],
    )
    def test_parse(self, raw: object, expected: float | None) -> None:
        assert parse_price(raw) == expected


class TestPriceSource:
    def test_relayed_sources_share_fields(self) -> None:
        assert PriceSource.TCGPLAYER.price_field == "usd"
        assert PriceSource.CARDMARKET.price_field == "eur"
        assert PriceSource.CARDMARKET.currency == Currency.EUR

    def test_foil_sources(self) -> None:
        assert PriceSource.SCRYFALL_USD_FOIL.price_field == "usd_foil"
        assert PriceSource.SCRYFALL_EUR_FOIL.currency == Currency.EUR


class TestSortColors:
    def test_wubrg_order(self) -> None:
        assert sort_colors({"G", "W", "R"}) == ["W", "R", "G"]

    def test_unknown_symbols_last(self) -> None:
        assert sort_colors(["X", "U"]) == ["U", "X"]


class TestFailureEnvelope:
    def test_not_found(self) -> None:
        error = NotFoundError("Deck not found")

        payload = error_payload(error.to_response())

        assert error.status_code == 404
        assert payload == {
            "error": "Deck not found",
            "failure": {
                "kind": "not_found",
                "message": "Deck not found",
                "detail": None,
                "suggestion": None,
            },
        }

    def test_status_codes(self) -> None:
        assert ConflictError("dup").status_code == 409
        assert EmptyDeckError(3).status_code == 400
        assert EmptyDeckError(3).deck_id == 3

    def test_storage_failure_hides_driver_message(self) -> None:
        response = storage_failure(RuntimeError("UNIQUE constraint failed: secret_table"))

        assert response.failure.kind == FailureKind.STORAGE_ERROR
        assert response.failure.detail == "RuntimeError"
        assert "secret_table" not in response.error
