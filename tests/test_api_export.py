"""Tests for export API endpoints."""

import pytest
from factories import make_card
from httpx import AsyncClient


@pytest.fixture
async def owned(client: AsyncClient, seed_cards) -> None:
    await seed_cards(make_card("bolt", "Lightning Bolt"), make_card("opt", "Opt"))
    await client.post("/collection", json={"card_id": "bolt", "quantity": 4, "foil": True})
    await client.post("/collection", json={"card_id": "opt", "quantity": 2})


class TestCollectionExport:
    @pytest.mark.asyncio
    async def test_json(self, client: AsyncClient, owned: None) -> None:
        response = await client.get("/export/collection")

        assert response.status_code == 200
        assert "magicgest-collection.json" in response.headers["content-disposition"]
        rows = response.json()
        assert [r["name"] for r in rows] == ["Lightning Bolt", "Opt"]
        assert rows[0]["foil"] is True
        assert rows[0]["scryfall_id"] == "bolt"

    @pytest.mark.asyncio
    async def test_csv(self, client: AsyncClient, owned: None) -> None:
        response = await client.get("/export/collection/csv")

        assert response.headers["content-type"].startswith("text/csv")
        assert "magicgest-collection.csv" in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0].startswith("Name,Set Code")
        assert lines[1] == "Lightning Bolt,m10,Magic 2010,1,4,NM,Yes,en"
        assert len(lines) == 3

    @pytest.mark.asyncio
    async def test_empty_collection_csv_has_header(self, client: AsyncClient) -> None:
        response = await client.get("/export/collection/csv")

        assert len(response.text.splitlines()) == 1


class TestDeckExport:
    @pytest.mark.asyncio
    async def test_deck_text(self, client: AsyncClient, seed_cards) -> None:
        await seed_cards(make_card("bolt", "Lightning Bolt"), make_card("abrade", "Abrade"))
        deck = await client.post("/decks", json={"name": "Mono Red", "format": "Modern"})
        deck_id = deck.json()["id"]
        await client.post(f"/decks/{deck_id}/cards", json={"card_id": "bolt", "quantity": 4})
        await client.post(
            f"/decks/{deck_id}/cards",
            json={"card_id": "abrade", "quantity": 2, "category": "sideboard"},
        )

        response = await client.get(f"/export/deck/{deck_id}")

        assert response.status_code == 200
        assert "Mono_Red.txt" in response.headers["content-disposition"]
        assert response.text == (
            "// Mono Red\n// Format: Modern\n\n4 Lightning Bolt\n\nSideboard\n2 Abrade\n"
        )

    @pytest.mark.asyncio
    async def test_missing_deck(self, client: AsyncClient) -> None:
        response = await client.get("/export/deck/404")

        assert response.status_code == 404
