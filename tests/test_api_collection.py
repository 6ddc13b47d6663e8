"""Tests for collection and wishlist API endpoints."""

import pytest
from factories import make_card
from httpx import AsyncClient


@pytest.fixture
async def cached_cards(seed_cards) -> None:
    await seed_cards(
        make_card("bolt", "Lightning Bolt", usd="2.00", rarity="common"),
        make_card("dragon", "Shivan Dragon", usd="12.00", rarity="rare", set_code="m19"),
        make_card("nopx", "Unpriced", usd=None),
    )


class TestCollectionEndpoint:
    @pytest.mark.asyncio
    async def test_empty_collection(self, client: AsyncClient) -> None:
        """Returns an empty list when nothing is owned."""
        response = await client.get("/collection")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_add_and_merge(self, client: AsyncClient, cached_cards: None) -> None:
        """Adding the same card/condition/finish twice increases quantity."""
        first = await client.post("/collection", json={"card_id": "bolt", "quantity": 2})
        second = await client.post("/collection", json={"card_id": "bolt", "quantity": 1})

        assert first.status_code == 200
        assert first.json()["message"] == "Card added to collection"
        assert first.json()["created"] is True
        assert second.json()["message"] == "Card quantity updated"
        assert second.json()["entry"]["quantity"] == 3

        listing = (await client.get("/collection")).json()
        assert len(listing) == 1
        assert listing[0]["card"]["name"] == "Lightning Bolt"

    @pytest.mark.asyncio
    async def test_add_uncached_card(self, client: AsyncClient) -> None:
        """Unknown card ids are reported with the failure envelope."""
        response = await client.post("/collection", json={"card_id": "nope"})

        assert response.status_code == 404
        body = response.json()
        assert body["failure"]["kind"] == "not_found"
        assert body["error"] == "Card 'nope' not found in database"

    @pytest.mark.asyncio
    async def test_add_requires_card_id(self, client: AsyncClient) -> None:
        response = await client.post("/collection", json={"quantity": 1})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_update_and_delete_via_zero(
        self, client: AsyncClient, cached_cards: None
    ) -> None:
        """Updating quantity to 0 removes the entry."""
        added = await client.post("/collection", json={"card_id": "bolt", "quantity": 2})
        entry_id = added.json()["entry"]["id"]

        updated = await client.put(f"/collection/{entry_id}", json={"notes": "binder"})
        assert updated.json()["message"] == "Card updated successfully"
        assert updated.json()["entry"]["notes"] == "binder"

        removed = await client.put(f"/collection/{entry_id}", json={"quantity": 0})
        assert removed.json() == {
            "message": "Card removed from collection",
            "deleted": True,
            "entry": None,
        }
        assert (await client.get("/collection")).json() == []

    @pytest.mark.asyncio
    async def test_update_without_fields(self, client: AsyncClient) -> None:
        response = await client.put("/collection/1", json={})

        assert response.status_code == 400
        assert response.json()["detail"] == "No fields to update"

    @pytest.mark.asyncio
    async def test_delete_missing(self, client: AsyncClient) -> None:
        response = await client.delete("/collection/42")

        assert response.status_code == 404
        assert response.json()["error"] == "Card not found in collection"

    @pytest.mark.asyncio
    async def test_filter_and_sort(self, client: AsyncClient, cached_cards: None) -> None:
        await client.post("/collection", json={"card_id": "bolt"})
        await client.post("/collection", json={"card_id": "dragon"})

        filtered = await client.get("/collection", params={"filter": "dragon"})
        by_name = await client.get("/collection", params={"sort_by": "name", "order": "asc"})
        bad_sort = await client.get("/collection", params={"sort_by": "oracle_text"})

        assert [e["card"]["id"] for e in filtered.json()] == ["dragon"]
        assert [e["card"]["name"] for e in by_name.json()] == ["Lightning Bolt", "Shivan Dragon"]
        assert bad_sort.status_code == 400

    @pytest.mark.asyncio
    async def test_stats(self, client: AsyncClient, cached_cards: None) -> None:
        await client.post("/collection", json={"card_id": "bolt", "quantity": 4})
        await client.post("/collection", json={"card_id": "dragon", "quantity": 1})
        await client.post("/collection", json={"card_id": "nopx", "quantity": 2})

        stats = (await client.get("/collection/stats")).json()

        assert stats["total_cards"] == 7
        assert stats["unique_cards"] == 3
        assert stats["total_value"] == 20.0
        assert stats["currency"] == "USD"
        rarities = {r["rarity"]: r["count"] for r in stats["by_rarity"]}
        assert rarities == {"common": 6, "rare": 1}
        assert stats["top_sets"][0]["set_code"] == "m10"

    @pytest.mark.asyncio
    async def test_stats_invalid_platform(self, client: AsyncClient) -> None:
        response = await client.get("/collection/stats", params={"platform": "ebay"})

        assert response.status_code == 422


class TestWishlistEndpoint:
    @pytest.mark.asyncio
    async def test_add_and_conflict(self, client: AsyncClient, cached_cards: None) -> None:
        """A card can only be wishlisted once."""
        first = await client.post("/wishlist", json={"card_id": "bolt", "priority": "high"})
        second = await client.post("/wishlist", json={"card_id": "bolt"})

        assert first.status_code == 200
        assert first.json()["priority"] == "high"
        assert second.status_code == 409
        assert second.json()["failure"]["kind"] == "conflict"

    @pytest.mark.asyncio
    async def test_invalid_priority(self, client: AsyncClient, cached_cards: None) -> None:
        response = await client.post("/wishlist", json={"card_id": "bolt", "priority": "urgent"})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_affordable_and_stats(self, client: AsyncClient, cached_cards: None) -> None:
        """Affordable means a known price at or under the ceiling."""
        await client.post("/wishlist", json={"card_id": "bolt", "max_price": 2.0, "quantity": 2})
        await client.post("/wishlist", json={"card_id": "dragon", "max_price": 5.0})
        await client.post("/wishlist", json={"card_id": "nopx", "max_price": 1.0})

        affordable = (await client.get("/wishlist/affordable")).json()
        stats = (await client.get("/wishlist/stats")).json()

        assert [item["card"]["id"] for item in affordable] == ["bolt"]
        assert affordable[0]["current_price"] == 2.0
        assert stats["total_items"] == 3
        assert stats["total_value"] == 16.0
        assert stats["affordable_count"] == 1
        assert stats["affordable_value"] == 4.0
        assert stats["by_priority"] == {"medium": 3}

    @pytest.mark.asyncio
    async def test_update_clears_ceiling(self, client: AsyncClient, cached_cards: None) -> None:
        added = await client.post("/wishlist", json={"card_id": "bolt", "max_price": 3.0})
        entry_id = added.json()["id"]

        response = await client.put(f"/wishlist/{entry_id}", json={"max_price": None})

        assert response.status_code == 200
        assert response.json()["max_price"] is None

    @pytest.mark.asyncio
    async def test_update_missing(self, client: AsyncClient) -> None:
        response = await client.put("/wishlist/99", json={"quantity": 2})

        assert response.status_code == 404
        assert response.json()["error"] == "Item not found"

    @pytest.mark.asyncio
    async def test_delete(self, client: AsyncClient, cached_cards: None) -> None:
        added = await client.post("/wishlist", json={"card_id": "bolt"})

        response = await client.delete(f"/wishlist/{added.json()['id']}")

        assert response.json() == {"message": "Item removed from wishlist"}
        assert (await client.get("/wishlist")).json() == []
