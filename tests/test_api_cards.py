"""Tests for card API endpoints."""

import httpx
import pytest
import respx
from factories import SCRYFALL_URL, make_card, scryfall_card
from httpx import AsyncClient


class TestSearchEndpoint:
    @pytest.mark.asyncio
    async def test_requires_query(self, client: AsyncClient) -> None:
        missing = await client.get("/cards/search")
        blank = await client.get("/cards/search", params={"q": "  "})

        assert missing.status_code == 400
        assert missing.json()["detail"] == "Query parameter required"
        assert blank.status_code == 400

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_caches_results(self, client: AsyncClient) -> None:
        """Every card in the page lands in the local cache."""
        respx.get(f"{SCRYFALL_URL}/cards/search").mock(
            return_value=httpx.Response(
                200,
                json={
                    "object": "list",
                    "total_cards": 3,
                    "has_more": True,
                    "data": [
                        scryfall_card("a", "Lightning Bolt"),
                        {"object": "card", "name": "No Id"},
                        scryfall_card("b", "Lightning Helix", colors=["W", "R"]),
                    ],
                },
            )
        )

        response = await client.get("/cards/search", params={"q": "lightning"})

        assert response.status_code == 200
        body = response.json()
        assert [c["id"] for c in body["cards"]] == ["a", "b"]
        assert body["cards"][1]["colors"] == ["W", "R"]
        assert body["has_more"] is True
        assert body["total_cards"] == 3

        cached = (await client.get("/cards", params={"name": "helix"})).json()
        assert [c["id"] for c in cached] == ["b"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_no_matches(self, client: AsyncClient) -> None:
        respx.get(f"{SCRYFALL_URL}/cards/search").mock(return_value=httpx.Response(404))

        response = await client.get("/cards/search", params={"q": "zzzz"})

        assert response.status_code == 200
        assert response.json() == {"cards": [], "has_more": False, "total_cards": 0}

    @pytest.mark.asyncio
    @respx.mock
    async def test_upstream_failure(self, client: AsyncClient) -> None:
        respx.get(f"{SCRYFALL_URL}/cards/search").mock(
            return_value=httpx.Response(503, json={"object": "error", "details": "Maintenance"})
        )

        response = await client.get("/cards/search", params={"q": "bolt"})

        assert response.status_code == 502
        body = response.json()
        assert body["failure"]["kind"] == "external_api_error"
        assert body["failure"]["detail"] == "Maintenance"


class TestGetCard:
    @pytest.mark.asyncio
    @respx.mock
    async def test_served_from_cache(self, client: AsyncClient, seed_cards) -> None:
        """A cached card never hits Scryfall unless refresh is requested."""
        await seed_cards(make_card("a", "Lightning Bolt", usd="1.00"))
        route = respx.get(f"{SCRYFALL_URL}/cards/a").mock(
            return_value=httpx.Response(200, json=scryfall_card("a", "Lightning Bolt"))
        )

        cached = await client.get("/cards/a")
        assert cached.json()["prices"]["usd"] == "1.00"
        assert not route.called

        refreshed = await client.get("/cards/a", params={"refresh": "true"})
        assert refreshed.json()["prices"]["usd"] == "1.50"
        assert route.called

        assert (await client.get("/cards/a")).json()["prices"]["usd"] == "1.50"

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetches_uncached_card(self, client: AsyncClient) -> None:
        respx.get(f"{SCRYFALL_URL}/cards/new").mock(
            return_value=httpx.Response(200, json=scryfall_card("new", "Opt", mana_cost="{U}"))
        )

        response = await client.get("/cards/new")

        assert response.status_code == 200
        assert response.json()["mana_cost"] == "{U}"
        assert response.json()["image_uri"] == "https://cards.scryfall.io/normal/new.jpg"

    @pytest.mark.asyncio
    @respx.mock
    async def test_unknown_card(self, client: AsyncClient) -> None:
        respx.get(f"{SCRYFALL_URL}/cards/ghost").mock(return_value=httpx.Response(404))

        response = await client.get("/cards/ghost")

        assert response.status_code == 404
        assert response.json()["failure"]["kind"] == "not_found"

    @pytest.mark.asyncio
    @respx.mock
    async def test_random_card(self, client: AsyncClient) -> None:
        respx.get(f"{SCRYFALL_URL}/cards/random").mock(
            return_value=httpx.Response(200, json=scryfall_card("rnd", "Storm Crow"))
        )

        response = await client.get("/cards/random/card")

        assert response.json()["name"] == "Storm Crow"
        assert [c["id"] for c in (await client.get("/cards")).json()] == ["rnd"]
