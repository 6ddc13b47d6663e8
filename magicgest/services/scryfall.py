"""
Scryfall API client.

Thin async wrapper over the two catalog reads the app needs: search and
fetch-by-id (plus random). Calls are single request/response with no retry;
failures surface immediately as UpstreamError.

API docs: https://scryfall.com/docs/api
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx
from fastapi import Request

from magicgest.config import settings
from magicgest.models.failure import NotFoundError, UpstreamError

logger = logging.getLogger(__name__)


@dataclass
class SearchPage:
    """One page of Scryfall search results."""

    cards: list[dict[str, Any]] = field(default_factory=list)
    has_more: bool = False
    total_cards: int = 0


def _upstream_message(response: httpx.Response) -> str:
    """Scryfall error objects carry a human readable 'details' field."""
    try:
        payload = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(payload, dict) and payload.get("details"):
        return str(payload["details"])
    return response.reason_phrase


class ScryfallClient:
    """
    Scryfall client bound to one httpx.AsyncClient.

    Args:
        base_url: API root, defaults to settings.scryfall_api_url
        timeout: Request timeout in seconds
        client: Optional pre-built httpx client (tests, connection reuse)
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.scryfall_api_url).rstrip("/")
        self._client = client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.scryfall_timeout,
            headers={"User-Agent": settings.user_agent, "Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            return await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.error("Scryfall request to %s failed: %s", path, e)
            raise UpstreamError("Failed to reach Scryfall", detail=str(e)) from e

    async def search(self, query: str, page: int = 1) -> SearchPage:
        """
        Full-text card search.

        Returns:
            SearchPage with the card objects, has_more and total_cards.
            A query with no matches returns an empty page.

        Raises:
            UpstreamError: If Scryfall is unreachable or answers with an error
        """
        response = await self._get("/cards/search", params={"q": query, "page": page})

        if response.status_code == 404:
            return SearchPage()
        if response.is_error:
            message = _upstream_message(response)
            logger.error("Scryfall search failed (%d): %s", response.status_code, message)
            raise UpstreamError("Failed to search cards", detail=message)

        data = response.json()
        return SearchPage(
            cards=list(data.get("data", [])),
            has_more=bool(data.get("has_more", False)),
            total_cards=int(data.get("total_cards", 0)),
        )

    async def get_card(self, card_id: str) -> dict[str, Any]:
        """
        Fetch one card by Scryfall id.

        Raises:
            NotFoundError: If Scryfall has no card with this id
            UpstreamError: If Scryfall is unreachable or answers with an error
        """
        response = await self._get(f"/cards/{card_id}")

        if response.status_code == 404:
            raise NotFoundError(f"Card '{card_id}' not found on Scryfall")
        if response.is_error:
            message = _upstream_message(response)
            logger.error("Scryfall card fetch failed (%d): %s", response.status_code, message)
            raise UpstreamError("Failed to fetch card", detail=message)

        card: dict[str, Any] = response.json()
        return card

    async def random_card(self) -> dict[str, Any]:
        """Fetch a random card."""
        response = await self._get("/cards/random")

        if response.is_error:
            message = _upstream_message(response)
            logger.error("Scryfall random card failed (%d): %s", response.status_code, message)
            raise UpstreamError("Failed to get random card", detail=message)

        card: dict[str, Any] = response.json()
        return card


def get_scryfall_client(request: Request) -> ScryfallClient:
    """Dependency returning the process-wide Scryfall client."""
    client: ScryfallClient = request.app.state.scryfall
    return client
