"""
Export endpoints.

Download the collection as JSON or CSV, or a deck as a plain-text
decklist. Responses are file attachments rather than API objects.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from magicgest.db import get_deck_cards, list_collection, require_deck
from magicgest.db.database import get_session
from magicgest.db.operations import deck_to_model
from magicgest.services.exporters import (
    collection_to_csv,
    collection_to_json,
    deck_filename,
    format_deck_text,
)

router = APIRouter(prefix="/export", tags=["export"])

COLLECTION_JSON_FILENAME = "magicgest-collection.json"
COLLECTION_CSV_FILENAME = "magicgest-collection.csv"


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f"attachment; filename={filename}"}


@router.get("/collection")
async def export_collection_json(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> JSONResponse:
    """The whole collection as a JSON array."""
    entries = await list_collection(session, descending=False)
    return JSONResponse(
        content=collection_to_json(entries),
        headers=_attachment(COLLECTION_JSON_FILENAME),
    )


@router.get("/collection/csv")
async def export_collection_csv(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> Response:
    """The whole collection as a CSV table."""
    entries = await list_collection(session, descending=False)
    return Response(
        content=collection_to_csv(entries),
        media_type="text/csv",
        headers=_attachment(COLLECTION_CSV_FILENAME),
    )


@router.get("/deck/{deck_id}")
async def export_deck(
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> PlainTextResponse:
    """A deck as a text decklist, mainboard first, then the sideboard if any."""
    deck = deck_to_model(await require_deck(session, deck_id))
    entries = await get_deck_cards(session, deck_id)
    return PlainTextResponse(
        content=format_deck_text(deck, entries),
        headers=_attachment(deck_filename(deck.name)),
    )
