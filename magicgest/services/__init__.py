"""
MagicGest services.

External catalog access and file exporters.
"""

from magicgest.services.exporters import (
    collection_to_csv,
    collection_to_json,
    deck_filename,
    format_deck_text,
)
from magicgest.services.scryfall import ScryfallClient, SearchPage, get_scryfall_client

__all__ = [
    "ScryfallClient",
    "SearchPage",
    "collection_to_csv",
    "collection_to_json",
    "deck_filename",
    "format_deck_text",
    "get_scryfall_client",
]
