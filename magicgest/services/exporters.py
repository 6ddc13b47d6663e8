"""
Collection and deck exporters.

Render owned cards and decklists as downloadable files. Input is already
loaded from storage; nothing here queries the database.
"""

import csv
import io
import re
from collections.abc import Iterable, Sequence
from typing import Any

from magicgest.models.card import CollectionEntry
from magicgest.models.deck import Deck, DeckCardEntry, DeckCategory

CSV_HEADER = [
    "Name",
    "Set Code",
    "Set Name",
    "Collector Number",
    "Quantity",
    "Condition",
    "Foil",
    "Language",
]


def collection_to_json(entries: Iterable[CollectionEntry]) -> list[dict[str, Any]]:
    """One JSON object per owned-card row."""
    return [
        {
            "name": entry.card.name,
            "set_code": entry.card.set_code,
            "set_name": entry.card.set_name,
            "collector_number": entry.card.collector_number,
            "quantity": entry.quantity,
            "condition": entry.condition,
            "foil": entry.foil,
            "language": entry.language,
            "notes": entry.notes,
            "scryfall_id": entry.card.id,
        }
        for entry in entries
    ]


def collection_to_csv(entries: Iterable[CollectionEntry]) -> str:
    """CSV table with a header row. Foil renders as Yes/No."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for entry in entries:
        writer.writerow(
            [
                entry.card.name,
                entry.card.set_code or "",
                entry.card.set_name or "",
                entry.card.collector_number or "",
                entry.quantity,
                entry.condition,
                "Yes" if entry.foil else "No",
                entry.language,
            ]
        )

    return buffer.getvalue()


def format_deck_text(deck: Deck, entries: Sequence[DeckCardEntry]) -> str:
    """
    Format a deck as a plain-text decklist.

    Layout:
        // <name>
        // Format: <format>      (only when the deck has a format)
        <blank>
        <qty> <name>            (mainboard)
        <blank>
        Sideboard               (only when sideboard entries exist)
        <qty> <name>
    """
    lines: list[str] = [f"// {deck.name}"]
    if deck.format:
        lines.append(f"// Format: {deck.format}")
    lines.append("")

    mainboard = [e for e in entries if e.category == DeckCategory.MAINBOARD]
    sideboard = [e for e in entries if e.category == DeckCategory.SIDEBOARD]

    for entry in mainboard:
        lines.append(_format_card_line(entry))

    if sideboard:
        lines.append("")
        lines.append("Sideboard")
        for entry in sideboard:
            lines.append(_format_card_line(entry))

    return "\n".join(lines) + "\n"


def _format_card_line(entry: DeckCardEntry) -> str:
    return f"{entry.quantity} {entry.card.name}"


def deck_filename(deck_name: str) -> str:
    """Attachment filename: every non-alphanumeric character becomes '_'."""
    return re.sub(r"[^a-zA-Z0-9]", "_", deck_name) + ".txt"
