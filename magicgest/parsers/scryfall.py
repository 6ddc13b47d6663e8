"""
Scryfall card parsing.

Turns Scryfall card objects into CardRecord values.

Card objects: https://scryfall.com/docs/api/cards
"""

from typing import Any

from magicgest.models.card import VALID_RARITIES, CardRecord


def _normalize_rarity(rarity: str | None) -> str:
    """Normalize rarity to one of: common, uncommon, rare, mythic."""
    return rarity if rarity in VALID_RARITIES else "common"


def _image_uri(card: dict[str, Any]) -> str | None:
    """Normal image, falling back to small, then to the front face."""
    image_uris = card.get("image_uris")
    if not image_uris:
        faces = card.get("card_faces") or []
        image_uris = faces[0].get("image_uris") if faces else None
    if not image_uris:
        return None
    return image_uris.get("normal") or image_uris.get("small")


def _colors(card: dict[str, Any]) -> frozenset[str]:
    colors = card.get("colors")
    if colors is None:
        # Double-faced cards carry colors per face
        colors = [c for face in card.get("card_faces") or [] for c in face.get("colors") or []]
    return frozenset(colors)


def parse_card(card: dict[str, Any]) -> CardRecord:
    """
    Build a CardRecord from a Scryfall card object.

    Args:
        card: Decoded Scryfall card JSON

    Returns:
        CardRecord with every cached field populated

    Raises:
        ValueError: If the object has no id or name
    """
    card_id = card.get("id")
    name = card.get("name")
    if not card_id or not name:
        raise ValueError("Scryfall card object is missing id or name")

    return CardRecord(
        id=str(card_id),
        name=str(name),
        set_code=card.get("set"),
        set_name=card.get("set_name"),
        collector_number=card.get("collector_number"),
        rarity=_normalize_rarity(card.get("rarity")),
        image_uri=_image_uri(card),
        mana_cost=card.get("mana_cost") or None,
        type_line=card.get("type_line") or "",
        oracle_text=card.get("oracle_text") or None,
        colors=_colors(card),
        cmc=float(card.get("cmc") or 0),
        prices=dict(card.get("prices") or {}),
        scryfall_uri=card.get("scryfall_uri"),
    )
