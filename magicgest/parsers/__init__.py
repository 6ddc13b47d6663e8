from magicgest.parsers.scryfall import parse_card

__all__ = ["parse_card"]
