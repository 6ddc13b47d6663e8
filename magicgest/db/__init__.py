from magicgest.db.database import Database, get_session
from magicgest.db.operations import (
    add_card_to_deck,
    add_to_collection,
    add_to_wishlist,
    add_transaction,
    card_to_model,
    check_alerts,
    create_alert,
    create_collection_snapshot,
    create_deck,
    delete_alert,
    delete_deck,
    delete_transaction,
    get_card,
    get_cards_by_ids,
    get_collection_entry,
    get_deck_cards,
    get_platform_history,
    get_price_history,
    get_value_history,
    list_alerts,
    list_collection,
    list_decks,
    list_transactions,
    list_triggered_alerts,
    list_wishlist,
    record_collection_prices,
    record_price,
    remove_card_from_deck,
    remove_from_collection,
    remove_from_wishlist,
    require_card,
    require_deck,
    search_cached_cards,
    update_alert,
    update_collection_entry,
    update_deck,
    update_deck_card,
    update_wishlist_entry,
    upsert_card,
    upsert_cards,
)

__all__ = [
    "Database",
    "add_card_to_deck",
    "add_to_collection",
    "add_to_wishlist",
    "add_transaction",
    "card_to_model",
    "check_alerts",
    "create_alert",
    "create_collection_snapshot",
    "create_deck",
    "delete_alert",
    "delete_deck",
    "delete_transaction",
    "get_card",
    "get_cards_by_ids",
    "get_collection_entry",
    "get_deck_cards",
    "get_platform_history",
    "get_price_history",
    "get_session",
    "get_value_history",
    "list_alerts",
    "list_collection",
    "list_decks",
    "list_transactions",
    "list_triggered_alerts",
    "list_wishlist",
    "record_collection_prices",
    "record_price",
    "remove_card_from_deck",
    "remove_from_collection",
    "remove_from_wishlist",
    "require_card",
    "require_deck",
    "search_cached_cards",
    "update_alert",
    "update_collection_entry",
    "update_deck",
    "update_deck_card",
    "update_wishlist_entry",
    "upsert_card",
    "upsert_cards",
]
