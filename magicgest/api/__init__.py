from magicgest.api.alerts import router as alerts_router
from magicgest.api.budget import router as budget_router
from magicgest.api.cards import router as cards_router
from magicgest.api.collection import router as collection_router
from magicgest.api.decks import router as decks_router
from magicgest.api.export import router as export_router
from magicgest.api.health import router as health_router
from magicgest.api.prices import router as prices_router
from magicgest.api.wishlist import router as wishlist_router

__all__ = [
    "alerts_router",
    "budget_router",
    "cards_router",
    "collection_router",
    "decks_router",
    "export_router",
    "health_router",
    "prices_router",
    "wishlist_router",
]
