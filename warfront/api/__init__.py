from warfront.api.auth import router as auth_router
from warfront.api.batches import router as batches_router
from warfront.api.battles import multiplayer_router
from warfront.api.battles import router as battles_router
from warfront.api.cards import router as cards_router
from warfront.api.friends import router as friends_router
from warfront.api.health import router as health_router
from warfront.api.inventory import router as inventory_router
from warfront.api.notifications import router as notifications_router
from warfront.api.packs import router as packs_router
from warfront.api.users import router as users_router

__all__ = [
    "auth_router",
    "batches_router",
    "battles_router",
    "cards_router",
    "friends_router",
    "health_router",
    "inventory_router",
    "multiplayer_router",
    "notifications_router",
    "packs_router",
    "users_router",
]
