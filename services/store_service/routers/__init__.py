"""Store service routers package."""

from services.store_service.routers.addresses import router as addresses_router
from services.store_service.routers.cart import router as cart_router
from services.store_service.routers.dashboard import router as dashboard_router
from services.store_service.routers.notifications import router as notifications_router
from services.store_service.routers.orders import router as orders_router
from services.store_service.routers.products import router as products_router

__all__ = [
    "addresses_router",
    "cart_router",
    "dashboard_router",
    "notifications_router",
    "orders_router",
    "products_router",
]
