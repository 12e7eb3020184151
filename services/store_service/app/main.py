"""FastAPI application for the Store Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.logging import configure_logging
from services.store_service.routers import (
    addresses_router,
    cart_router,
    dashboard_router,
    notifications_router,
    orders_router,
    products_router,
)


def create_app() -> FastAPI:
    """Create and configure the Store Service FastAPI app."""
    configure_logging()
    app = FastAPI(
        title="ShopBrands Store Service",
        version="0.1.0",
        description="Catalog, addresses, cart, checkout, orders, returns and notifications for ShopBrands.",
    )
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "store"}

    app.include_router(products_router)
    app.include_router(addresses_router)
    app.include_router(cart_router)
    app.include_router(orders_router)
    app.include_router(dashboard_router)
    app.include_router(notifications_router)

    return app


app = create_app()
