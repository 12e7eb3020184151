"""FastAPI application for the Payments Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.logging import configure_logging
from services.payments_service.routers import checkout_router, webhooks_router


def create_app() -> FastAPI:
    """Create and configure the Payments Service FastAPI app."""
    configure_logging()
    app = FastAPI(
        title="ShopBrands Payments Service",
        version="0.1.0",
        description="Stripe checkout sessions, webhook reconciliation and refunds.",
    )
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "payments"}

    app.include_router(checkout_router)
    app.include_router(webhooks_router)

    return app


app = create_app()
