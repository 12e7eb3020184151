"""Global exception handlers for consistent error responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from libs.common.errors import ShopError
from libs.common.logging import get_logger

logger = get_logger(__name__)


async def shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
    """Translate a domain error into a JSON response."""
    if exc.status_code >= 500:
        logger.error(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
        )
    else:
        logger.info(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.message,
        )

    content = {"detail": exc.message}
    if exc.retryable:
        content["retryable"] = True
    return JSONResponse(status_code=exc.status_code, content=content)


def add_exception_handlers(app: FastAPI) -> None:
    """Register domain exception handlers on a FastAPI app."""
    app.add_exception_handler(ShopError, shop_error_handler)
