"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from nutrient_normalizer.api.catalog import router as catalog_router
from nutrient_normalizer.api.migrations import router as migrations_router
from nutrient_normalizer.app_logging import configure_logging
from nutrient_normalizer.containers import AppContainer
from nutrient_normalizer.services.store import DocumentStoreError, StoreUnavailableError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Nutrient Normalizer", lifespan=lifespan)
    app.state.container = container

    app.include_router(migrations_router)
    app.include_router(catalog_router)

    @app.exception_handler(DocumentStoreError)
    async def store_error_handler(
        request: Request, exc: DocumentStoreError
    ) -> JSONResponse:
        logger.error("Store error on %s: %s", request.url.path, exc)
        if isinstance(exc, StoreUnavailableError):
            message = "The database is currently unreachable. Please try again later."
        else:
            message = "A database operation failed. Please try again later."
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": "Service Unavailable", "message": message},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
