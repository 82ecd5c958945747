"""Migration endpoints with simple token auth."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from nutrient_normalizer.api.models import (
    DataExplorationResponse,
    FullMigrationResponse,
    MigrationResultResponse,
)

if TYPE_CHECKING:
    from pydantic import BaseModel

    from nutrient_normalizer.containers import AppContainer

router = APIRouter(prefix="/migrations", tags=["migrations"])

_logger = logging.getLogger(__name__)


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def _source(request: Request, source_collection: str | None) -> str:
    container: AppContainer = request.app.state.container
    return source_collection or container.settings.source_collection


def _respond(model: BaseModel, *, unavailable: bool) -> JSONResponse:
    status_code = (
        status.HTTP_503_SERVICE_UNAVAILABLE if unavailable else status.HTTP_200_OK
    )
    return JSONResponse(
        status_code=status_code, content=model.model_dump(mode="json", by_alias=True)
    )


@router.get("/explore", dependencies=[Depends(require_admin)])
def explore(
    request: Request,
    source_collection: str | None = Query(default=None, alias="sourceCollection"),
) -> JSONResponse:
    """Show sample documents and field names from the source collection."""
    container: AppContainer = request.app.state.container
    source = _source(request, source_collection)
    _logger.info("Exploring data structure in %s", source)
    result = container.migration_service.explore(source)
    return _respond(
        DataExplorationResponse.model_validate(result), unavailable=result.unavailable
    )


@router.post("/extract-and-normalize", dependencies=[Depends(require_admin)])
def extract_and_normalize(
    request: Request,
    source_collection: str | None = Query(default=None, alias="sourceCollection"),
) -> JSONResponse:
    """Extract unique nutrients and build the food/nutrient junction records."""
    container: AppContainer = request.app.state.container
    source = _source(request, source_collection)
    _logger.info("Starting nutrient extraction and normalization from %s", source)
    result = container.migration_service.extract_and_normalize(source)
    return _respond(
        MigrationResultResponse.model_validate(result), unavailable=result.unavailable
    )


@router.post("/create-indexes", dependencies=[Depends(require_admin)])
def create_indexes(request: Request) -> JSONResponse:
    """Create indexes on the nutrient collections."""
    container: AppContainer = request.app.state.container
    _logger.info("Creating database indexes")
    result = container.migration_service.create_indexes()
    return _respond(
        MigrationResultResponse.model_validate(result), unavailable=result.unavailable
    )


@router.post("/run-all", dependencies=[Depends(require_admin)])
def run_all(
    request: Request,
    source_collection: str | None = Query(default=None, alias="sourceCollection"),
) -> JSONResponse:
    """Create indexes, then extract and normalize nutrients."""
    container: AppContainer = request.app.state.container
    source = _source(request, source_collection)
    _logger.info("Running full migration from %s", source)
    result = container.migration_service.run_full_migration(source)
    return _respond(
        FullMigrationResponse.model_validate(result), unavailable=result.unavailable
    )
