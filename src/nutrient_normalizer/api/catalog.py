"""Read-only endpoints for the normalized nutrient collections."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Query, Request, status

from nutrient_normalizer.api.models import NutrientPageResponse

if TYPE_CHECKING:
    from nutrient_normalizer.containers import AppContainer

router = APIRouter(tags=["nutrients"])


@router.get("/nutrients")
def list_nutrients(
    request: Request,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=100, ge=1, le=1000, alias="pageSize"),
) -> dict[str, object]:
    """Return nutrients ordered for display."""
    container: AppContainer = request.app.state.container
    result = container.catalog_service.list_nutrients(page, page_size)
    return NutrientPageResponse.model_validate(result).model_dump(by_alias=True)


@router.get("/nutrients/by-number/{nutrient_number}")
def get_by_number(nutrient_number: int, request: Request) -> dict[str, object]:
    """Return a nutrient by its nutrient number."""
    container: AppContainer = request.app.state.container
    nutrient = container.catalog_service.get_by_number(nutrient_number)
    if nutrient is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Nutrient with number {nutrient_number} not found",
        )
    return nutrient


@router.get("/food-nutrients/by-food/{food_id}")
def list_for_food(food_id: str, request: Request) -> dict[str, object]:
    """Return a food's nutrient values with nutrient names and units."""
    container: AppContainer = request.app.state.container
    items = container.catalog_service.list_for_food(food_id)
    if items is None:
        raise _food_not_found(food_id)
    return {"items": items}


@router.get("/food-nutrients/food-with-nutrients/{food_id}")
def get_food_with_nutrients(food_id: str, request: Request) -> dict[str, object]:
    """Return a food together with its nutrient values."""
    container: AppContainer = request.app.state.container
    result = container.catalog_service.get_food_with_nutrients(food_id)
    if result is None:
        raise _food_not_found(food_id)
    return result


def _food_not_found(food_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Food with ID {food_id} not found",
    )
