"""Tests for the nutrient catalog service."""

from bson import ObjectId

from nutrient_normalizer.containers import AppContainer
from tests.conftest import InMemoryDocumentStore


def _seed_nutrients(store: InMemoryDocumentStore) -> None:
    store.collections["nutrients"] = [
        {"_id": "n-3", "nutrientNumber": 1004, "name": "Total Fat", "sortOrder": 2},
        {"_id": "n-1", "nutrientNumber": 1008, "name": "Energy", "sortOrder": 1},
        {"_id": "n-2", "nutrientNumber": 1003, "name": "Protein", "sortOrder": 2},
    ]


def test_list_nutrients_orders_by_sort_order_then_name(
    container: AppContainer, store: InMemoryDocumentStore
) -> None:
    _seed_nutrients(store)

    page = container.catalog_service.list_nutrients(page=1, page_size=2)

    assert [item["name"] for item in page.items] == ["Energy", "Protein"]
    assert page.items[0]["id"] == "n-1"
    assert "_id" not in page.items[0]
    assert page.total_count == 3
    assert page.total_pages == 2


def test_list_nutrients_second_page(
    container: AppContainer, store: InMemoryDocumentStore
) -> None:
    _seed_nutrients(store)

    page = container.catalog_service.list_nutrients(page=2, page_size=2)

    assert [item["name"] for item in page.items] == ["Total Fat"]


def test_total_count_is_cached(
    container: AppContainer, store: InMemoryDocumentStore
) -> None:
    _seed_nutrients(store)
    container.catalog_service.list_nutrients()

    store.collections["nutrients"].append(
        {"_id": "n-4", "nutrientNumber": 1005, "name": "Carbohydrate", "sortOrder": 3}
    )

    assert container.catalog_service.list_nutrients().total_count == 3


def test_get_by_number(container: AppContainer, store: InMemoryDocumentStore) -> None:
    _seed_nutrients(store)

    nutrient = container.catalog_service.get_by_number(1003)

    assert nutrient is not None
    assert nutrient["name"] == "Protein"
    assert container.catalog_service.get_by_number(9999) is None


def test_list_for_food_joins_nutrients_in_number_order(
    container: AppContainer, store: InMemoryDocumentStore
) -> None:
    _seed_nutrients(store)
    store.collections["foundationfoods"] = [{"_id": "food-a"}, {"_id": "food-b"}]
    store.collections["foodnutrients"] = [
        {"_id": "l-1", "foodId": "food-a", "nutrientId": "n-1", "amount": 100.0},
        {"_id": "l-2", "foodId": "food-a", "nutrientId": "n-2", "amount": 9.1},
        {"_id": "l-3", "foodId": "food-b", "nutrientId": "n-1", "amount": 2.0},
    ]

    links = container.catalog_service.list_for_food("food-a")

    assert links == [
        {
            "foodId": "food-a",
            "nutrientId": "n-2",
            "amount": 9.1,
            "id": "l-2",
            "nutrientName": "Protein",
            "nutrientUnit": None,
            "nutrientNumber": 1003,
        },
        {
            "foodId": "food-a",
            "nutrientId": "n-1",
            "amount": 100.0,
            "id": "l-1",
            "nutrientName": "Energy",
            "nutrientUnit": None,
            "nutrientNumber": 1008,
        },
    ]


def test_list_for_unknown_food(container: AppContainer) -> None:
    assert container.catalog_service.list_for_food("missing") is None


def test_object_ids_are_matched_and_rendered_as_text(
    container: AppContainer, store: InMemoryDocumentStore
) -> None:
    food_id, nutrient_id = ObjectId(), ObjectId()
    store.collections["foundationfoods"] = [{"_id": food_id}]
    store.collections["nutrients"] = [
        {"_id": nutrient_id, "nutrientNumber": 1003, "name": "Protein", "unit": "g"}
    ]
    store.collections["foodnutrients"] = [
        {"_id": ObjectId(), "foodId": food_id, "nutrientId": nutrient_id, "amount": 1.0}
    ]

    links = container.catalog_service.list_for_food(str(food_id))

    assert links is not None
    assert links[0]["foodId"] == str(food_id)
    assert links[0]["nutrientId"] == str(nutrient_id)
    assert links[0]["nutrientUnit"] == "g"


def test_food_with_nutrients(
    container: AppContainer, store: InMemoryDocumentStore
) -> None:
    _seed_nutrients(store)
    store.collections["foundationfoods"] = [
        {
            "_id": "food-a",
            "description": "Hummus",
            "foodNutrients": [{"nutrientId": 1003}],
        }
    ]
    store.collections["foodnutrients"] = [
        {"_id": "l-1", "foodId": "food-a", "nutrientId": "n-2", "amount": 7.9}
    ]

    result = container.catalog_service.get_food_with_nutrients("food-a")

    assert result is not None
    assert result["food"] == {"description": "Hummus", "id": "food-a"}
    nutrients = result["nutrients"]
    assert isinstance(nutrients, list)
    assert [item["nutrientName"] for item in nutrients] == ["Protein"]
    assert container.catalog_service.get_food_with_nutrients("missing") is None
