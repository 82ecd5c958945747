"""Read access to the normalized nutrient collections."""

from collections.abc import Mapping
from dataclasses import dataclass

from nutrient_normalizer.services.cache import CountCache
from nutrient_normalizer.services.documents import id_candidates, jsonable
from nutrient_normalizer.services.field_resolver import NUTRIENT_ARRAY_FIELDS
from nutrient_normalizer.services.store import DocumentStore


@dataclass(frozen=True)
class NutrientPage:
    """One page of nutrient definitions."""

    items: list[dict[str, object]]
    page: int
    page_size: int
    total_count: int

    @property
    def total_pages(self) -> int:
        """Return the number of pages for the total count."""
        if self.page_size <= 0:
            return 0
        return -(-self.total_count // self.page_size)


@dataclass
class NutrientCatalogService:
    """Lists nutrient definitions and the nutrient values of foods."""

    store: DocumentStore
    nutrients_collection: str
    food_nutrients_collection: str
    foods_collection: str
    count_cache: CountCache

    def list_nutrients(self, page: int = 1, page_size: int = 100) -> NutrientPage:
        """Return nutrients ordered by sort order, then name."""
        page = max(page, 1)
        page_size = max(page_size, 1)
        documents = self.store.find(
            self.nutrients_collection,
            sort=[("sortOrder", 1), ("name", 1)],
            skip=(page - 1) * page_size,
            limit=page_size,
        )
        total = self.count_cache.get_or_refresh(
            lambda: self.store.count_all(self.nutrients_collection)
        )
        return NutrientPage(
            items=[_serialize(document) for document in documents],
            page=page,
            page_size=page_size,
            total_count=total,
        )

    def get_by_number(self, nutrient_number: int) -> dict[str, object] | None:
        """Return a nutrient by its nutrient number, if present."""
        documents = self.store.find(
            self.nutrients_collection, {"nutrientNumber": nutrient_number}, limit=1
        )
        if not documents:
            return None
        return _serialize(documents[0])

    def list_for_food(self, food_id: str) -> list[dict[str, object]] | None:
        """Return a food's nutrient values ordered by nutrient number.

        Each junction record is joined to its nutrient definition. Returns
        None when the food does not exist.
        """
        food = self._find_food(food_id)
        if food is None:
            return None
        return self._food_nutrients(food["_id"])

    def get_food_with_nutrients(self, food_id: str) -> dict[str, object] | None:
        """Return a food without its embedded arrays, plus its nutrient values."""
        food = self._find_food(food_id)
        if food is None:
            return None
        details = {
            key: value
            for key, value in food.items()
            if key not in NUTRIENT_ARRAY_FIELDS
        }
        return {
            "food": _serialize(details),
            "nutrients": self._food_nutrients(food["_id"]),
        }

    def _find_food(self, food_id: str) -> dict[str, object] | None:
        for candidate in id_candidates(food_id):
            documents = self.store.find(
                self.foods_collection, {"_id": candidate}, limit=1
            )
            if documents:
                return documents[0]
        return None

    def _food_nutrients(self, stored_food_id: object) -> list[dict[str, object]]:
        links = self.store.find(
            self.food_nutrients_collection, {"foodId": stored_food_id}
        )
        nutrients = {
            document["_id"]: document
            for document in self.store.find(self.nutrients_collection)
            if "_id" in document
        }
        items = []
        for link in links:
            item = _serialize(link)
            nutrient = nutrients.get(link.get("nutrientId"))
            if nutrient is not None:
                item["nutrientName"] = nutrient.get("name")
                item["nutrientUnit"] = nutrient.get("unit")
                item["nutrientNumber"] = nutrient.get("nutrientNumber")
            items.append(item)
        items.sort(key=_nutrient_number_key)
        return items


def _serialize(document: Mapping[str, object]) -> dict[str, object]:
    serialized = jsonable(document)
    if "_id" in serialized:
        serialized["id"] = serialized.pop("_id")
    return serialized


def _nutrient_number_key(item: Mapping[str, object]) -> tuple[bool, int]:
    # Links without a known nutrient sort first.
    number = item.get("nutrientNumber")
    if not isinstance(number, int):
        return False, 0
    return True, number
