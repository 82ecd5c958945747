"""Nutrient domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ResolvedNutrientEntry:
    """Canonical view of one raw nutrient entry from a food document."""

    identifier: int | None
    name: str
    unit: str
    amount: float
    derivation: str | None = None
    data_points: int | None = None
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True)
class NutrientDefinition:
    """A unique nutrient in the normalized dictionary."""

    identifier: int
    name: str
    unit: str
    category: str | None
    sort_order: int

    def to_document(self) -> dict[str, object]:
        """Return the stored representation of the definition."""
        return {
            "nutrientNumber": self.identifier,
            "name": self.name,
            "unit": self.unit,
            "category": self.category,
            "sortOrder": self.sort_order,
        }

    def describe(self) -> str:
        """Return a short human-readable description."""
        return f"{self.identifier}: {self.name} ({self.unit})"


@dataclass(frozen=True)
class RawRelationship:
    """A food/nutrient pairing seen during extraction, before ID resolution."""

    food_id: object
    identity: int
    amount: float
    derivation: str | None = None
    data_points: int | None = None
    min: float | None = None
    max: float | None = None


@dataclass(frozen=True)
class FoodNutrientRelationship:
    """Junction record: a food contains an amount of a nutrient."""

    food_id: object
    nutrient_id: object
    amount: float
    derivation: str | None = None
    data_points: int | None = None
    min: float | None = None
    max: float | None = None

    def to_document(self) -> dict[str, object]:
        """Return the stored representation, omitting unset optional fields."""
        document: dict[str, object] = {
            "foodId": self.food_id,
            "nutrientId": self.nutrient_id,
            "amount": self.amount,
        }
        if self.derivation is not None:
            document["derivationDescription"] = self.derivation
        if self.data_points is not None:
            document["dataPoints"] = self.data_points
        if self.min is not None:
            document["min"] = self.min
        if self.max is not None:
            document["max"] = self.max
        return document
