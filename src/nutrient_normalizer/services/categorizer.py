"""Keyword-based nutrient categorization."""

from enum import Enum


class NutrientCategory(str, Enum):
    """Coarse nutrient groups used for display."""

    ENERGY = "Energy"
    MACRONUTRIENT = "Macronutrient"
    LIPID = "Lipid"
    CARBOHYDRATE = "Carbohydrate"
    VITAMIN = "Vitamin"
    MINERAL = "Mineral"


# Checked in order; the broad vitamin/mineral groups come last.
_KEYWORD_GROUPS: tuple[tuple[NutrientCategory, tuple[str, ...]], ...] = (
    (NutrientCategory.ENERGY, ("energy", "calor")),
    (NutrientCategory.MACRONUTRIENT, ("protein",)),
    (NutrientCategory.LIPID, ("fat", "lipid", "fatty", "cholesterol")),
    (NutrientCategory.CARBOHYDRATE, ("carbohydrate", "fiber", "sugar", "starch")),
    (
        NutrientCategory.VITAMIN,
        (
            "vitamin",
            "thiamin",
            "riboflavin",
            "niacin",
            "folate",
            "choline",
            "betaine",
        ),
    ),
    (
        NutrientCategory.MINERAL,
        (
            "calcium",
            "iron",
            "magnesium",
            "phosphorus",
            "potassium",
            "sodium",
            "zinc",
            "copper",
            "manganese",
            "selenium",
            "mineral",
        ),
    ),
)


def categorize(name: str) -> NutrientCategory | None:
    """Return the category for a nutrient name, or None when nothing matches."""
    lowered = name.lower()
    for category, keywords in _KEYWORD_GROUPS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return None
