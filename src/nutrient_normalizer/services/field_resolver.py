"""Best-effort extraction of nutrient fields from raw food documents.

Food documents come from several historical exports. Nutrient entries appear
either in the FDC "nested" shape::

    {"nutrient": {"number": "203", "name": "Protein", "unitName": "g"},
     "amount": 9.1}

or in a "flat" shape with one of several alternative key names::

    {"nutrientId": 1003, "nutrientName": "Protein", "unit": "g", "value": 9.1}

The nested shape is tried first; the flat shape only when no ``nutrient``
mapping is present.
"""

from collections.abc import Mapping
from decimal import Decimal

from nutrient_normalizer.domain.nutrients import ResolvedNutrientEntry

NUTRIENT_ARRAY_FIELDS = ("foodNutrients", "nutrients")

_NESTED_ID_FIELDS = ("number", "id")
_FLAT_ID_FIELDS = ("nutrientId", "nutrientNumber", "id")
_NAME_FIELDS = ("nutrientName", "name")
_UNIT_FIELDS = ("unitName", "unit")
_AMOUNT_FIELDS = ("amount", "value")


def nutrient_entries(food: Mapping[str, object]) -> list[object] | None:
    """Return the embedded nutrient array of a food, if any."""
    for field in NUTRIENT_ARRAY_FIELDS:
        value = food.get(field)
        if isinstance(value, list):
            return value
    return None


def resolve_entry(raw: object) -> ResolvedNutrientEntry | None:
    """Resolve a raw nutrient entry, or return None when it is unextractable."""
    if not isinstance(raw, Mapping):
        return None

    nested = raw.get("nutrient")
    if isinstance(nested, Mapping):
        identifier = _first_identifier(nested, _NESTED_ID_FIELDS)
        name = _first_text(nested, ("name",))
        unit = _first_text(nested, _UNIT_FIELDS)
    else:
        identifier = _first_identifier(raw, _FLAT_ID_FIELDS)
        name = _first_text(raw, _NAME_FIELDS)
        unit = _first_text(raw, _UNIT_FIELDS)

    if identifier is None and not name:
        return None

    return ResolvedNutrientEntry(
        identifier=identifier,
        name=name,
        unit=unit,
        amount=_resolve_amount(raw),
        derivation=_resolve_derivation(raw),
        data_points=_to_int(raw.get("dataPoints")),
        min=_to_float(raw.get("min")),
        max=_to_float(raw.get("max")),
    )


def _first_identifier(
    source: Mapping[str, object], fields: tuple[str, ...]
) -> int | None:
    # Unusable values (null, 0, non-numeric text) fall through to the next key.
    for field in fields:
        value = _to_int(source.get(field))
        if value:
            return value
    return None


def _first_text(source: Mapping[str, object], fields: tuple[str, ...]) -> str:
    for field in fields:
        value = source.get(field)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _resolve_amount(raw: Mapping[str, object]) -> float:
    for field in _AMOUNT_FIELDS:
        value = _to_float(raw.get(field))
        if value is not None:
            return value
    return 0.0


def _resolve_derivation(raw: Mapping[str, object]) -> str | None:
    value = raw.get("derivationDescription")
    if isinstance(value, str):
        return value
    derivation = raw.get("foodNutrientDerivation")
    if isinstance(derivation, Mapping):
        description = derivation.get("description")
        if isinstance(description, str):
            return description
    return None


def _to_int(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    to_decimal = getattr(value, "to_decimal", None)
    if callable(to_decimal):
        value = to_decimal()
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value():
            return int(value)
        return None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _to_float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float | Decimal):
        return float(value)
    # bson.Decimal128
    to_decimal = getattr(value, "to_decimal", None)
    if callable(to_decimal):
        return float(to_decimal())
    return None
