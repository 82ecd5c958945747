"""Nutrient identity derivation and deduplication."""

import logging
from dataclasses import dataclass, field

from nutrient_normalizer.domain.nutrients import NutrientDefinition
from nutrient_normalizer.services.categorizer import categorize

_FNV32_OFFSET_BASIS = 0x811C9DC5
_FNV32_PRIME = 0x01000193

_logger = logging.getLogger(__name__)


def fnv1a_32(data: bytes) -> int:
    """Return the 32-bit FNV-1a hash of the given bytes."""
    value = _FNV32_OFFSET_BASIS
    for byte in data:
        value ^= byte
        value = (value * _FNV32_PRIME) & 0xFFFFFFFF
    return value


def name_identity(name: str) -> int:
    """Derive a stable identity for a nutrient that has no number.

    The FNV-1a hash of the trimmed, lower-cased UTF-8 name is folded into
    ``[-2**31, -1]``: negative so it cannot collide with FDA nutrient numbers,
    and within int32 so it stores as a plain BSON int.
    """
    digest = fnv1a_32(name.strip().lower().encode("utf-8"))
    return -(digest & 0x7FFFFFFF) - 1


def identity_for(raw_identifier: int | None, name: str) -> int:
    """Return the deduplication key for a nutrient."""
    if raw_identifier:
        return raw_identifier
    return name_identity(name)


@dataclass
class NutrientDeduplicator:
    """Collects unique nutrient definitions in first-seen order."""

    _definitions: dict[int, NutrientDefinition] = field(default_factory=dict)

    def intern(self, identity: int, name: str, unit: str) -> NutrientDefinition:
        """Return the definition for an identity, creating it on first sight."""
        existing = self._definitions.get(identity)
        if existing is not None:
            if existing.name != name or existing.unit != unit:
                _logger.debug(
                    "Ignoring conflicting definition for %s: %r (%s), keeping %r (%s)",
                    identity,
                    name,
                    unit,
                    existing.name,
                    existing.unit,
                )
            return existing
        category = categorize(name)
        definition = NutrientDefinition(
            identifier=identity,
            name=name,
            unit=unit,
            category=category.value if category else None,
            sort_order=len(self._definitions) + 1,
        )
        self._definitions[identity] = definition
        return definition

    def definitions(self) -> list[NutrientDefinition]:
        """Return definitions in the order they were first seen."""
        return list(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)
