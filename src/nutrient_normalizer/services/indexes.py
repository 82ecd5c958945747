"""Idempotent index provisioning for the normalized collections."""

import logging
from dataclasses import dataclass

from nutrient_normalizer.domain.migration import MigrationResult
from nutrient_normalizer.services.store import (
    DocumentStore,
    IndexConflictError,
    IndexKeys,
    StoreUnavailableError,
)

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexSpec:
    """An index to create on a collection."""

    collection: str
    keys: IndexKeys
    name: str
    unique: bool = False


@dataclass
class IndexProvisioner:
    """Creates the indexes the nutrient collections rely on."""

    store: DocumentStore
    nutrients_collection: str
    food_nutrients_collection: str

    def index_specs(self) -> list[IndexSpec]:
        """Return the indexes in creation order."""
        return [
            IndexSpec(
                self.nutrients_collection,
                [("nutrientNumber", 1)],
                "idx_nutrientNumber",
                unique=True,
            ),
            IndexSpec(self.food_nutrients_collection, [("foodId", 1)], "idx_foodId"),
            IndexSpec(
                self.food_nutrients_collection, [("nutrientId", 1)], "idx_nutrientId"
            ),
            IndexSpec(
                self.food_nutrients_collection,
                [("foodId", 1), ("nutrientId", 1)],
                "idx_foodId_nutrientId",
                unique=True,
            ),
        ]

    def ensure_indexes(self) -> MigrationResult:
        """Create all indexes, treating existing ones as success."""
        result = MigrationResult()
        created: list[str] = []
        for spec in self.index_specs():
            try:
                self.store.create_index(
                    spec.collection, spec.keys, unique=spec.unique, name=spec.name
                )
            except IndexConflictError as exc:
                warning = f"Index {spec.name} already exists on {spec.collection}"
                _logger.warning("%s: %s", warning, exc)
                result.warnings.append(warning)
                continue
            except StoreUnavailableError as exc:
                _logger.exception("Store unavailable while creating %s", spec.name)
                return _failed(result, spec, exc, unavailable=True)
            except Exception as exc:
                _logger.exception("Error creating index %s", spec.name)
                return _failed(result, spec, exc)
            created.append(spec.name)

        result.success = True
        if created:
            result.message = f"Successfully created indexes: {', '.join(created)}"
        else:
            result.message = "All indexes already exist"
        return result


def _failed(
    result: MigrationResult,
    spec: IndexSpec,
    exc: Exception,
    *,
    unavailable: bool = False,
) -> MigrationResult:
    result.success = False
    result.unavailable = unavailable
    result.message = f"Failed to create indexes: {exc}"
    result.errors.append(f"{spec.collection}.{spec.name}: {exc}")
    return result
