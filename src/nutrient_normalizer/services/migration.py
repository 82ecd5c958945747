"""Nutrient normalization migration.

Reads every food document from a source collection, extracts the embedded
nutrient arrays into a deduplicated nutrient dictionary, and links foods to
nutrients through a junction collection. Every public operation returns a
result object; failures are reported in the result instead of raised.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass

from nutrient_normalizer.domain.migration import (
    DataExplorationResult,
    FullMigrationResult,
    MigrationPhase,
    MigrationResult,
)
from nutrient_normalizer.domain.nutrients import NutrientDefinition, RawRelationship
from nutrient_normalizer.services.cache import CountCache
from nutrient_normalizer.services.deduplicator import NutrientDeduplicator, identity_for
from nutrient_normalizer.services.documents import jsonable
from nutrient_normalizer.services.field_resolver import nutrient_entries, resolve_entry
from nutrient_normalizer.services.indexes import IndexProvisioner
from nutrient_normalizer.services.relationships import (
    DEFAULT_BATCH_SIZE,
    RelationshipBatcher,
)
from nutrient_normalizer.services.store import (
    BulkInsertError,
    DocumentStore,
    StoreUnavailableError,
)

DEFAULT_SOURCE_COLLECTION = "foundationfoods"
EXPLORE_SAMPLE_SIZE = 3

_logger = logging.getLogger(__name__)


@dataclass
class MigrationService:
    """Runs exploration, normalization and index creation against a store."""

    store: DocumentStore
    nutrients_collection: str
    food_nutrients_collection: str
    index_provisioner: IndexProvisioner
    batch_size: int = DEFAULT_BATCH_SIZE
    sample_limit: int = 20
    nutrient_count_cache: CountCache | None = None

    def explore(
        self, source_collection: str = DEFAULT_SOURCE_COLLECTION
    ) -> DataExplorationResult:
        """Return collection names, a document count and sample documents."""
        result = DataExplorationResult()
        _enter(result, MigrationPhase.EXPLORING)
        try:
            result.collection_names = self.store.list_collection_names()
            result.total_documents = self.store.count_all(source_collection)
            samples = self.store.find(source_collection, limit=EXPLORE_SAMPLE_SIZE)
            result.sample_documents = [jsonable(sample) for sample in samples]
            if samples:
                result.sample_document_fields = list(samples[0].keys())
                result.raw_sample_json = json.dumps(
                    result.sample_documents[0], ensure_ascii=False, indent=2
                )
            result.success = True
            result.message = (
                f"Found {result.total_documents} documents in '{source_collection}'. "
                f"Collections: {', '.join(result.collection_names)}"
            )
        except StoreUnavailableError as exc:
            _logger.exception("Store unavailable while exploring %s", source_collection)
            result.unavailable = True
            result.message = f"Failed to explore data: {exc}"
        except Exception as exc:
            _logger.exception("Error exploring data structure")
            result.message = f"Failed to explore data: {exc}"
        _enter(result, MigrationPhase.REPORTED)
        return result

    def extract_and_normalize(
        self, source_collection: str = DEFAULT_SOURCE_COLLECTION
    ) -> MigrationResult:
        """Extract unique nutrients and food/nutrient relationships."""
        result = MigrationResult()
        try:
            self._extract_and_normalize(source_collection, result)
        except StoreUnavailableError as exc:
            _logger.exception("Store unavailable during %s", result.phase.value)
            result.success = False
            result.unavailable = True
            result.message = f"Migration failed: {exc}"
            result.errors.append(f"{result.phase.value}: {exc}")
        except Exception as exc:
            _logger.exception("Error extracting and normalizing nutrients")
            result.success = False
            result.message = f"Migration failed: {exc}"
            result.errors.append(
                f"{result.phase.value}: {type(exc).__name__}: {exc}"
            )
        _enter(result, MigrationPhase.REPORTED)
        return result

    def create_indexes(self) -> MigrationResult:
        """Create the indexes for the nutrient collections."""
        result = self.index_provisioner.ensure_indexes()
        _enter(result, MigrationPhase.INDEXING_DONE)
        _logger.info("Index creation finished: %s", result.message)
        _enter(result, MigrationPhase.REPORTED)
        return result

    def run_full_migration(
        self, source_collection: str = DEFAULT_SOURCE_COLLECTION
    ) -> FullMigrationResult:
        """Create indexes, then extract and normalize nutrients."""
        indexes = self.create_indexes()
        extraction = self.extract_and_normalize(source_collection)
        success = indexes.success and extraction.success
        if success:
            message = (
                f"Migration complete. {extraction.unique_nutrients_found} unique "
                f"nutrients, {extraction.relationships_created} relationships."
            )
        else:
            message = "Migration had errors - check individual results"
        return FullMigrationResult(
            success=success,
            message=message,
            create_indexes=indexes,
            extract_and_normalize=extraction,
        )

    def _extract_and_normalize(
        self, source_collection: str, result: MigrationResult
    ) -> None:
        _enter(result, MigrationPhase.EXTRACTING)
        foods = list(self.store.find_all(source_collection))
        _logger.info("Found %s documents in %s", len(foods), source_collection)

        deduplicator = NutrientDeduplicator()
        raw_relationships: list[RawRelationship] = []
        for food in foods:
            result.foods_processed += 1
            try:
                raw_relationships.extend(_extract_food(food, deduplicator))
            except Exception as exc:
                result.errors.append(
                    f"Error processing food {result.foods_processed}: {exc}"
                )

        definitions = deduplicator.definitions()
        result.unique_nutrients_found = len(definitions)
        result.sample_nutrients = [
            definition.describe() for definition in definitions[: self.sample_limit]
        ]
        _logger.info(
            "Extracted %s unique nutrients from %s foods",
            len(definitions),
            result.foods_processed,
        )

        _enter(result, MigrationPhase.PERSISTING_DEFINITIONS)
        definitions_ok, can_resolve = self._persist_definitions(definitions, result)
        if not can_resolve:
            result.success = False
            result.message = (
                f"Extracted {result.unique_nutrients_found} unique nutrients from "
                f"{result.foods_processed} foods, but nutrient definitions could not "
                "be persisted; relationships were not created."
            )
            return

        _enter(result, MigrationPhase.RESOLVING_RELATIONSHIPS)
        nutrient_ids = self._nutrient_id_map()
        batcher = RelationshipBatcher(
            store=self.store,
            collection=self.food_nutrients_collection,
            batch_size=self.batch_size,
        )
        report = batcher.write(raw_relationships, nutrient_ids)
        result.relationships_created = report.created
        result.errors.extend(report.errors)
        result.unavailable = report.unavailable
        _logger.info(
            "Created %s food-nutrient relationships in %s batches (%s skipped)",
            report.created,
            report.batches,
            report.skipped,
        )

        result.success = definitions_ok
        result.message = (
            f"Extracted {result.unique_nutrients_found} unique nutrients from "
            f"{result.foods_processed} foods. "
            f"Created {result.relationships_created} food-nutrient relationships."
        )
        if not definitions_ok:
            result.message += " Some nutrient definitions were not persisted."
        if report.failed_batches:
            result.message += (
                f" {report.failed_batches} of {report.batches} relationship "
                "batches failed."
            )

    def _persist_definitions(
        self, definitions: list[NutrientDefinition], result: MigrationResult
    ) -> tuple[bool, bool]:
        """Insert definitions; return (fully persisted, relationships possible)."""
        if not definitions:
            return True, True
        documents = [definition.to_document() for definition in definitions]
        try:
            inserted = self.store.insert_many(self.nutrients_collection, documents)
        except BulkInsertError as exc:
            if self.nutrient_count_cache is not None:
                self.nutrient_count_cache.adjust(exc.inserted_count)
            # What is already stored can still be linked.
            _logger.warning(
                "Nutrient definitions partially persisted (%s/%s): %s",
                exc.inserted_count,
                len(documents),
                exc,
            )
            result.errors.append(
                f"Nutrient definitions partially persisted "
                f"({exc.inserted_count}/{len(documents)}): {exc}"
            )
            return False, True
        except StoreUnavailableError:
            raise
        except Exception as exc:
            _logger.exception("Failed to persist nutrient definitions")
            result.errors.append(f"Failed to persist nutrient definitions: {exc}")
            return False, False
        if self.nutrient_count_cache is not None:
            self.nutrient_count_cache.adjust(inserted)
        _logger.info("Created %s nutrient records", inserted)
        return True, True

    def _nutrient_id_map(self) -> dict[int, object]:
        # _id values keep their stored type so links match the nutrient documents.
        nutrient_ids: dict[int, object] = {}
        for document in self.store.find_all(self.nutrients_collection):
            number = document.get("nutrientNumber")
            if isinstance(number, int) and "_id" in document:
                nutrient_ids[number] = document["_id"]
        return nutrient_ids


def _enter(
    result: MigrationResult | DataExplorationResult, phase: MigrationPhase
) -> None:
    # Phase lives on the per-call result; the service is shared across requests.
    _logger.debug("Migration phase %s -> %s", result.phase.value, phase.value)
    result.phase = phase


def _extract_food(
    food: object, deduplicator: NutrientDeduplicator
) -> list[RawRelationship]:
    """Intern the nutrients of one food and return its raw relationships."""
    if not isinstance(food, Mapping):
        raise TypeError(f"expected a document, got {type(food).__name__}")
    if "_id" not in food:
        raise ValueError("document has no _id")
    food_id = food["_id"]

    entries = nutrient_entries(food)
    if entries is None:
        return []

    relationships = []
    for raw_entry in entries:
        entry = resolve_entry(raw_entry)
        if entry is None:
            continue
        identity = identity_for(entry.identifier, entry.name)
        deduplicator.intern(identity, entry.name, entry.unit)
        relationships.append(
            RawRelationship(
                food_id=food_id,
                identity=identity,
                amount=entry.amount,
                derivation=entry.derivation,
                data_points=entry.data_points,
                min=entry.min,
                max=entry.max,
            )
        )
    return relationships
