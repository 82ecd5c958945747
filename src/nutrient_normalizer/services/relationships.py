"""Batched writing of food/nutrient junction records."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from nutrient_normalizer.domain.nutrients import (
    FoodNutrientRelationship,
    RawRelationship,
)
from nutrient_normalizer.services.store import (
    BulkInsertError,
    DocumentStore,
    StoreUnavailableError,
)

DEFAULT_BATCH_SIZE = 1000

_logger = logging.getLogger(__name__)


@dataclass
class BatchReport:
    """Counters collected while writing relationships."""

    created: int = 0
    batches: int = 0
    failed_batches: int = 0
    skipped: int = 0
    unavailable: bool = False
    errors: list[str] = field(default_factory=list)


@dataclass
class RelationshipBatcher:
    """Resolves raw relationships to persisted IDs and writes them in batches.

    Writing stops at the first batch that finds the store unreachable.
    """

    store: DocumentStore
    collection: str
    batch_size: int = DEFAULT_BATCH_SIZE

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be positive")

    def write(
        self,
        raw_relationships: Iterable[RawRelationship],
        nutrient_ids: Mapping[int, object],
    ) -> BatchReport:
        """Write all resolvable relationships and report what happened."""
        report = BatchReport()
        buffer: list[FoodNutrientRelationship] = []
        for raw in raw_relationships:
            nutrient_id = nutrient_ids.get(raw.identity)
            if nutrient_id is None:
                report.skipped += 1
                continue
            buffer.append(
                FoodNutrientRelationship(
                    food_id=raw.food_id,
                    nutrient_id=nutrient_id,
                    amount=raw.amount,
                    derivation=raw.derivation,
                    data_points=raw.data_points,
                    min=raw.min,
                    max=raw.max,
                )
            )
            if len(buffer) >= self.batch_size:
                self._flush(buffer, report)
                buffer = []
                if report.unavailable:
                    return report
        if buffer:
            self._flush(buffer, report)
        return report

    def _flush(
        self, buffer: list[FoodNutrientRelationship], report: BatchReport
    ) -> None:
        report.batches += 1
        documents = [relationship.to_document() for relationship in buffer]
        try:
            report.created += self.store.insert_many(self.collection, documents)
        except BulkInsertError as exc:
            report.created += exc.inserted_count
            report.failed_batches += 1
            report.errors.append(
                f"Relationship batch {report.batches} partially failed "
                f"({exc.inserted_count}/{len(documents)} inserted): {exc}"
            )
            _logger.warning(
                "Relationship batch %s partially failed: %s", report.batches, exc
            )
        except StoreUnavailableError as exc:
            report.unavailable = True
            report.failed_batches += 1
            report.errors.append(f"Relationship batch {report.batches} failed: {exc}")
            _logger.exception("Store unavailable writing batch %s", report.batches)
        except Exception as exc:
            report.failed_batches += 1
            report.errors.append(f"Relationship batch {report.batches} failed: {exc}")
            _logger.exception("Relationship batch %s failed", report.batches)
