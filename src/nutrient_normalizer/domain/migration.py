"""Migration result models."""

from dataclasses import dataclass, field
from enum import Enum


class MigrationPhase(str, Enum):
    """Phases of a normalization run, in execution order."""

    IDLE = "idle"
    EXPLORING = "exploring"
    EXTRACTING = "extracting"
    PERSISTING_DEFINITIONS = "persisting_definitions"
    RESOLVING_RELATIONSHIPS = "resolving_relationships"
    INDEXING_DONE = "indexing_done"
    REPORTED = "reported"


@dataclass
class MigrationResult:
    """Outcome of an extraction or index step."""

    success: bool = False
    message: str = ""
    foods_processed: int = 0
    unique_nutrients_found: int = 0
    relationships_created: int = 0
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    sample_nutrients: list[str] = field(default_factory=list)
    unavailable: bool = False
    phase: MigrationPhase = MigrationPhase.IDLE


@dataclass
class DataExplorationResult:
    """Read-only summary of a source collection."""

    success: bool = False
    message: str = ""
    total_documents: int = 0
    collection_names: list[str] = field(default_factory=list)
    sample_document_fields: list[str] = field(default_factory=list)
    sample_documents: list[dict[str, object]] = field(default_factory=list)
    raw_sample_json: str = ""
    unavailable: bool = False
    phase: MigrationPhase = MigrationPhase.IDLE


@dataclass
class FullMigrationResult:
    """Combined outcome of index creation followed by extraction."""

    success: bool
    message: str
    create_indexes: MigrationResult
    extract_and_normalize: MigrationResult

    @property
    def unavailable(self) -> bool:
        """Return true when either step could not reach the store."""
        return self.create_indexes.unavailable or self.extract_and_normalize.unavailable
