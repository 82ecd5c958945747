"""Pydantic response models for the HTTP API."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that serializes fields in camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MigrationResultResponse(CamelModel):
    """Result of an extraction or index step."""

    success: bool
    message: str
    foods_processed: int
    unique_nutrients_found: int
    relationships_created: int
    errors: list[str]
    warnings: list[str]
    sample_nutrients: list[str]


class DataExplorationResponse(CamelModel):
    """Summary of a source collection."""

    success: bool
    message: str
    total_documents: int
    collection_names: list[str]
    sample_document_fields: list[str]
    sample_documents: list[dict[str, object]]
    raw_sample_json: str


class FullMigrationResponse(CamelModel):
    """Combined result of index creation and extraction."""

    success: bool
    message: str
    create_indexes: MigrationResultResponse
    extract_and_normalize: MigrationResultResponse


class NutrientPageResponse(CamelModel):
    """A page of nutrient definitions."""

    items: list[dict[str, object]]
    page: int
    page_size: int
    total_count: int
    total_pages: int
