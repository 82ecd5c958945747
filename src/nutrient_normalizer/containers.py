"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from nutrient_normalizer.adapters.mongo_document_store import (
    MongoDocumentStore,
    create_mongo_client,
)
from nutrient_normalizer.config import Settings
from nutrient_normalizer.services.cache import CountCache
from nutrient_normalizer.services.catalog import NutrientCatalogService
from nutrient_normalizer.services.indexes import IndexProvisioner
from nutrient_normalizer.services.migration import MigrationService
from nutrient_normalizer.services.store import DocumentStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: DocumentStore
    migration_service: MigrationService
    catalog_service: NutrientCatalogService
    close_resources: Callable[[], Awaitable[None]]


def build_services(
    settings: Settings, store: DocumentStore
) -> tuple[MigrationService, NutrientCatalogService]:
    """Create the services that operate on a document store."""
    nutrient_count_cache = CountCache(ttl_seconds=settings.count_cache_ttl_seconds)
    index_provisioner = IndexProvisioner(
        store=store,
        nutrients_collection=settings.nutrients_collection,
        food_nutrients_collection=settings.food_nutrients_collection,
    )
    migration_service = MigrationService(
        store=store,
        nutrients_collection=settings.nutrients_collection,
        food_nutrients_collection=settings.food_nutrients_collection,
        index_provisioner=index_provisioner,
        batch_size=settings.relationship_batch_size,
        sample_limit=settings.sample_nutrient_limit,
        nutrient_count_cache=nutrient_count_cache,
    )
    catalog_service = NutrientCatalogService(
        store=store,
        nutrients_collection=settings.nutrients_collection,
        food_nutrients_collection=settings.food_nutrients_collection,
        foods_collection=settings.source_collection,
        count_cache=nutrient_count_cache,
    )
    return migration_service, catalog_service


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    mongo_client = create_mongo_client(resolved_settings)
    store = MongoDocumentStore.create(mongo_client, resolved_settings.mongo_database)
    migration_service, catalog_service = build_services(resolved_settings, store)

    async def close_resources() -> None:
        mongo_client.close()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        migration_service=migration_service,
        catalog_service=catalog_service,
        close_resources=close_resources,
    )
