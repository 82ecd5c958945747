"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    mongo_uri: str
    mongo_database: str
    admin_token: str
    source_collection: str = "foundationfoods"
    nutrients_collection: str = "nutrients"
    food_nutrients_collection: str = "foodnutrients"
    relationship_batch_size: int = 1000
    sample_nutrient_limit: int = 20
    mongo_server_selection_timeout_ms: int = 60000
    mongo_connect_timeout_ms: int = 10000
    mongo_socket_timeout_ms: int = 60000
    count_cache_ttl_seconds: int = 300
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
