"""ASGI entrypoint for the nutrient normalizer API."""

from nutrient_normalizer.api.app import create_app
from nutrient_normalizer.containers import build_container

app = create_app(build_container())
