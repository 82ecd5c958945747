"""Command-line entrypoint for running the migration without the HTTP API."""

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from dataclasses import asdict

from nutrient_normalizer.app_logging import configure_logging
from nutrient_normalizer.containers import AppContainer, build_container

COMMANDS = ("explore", "extract-and-normalize", "create-indexes", "run-all")


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="nutrient-normalizer",
        description="Normalize embedded food nutrients into nutrient collections.",
    )
    parser.add_argument("command", choices=COMMANDS)
    parser.add_argument(
        "--source",
        default=None,
        help="Source collection with embedded nutrients (default from settings)",
    )
    return parser


def run_command(container: AppContainer, command: str, source: str | None) -> dict:
    """Run one migration command and return its result as a dict."""
    service = container.migration_service
    source_collection = source or container.settings.source_collection
    if command == "explore":
        result = service.explore(source_collection)
    elif command == "extract-and-normalize":
        result = service.extract_and_normalize(source_collection)
    elif command == "create-indexes":
        result = service.create_indexes()
    else:
        result = service.run_full_migration(source_collection)
    return asdict(result)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return a process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging()
    container = build_container()
    try:
        payload = run_command(container, args.command, args.source)
    finally:
        asyncio.run(container.close_resources())
    json.dump(payload, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")
    return 0 if payload.get("success") else 1


if __name__ == "__main__":
    raise SystemExit(main())
