#!/usr/bin/env python
"""
Feed Import Entry Point

Runs one catalog import from a local copy of the supplier feed.
Usage:
    storefront-import --file data/feed.xml
    python -m storefront.ingestion.import_feed --log-level DEBUG

Import runs must not overlap; schedule them serially.
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from storefront.config import get_settings
from storefront.config.logging import configure_logging, get_logger
from storefront.database.connection import (
    close_database,
    get_session_factory,
    init_database,
)
from storefront.ingestion.catalog_importer import CatalogImporter, ImportResult
from storefront.ingestion.feed import load_feed_file

logger = get_logger(__name__)


async def import_feed_file(path: str) -> ImportResult:
    """Decode the feed, then open the pool and import it."""
    # decode before touching the database so a bad feed never opens a transaction
    document = load_feed_file(path)

    await init_database()
    try:
        importer = CatalogImporter(get_session_factory())
        return await importer.import_document(document)
    finally:
        await close_database()


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Import the supplier product feed into the catalog")
    parser.add_argument(
        "--file",
        default=settings.feed.path,
        help=f"Path to the feed XML (default: {settings.feed.path})",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override LOG_LEVEL for this run",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "text"],
        default=None,
        help="Override LOG_FORMAT for this run",
    )
    args = parser.parse_args(argv)

    configure_logging(args.log_level, args.log_format)

    try:
        result = asyncio.run(import_feed_file(args.file))
    except Exception as e:
        logger.error("Feed import aborted", file=args.file, error=str(e), error_type=type(e).__name__)
        return 1

    logger.info("Feed import finished", **result.model_dump(mode="json"))
    return 0


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
