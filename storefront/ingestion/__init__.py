"""
Feed Ingestion Module
"""
from .catalog_importer import CatalogImporter, ImportResult, ImportStatus
from .feed import (
    FeedAttribute,
    FeedDocument,
    FeedProducer,
    FeedProduct,
    load_feed_file,
    parse_feed,
)
from .reference_resolver import ReferenceResolver

__all__ = [
    "CatalogImporter",
    "ImportResult",
    "ImportStatus",
    "FeedAttribute",
    "FeedDocument",
    "FeedProducer",
    "FeedProduct",
    "parse_feed",
    "load_feed_file",
    "ReferenceResolver",
]
