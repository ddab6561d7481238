"""
Catalog Importer

Reconciles a supplier feed into the catalog tables.

The feed is authoritative: producers (keyed by name) and products (keyed by
SKU) are upserted and every attribute column is overwritten on conflict.
Each product's named attributes are replaced by the ones in the feed.
Importing the same feed twice leaves the catalog unchanged.

A run is a single transaction. The feed is fully decoded before the
transaction opens, and any failure while writing rolls back every producer,
brand, product and attribute row touched by the run.
"""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import structlog
from pydantic import BaseModel
from sqlalchemy import delete, insert as core_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.config import get_settings
from storefront.database.connection import dialect_insert
from storefront.database.models import Brand, Producer, Product, ProductAttribute
from storefront.ingestion.feed import (
    FeedDocument,
    FeedProducer,
    FeedProduct,
    load_feed_file,
    parse_feed,
)
from storefront.ingestion.reference_resolver import ReferenceResolver

logger = structlog.get_logger(__name__)

PRODUCER_COLUMNS = (
    "country_code",
    "street",
    "postal_code",
    "city",
    "email",
    "phone_number",
)

PRODUCT_COLUMNS = (
    "name",
    "ean",
    "description",
    "price",
    "suggested_price",
    "vat",
    "stock_quantity",
    "package_length",
    "package_width",
    "package_height",
    "gross_weight",
    "image_urls",
    "category_path",
    "brand_id",
    "producer_id",
)

# 16 bound columns per row; keeps one statement under the driver limit of 32767 parameters
MAX_CHUNK_SIZE = 2000


class ImportStatus(str, Enum):
    """Import run status"""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ImportResult(BaseModel):
    """Result of an import run"""
    status: ImportStatus
    producers_upserted: int = 0
    products_upserted: int = 0
    brands_resolved: int = 0
    products_without_producer: int = 0
    attributes_written: int = 0
    error_message: Optional[str] = None
    duration_seconds: float = 0
    started_at: datetime
    completed_at: Optional[datetime] = None


def _last_wins(items: List, key) -> List:
    """Drop earlier duplicates of a natural key, keeping feed order."""
    latest = {}
    for item in items:
        latest[key(item)] = item
    return list(latest.values())


class CatalogImporter:
    """
    Feed -> catalog reconciliation.

    Example:
        importer = CatalogImporter(get_session_factory())
        result = await importer.import_file("data/feed.xml")
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        chunk_size: Optional[int] = None,
    ):
        self._session_factory = session_factory
        if chunk_size is None:
            chunk_size = get_settings().feed.chunk_size
        if not 1 <= chunk_size <= MAX_CHUNK_SIZE:
            raise ValueError(f"chunk_size must be between 1 and {MAX_CHUNK_SIZE}, got {chunk_size}")
        self.chunk_size = chunk_size

    async def import_file(self, path: Union[str, Path]) -> ImportResult:
        """Decode a local feed file and import it."""
        return await self.import_document(load_feed_file(path))

    async def import_feed(self, xml_data: Union[str, bytes]) -> ImportResult:
        """Decode raw feed XML and import it."""
        return await self.import_document(parse_feed(xml_data))

    async def import_document(self, document: FeedDocument) -> ImportResult:
        """
        Import a decoded feed in one transaction.

        Returns:
            ImportResult: Counts and timings of the completed run

        Raises:
            Exception: Whatever aborted the run, after the rollback
        """
        started_at = datetime.now(timezone.utc)
        result = ImportResult(status=ImportStatus.RUNNING, started_at=started_at)
        resolver = ReferenceResolver()

        producers = _last_wins(document.producers, key=lambda p: p.name)
        products = _last_wins(document.products, key=lambda p: p.sku)

        logger.info(
            "Starting catalog import",
            producers=len(producers),
            products=len(products),
        )

        try:
            async with self._session_factory() as session:
                async with session.begin():
                    producer_ids = await self._upsert_producers(session, producers)
                    product_ids, unassigned = await self._upsert_products(
                        session, products, producer_ids, resolver
                    )
                    attributes_written = await self._replace_attributes(
                        session, products, product_ids
                    )
        except Exception as e:
            result.status = ImportStatus.FAILED
            result.error_message = str(e)
            result.completed_at = datetime.now(timezone.utc)
            result.duration_seconds = (result.completed_at - started_at).total_seconds()
            logger.error(
                "Catalog import failed, all changes rolled back",
                error_type=type(e).__name__,
                **result.model_dump(mode="json"),
            )
            raise

        result.status = ImportStatus.COMPLETED
        result.producers_upserted = len(producer_ids)
        result.products_upserted = len(products)
        result.brands_resolved = resolver.resolved_count
        result.products_without_producer = unassigned
        result.attributes_written = attributes_written
        result.completed_at = datetime.now(timezone.utc)
        result.duration_seconds = (result.completed_at - started_at).total_seconds()

        logger.info(
            "Catalog import completed",
            producers=result.producers_upserted,
            products=result.products_upserted,
            brands=result.brands_resolved,
            attributes=result.attributes_written,
            duration_seconds=result.duration_seconds,
        )
        return result

    async def _upsert_producers(
        self,
        session: AsyncSession,
        producers: List[FeedProducer],
    ) -> Dict[str, int]:
        """Upsert producers and return their name -> id map."""
        insert = dialect_insert(session)
        producer_ids: Dict[str, int] = {}

        for producer in producers:
            stmt = insert(Producer).values(**producer.model_dump())
            stmt = stmt.on_conflict_do_update(
                index_elements=["name"],
                set_={column: stmt.excluded[column] for column in PRODUCER_COLUMNS},
            ).returning(Producer.id)
            producer_ids[producer.name] = (await session.execute(stmt)).scalar_one()

        logger.info("Producers upserted", count=len(producer_ids))
        return producer_ids

    async def _upsert_products(
        self,
        session: AsyncSession,
        products: List[FeedProduct],
        producer_ids: Dict[str, int],
        resolver: ReferenceResolver,
    ) -> Tuple[Dict[str, int], int]:
        """
        Upsert products in chunks.

        Returns:
            The sku -> id map and how many products had no known producer
        """
        insert = dialect_insert(session)
        rows = []
        product_ids: Dict[str, int] = {}
        unassigned = 0

        for product in products:
            producer_id = producer_ids.get(product.producer_name) if product.producer_name else None
            if producer_id is None:
                unassigned += 1
                if product.producer_name:
                    logger.warning(
                        "Product references an undeclared producer",
                        sku=product.sku,
                        producer=product.producer_name,
                    )

            rows.append({
                "sku": product.sku,
                "name": product.name,
                "ean": product.ean,
                "description": product.description,
                "price": product.price,
                "suggested_price": product.suggested_price,
                "vat": product.vat,
                "stock_quantity": product.stock_quantity,
                "package_length": product.package_length,
                "package_width": product.package_width,
                "package_height": product.package_height,
                "gross_weight": product.gross_weight,
                "image_urls": product.image_urls_text,
                "category_path": product.category_path,
                "brand_id": await resolver.resolve(session, Brand, product.brand_name),
                "producer_id": producer_id,
            })

        for i in range(0, len(rows), self.chunk_size):
            chunk = rows[i:i + self.chunk_size]
            stmt = insert(Product).values(chunk)
            stmt = stmt.on_conflict_do_update(
                index_elements=["sku"],
                set_={column: stmt.excluded[column] for column in PRODUCT_COLUMNS},
            ).returning(Product.sku, Product.id)
            for row in await session.execute(stmt):
                product_ids[row.sku] = row.id
            logger.debug("Product chunk upserted", offset=i, size=len(chunk))

        return product_ids, unassigned

    async def _replace_attributes(
        self,
        session: AsyncSession,
        products: List[FeedProduct],
        product_ids: Dict[str, int],
    ) -> int:
        """Swap every imported product's attribute rows for the feed's; returns rows written."""
        ids = list(product_ids.values())
        for i in range(0, len(ids), self.chunk_size):
            await session.execute(
                delete(ProductAttribute).where(
                    ProductAttribute.product_id.in_(ids[i:i + self.chunk_size])
                ).execution_options(synchronize_session=False)
            )

        rows = [
            {"product_id": product_ids[product.sku], "name": attribute.name, "value": attribute.value}
            for product in products
            for attribute in product.attributes
        ]
        if rows:
            await session.execute(core_insert(ProductAttribute), rows)

        logger.info("Product attributes replaced", products=len(ids), attributes=len(rows))
        return len(rows)
