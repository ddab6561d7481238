"""
Products API Endpoints

Read side of the catalog reconciled from the supplier feed.
"""

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.database.connection import get_session_factory
from storefront.database.models import Brand, Producer, Product, ProductAttribute
from storefront.errors import ProductNotFoundError

router = APIRouter()


class ProductSummary(BaseModel):
    """Product list entry"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    sku: str
    name: Optional[str]
    price: Decimal
    suggested_price: Decimal
    vat: int
    stock_quantity: int
    image_urls: str
    category_path: Optional[str]
    brand_name: Optional[str] = None
    producer_name: Optional[str] = None


class AttributeResponse(BaseModel):
    name: str
    value: Optional[str]


class ProductDetail(ProductSummary):
    """Full product record with its feed attributes"""
    ean: Optional[str]
    description: Optional[str]
    package_length: Decimal
    package_width: Decimal
    package_height: Decimal
    gross_weight: Decimal
    attributes: List[AttributeResponse] = []


class ProductListResponse(BaseModel):
    """Paginated product list"""
    items: List[ProductSummary]
    total: int
    page: int
    page_size: int
    total_pages: int


def _with_reference_names():
    return (
        select(Product, Brand.name.label("brand_name"), Producer.name.label("producer_name"))
        .outerjoin(Brand, Product.brand_id == Brand.id)
        .outerjoin(Producer, Product.producer_id == Producer.id)
    )


@router.get("", response_model=ProductListResponse)
async def list_products(
    page: int = Query(1, ge=1),
    page_size: int = Query(12, ge=1, le=100),
    category: Optional[str] = None,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> ProductListResponse:
    """
    List products with pagination.

    ``category`` matches the beginning of the category path, case-insensitive.
    """
    query = _with_reference_names()
    count_query = select(func.count(Product.id))

    if category:
        condition = Product.category_path.ilike(f"{category}%")
        query = query.where(condition)
        count_query = count_query.where(condition)

    offset = (page - 1) * page_size
    query = query.order_by(Product.id).offset(offset).limit(page_size)

    async with session_factory() as db:
        total = (await db.execute(count_query)).scalar() or 0
        rows = (await db.execute(query)).all()

    items = [
        ProductSummary.model_validate(product).model_copy(
            update={"brand_name": brand_name, "producer_name": producer_name}
        )
        for product, brand_name, producer_name in rows
    ]

    return ProductListResponse(
        items=items,
        total=total,
        page=page,
        page_size=page_size,
        total_pages=(total + page_size - 1) // page_size,
    )


@router.get("/{sku}", response_model=ProductDetail)
async def get_product(
    sku: str,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> ProductDetail:
    """Get product details by SKU, attributes in feed order."""
    async with session_factory() as db:
        row = (await db.execute(_with_reference_names().where(Product.sku == sku))).first()
        if row is None:
            raise ProductNotFoundError()

        product, brand_name, producer_name = row
        attributes = (await db.execute(
            select(ProductAttribute.name, ProductAttribute.value)
            .where(ProductAttribute.product_id == product.id)
            .order_by(ProductAttribute.id)
        )).all()

    return ProductDetail.model_validate(product).model_copy(
        update={
            "brand_name": brand_name,
            "producer_name": producer_name,
            "attributes": [AttributeResponse(name=a.name, value=a.value) for a in attributes],
        }
    )
