"""
Database Models - Catalog and Checkout Schema

Catalog tables are reconciled from the supplier feed and keyed by natural
keys:
- Producer: unique name
- Brand: unique name
- Product: unique SKU
- ProductAttribute: rows replaced per product on import

Checkout tables:
- Customer: registered shop account
- CartItem: mutable cart line, one per (customer, product)
- Order / OrderItem: immutable record of a checkout with price snapshot
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, List

from sqlalchemy import (
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# ENUMERATIONS
# =============================================================================

class OrderStatus(str, Enum):
    """Order status enumeration"""
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# =============================================================================
# CATALOG
# =============================================================================

class Producer(Base):
    """
    Responsible producer declared in the supplier feed.

    Every attribute is overwritten on each import.
    """
    __tablename__ = "producers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    # Address
    country_code: Mapped[Optional[str]] = mapped_column(String(10))
    street: Mapped[Optional[str]] = mapped_column(String(255))
    postal_code: Mapped[Optional[str]] = mapped_column(String(20))
    city: Mapped[Optional[str]] = mapped_column(String(100))

    # Contact
    email: Mapped[Optional[str]] = mapped_column(String(255))
    phone_number: Mapped[Optional[str]] = mapped_column(String(50))

    products: Mapped[List["Product"]] = relationship(back_populates="producer")


class Brand(Base):
    """Brand lookup table, populated through the reference resolver."""
    __tablename__ = "brands"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    products: Mapped[List["Product"]] = relationship(back_populates="brand")


class Product(Base):
    """
    Catalog product keyed by supplier SKU.

    ``image_urls`` keeps the feed's image list as one space-delimited string.
    """
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sku: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    # Product details
    name: Mapped[Optional[str]] = mapped_column(String(500))
    ean: Mapped[Optional[str]] = mapped_column(String(50))
    description: Mapped[Optional[str]] = mapped_column(Text)

    # Pricing
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    suggested_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    vat: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Inventory
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Packaging
    package_length: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    package_width: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    package_height: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=0)
    gross_weight: Mapped[Decimal] = mapped_column(Numeric(10, 3), nullable=False, default=0)

    image_urls: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category_path: Mapped[Optional[str]] = mapped_column(String(500))  # e.g. "Zabawki > Klocki"

    brand_id: Mapped[Optional[int]] = mapped_column(ForeignKey("brands.id"))
    producer_id: Mapped[Optional[int]] = mapped_column(ForeignKey("producers.id"))

    brand: Mapped[Optional["Brand"]] = relationship(back_populates="products")
    producer: Mapped[Optional["Producer"]] = relationship(back_populates="products")

    __table_args__ = (
        Index("ix_products_category_path", "category_path"),
        Index("ix_products_brand", "brand_id"),
        Index("ix_products_producer", "producer_id"),
    )


class ProductAttribute(Base):
    """
    Named product property from the feed (``<a name="Wiek">3+</a>``).

    The rows of a product are replaced as a whole on every import.
    """
    __tablename__ = "product_attributes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        Index("ix_product_attributes_product", "product_id"),
    )


# =============================================================================
# CUSTOMERS AND CHECKOUT
# =============================================================================

class Customer(Base):
    """Registered shop customer"""
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[Optional[str]] = mapped_column(String(100))
    last_name: Mapped[Optional[str]] = mapped_column(String(100))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    orders: Mapped[List["Order"]] = relationship(back_populates="customer")


class CartItem(Base):
    """Cart line; one row per product per customer"""
    __tablename__ = "cart_items"

    customer_id: Mapped[int] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), primary_key=True
    )
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), primary_key=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    product: Mapped["Product"] = relationship()


class Order(Base):
    """
    Order placed from a cart.

    ``total_amount`` is always computed server side from the locked cart
    snapshot and equals the sum of its items' ``price_at_purchase * quantity``.
    """
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(ForeignKey("customers.id"), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    shipping_address: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(
            OrderStatus,
            name="order_status",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=OrderStatus.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    customer: Mapped["Customer"] = relationship(back_populates="orders")
    items: Mapped[List["OrderItem"]] = relationship(back_populates="order")

    __table_args__ = (
        Index("ix_orders_customer", "customer_id"),
    )


class OrderItem(Base):
    """Order line with the unit price frozen at checkout"""
    __tablename__ = "order_items"

    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), primary_key=True
    )
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), primary_key=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    price_at_purchase: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    order: Mapped["Order"] = relationship(back_populates="items")
    product: Mapped["Product"] = relationship()
