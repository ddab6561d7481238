"""
Cart Management

Reads and edits a customer's cart. Adding a product that is already in the
cart increases its quantity in a single upsert. Clearing the cart on checkout
belongs to ``OrderPlacement``; this service only removes single lines on
request.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.database.connection import dialect_insert, session_scope
from storefront.database.models import CartItem, Product
from storefront.errors import InvalidInputError, ProductNotFoundError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CartEntry:
    product_id: int
    quantity: int
    name: str
    price: Decimal
    image_urls: str


class CartService:
    """Cart queries and commands for one authenticated customer at a time."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_cart(self, customer_id: int) -> List[CartEntry]:
        async with session_scope(self._session_factory) as session:
            result = await session.execute(
                select(
                    CartItem.product_id,
                    CartItem.quantity,
                    Product.name,
                    Product.price,
                    Product.image_urls,
                )
                .join(Product, Product.id == CartItem.product_id)
                .where(CartItem.customer_id == customer_id)
                .order_by(CartItem.product_id)
            )
            return [
                CartEntry(
                    product_id=row.product_id,
                    quantity=row.quantity,
                    name=row.name,
                    price=row.price,
                    image_urls=row.image_urls,
                )
                for row in result
            ]

    async def add_item(self, customer_id: int, product_id: int, quantity: int) -> CartItem:
        """
        Put ``quantity`` units of a product into the cart.

        Raises:
            InvalidInputError: Quantity below one
            ProductNotFoundError: Unknown product id
        """
        if product_id is None or quantity is None or quantity < 1:
            raise InvalidInputError("Valid productId and quantity are required.")

        async with session_scope(self._session_factory) as session:
            exists = await session.scalar(select(Product.id).where(Product.id == product_id))
            if exists is None:
                raise ProductNotFoundError()

            insert = dialect_insert(session)
            stmt = insert(CartItem).values(
                customer_id=customer_id,
                product_id=product_id,
                quantity=quantity,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["customer_id", "product_id"],
                set_={"quantity": CartItem.quantity + stmt.excluded.quantity},
            ).returning(CartItem.customer_id, CartItem.product_id, CartItem.quantity)
            row = (await session.execute(stmt)).one()

        logger.info(
            "Cart item added",
            customer_id=customer_id,
            product_id=product_id,
            quantity=row.quantity,
        )
        return CartItem(
            customer_id=row.customer_id,
            product_id=row.product_id,
            quantity=row.quantity,
        )

    async def remove_item(self, customer_id: int, product_id: int) -> None:
        async with session_scope(self._session_factory) as session:
            await session.execute(
                delete(CartItem).where(
                    CartItem.customer_id == customer_id,
                    CartItem.product_id == product_id,
                )
            )
        logger.info("Cart item removed", customer_id=customer_id, product_id=product_id)
