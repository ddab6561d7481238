"""
Order Placement Transaction

Turns a customer's cart into an order in one database transaction:

    begin -> lock-cart -> validate-nonempty -> compute-total
          -> insert-order -> insert-order-items -> clear-cart -> commit

Any failure after ``begin`` rolls the whole transaction back before the error
reaches the caller, so an order never exists without its items and a cart is
never cleared without its order.

The cart rows are read ``FOR UPDATE`` together with the current product
prices. That single read is the snapshot for both the order total and every
``price_at_purchase``; prices are not read again. A second checkout by the same
customer waits on the row locks and then finds the cart empty. Only
``cart_items`` rows are locked, so checkouts of different customers never wait
on each other even when they buy the same product.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List

import structlog
from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.database.models import CartItem, Order, OrderItem, OrderStatus, Product
from storefront.errors import EmptyCartError, InvalidInputError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CartLine:
    """One locked cart row with the unit price read under the lock"""
    product_id: int
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class PlacedOrder:
    """Outcome of a successful checkout"""
    order_id: int
    customer_id: int
    total_amount: Decimal
    item_count: int
    status: OrderStatus


def compute_total(lines: List[CartLine]) -> Decimal:
    """Sum of unit price x quantity over the snapshot."""
    return sum((line.line_total for line in lines), Decimal("0.00"))


class OrderPlacement:
    """
    Checkout use case.

    Example:
        placement = OrderPlacement(get_session_factory())
        order = await placement.place_order(customer_id, "ul. Lipowa 1, Kraków")
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def place_order(self, customer_id: int, shipping_address: str) -> PlacedOrder:
        """
        Convert the customer's cart into a pending order.

        Raises:
            InvalidInputError: Shipping address missing (no transaction opened)
            EmptyCartError: Nothing in the cart at lock time (rolled back)
        """
        if shipping_address is None or not shipping_address.strip():
            raise InvalidInputError("Shipping address is required.")
        shipping_address = shipping_address.strip()

        async with self._session_factory() as session:
            async with session.begin():
                lines = await self._lock_cart(session, customer_id)
                if not lines:
                    raise EmptyCartError()

                total_amount = compute_total(lines)
                order_id = await self._insert_order(
                    session, customer_id, total_amount, shipping_address
                )
                await self._insert_order_items(session, order_id, lines)
                await self._clear_cart(session, customer_id, lines)

        logger.info(
            "Order placed",
            order_id=order_id,
            customer_id=customer_id,
            total_amount=str(total_amount),
            items=len(lines),
        )
        return PlacedOrder(
            order_id=order_id,
            customer_id=customer_id,
            total_amount=total_amount,
            item_count=len(lines),
            status=OrderStatus.PENDING,
        )

    async def _lock_cart(self, session: AsyncSession, customer_id: int) -> List[CartLine]:
        # rows are locked in product order so overlapping lock sets cannot deadlock
        stmt = (
            select(CartItem.product_id, CartItem.quantity, Product.price)
            .join(Product, Product.id == CartItem.product_id)
            .where(CartItem.customer_id == customer_id)
            .order_by(CartItem.product_id)
            .with_for_update(of=CartItem)
        )
        result = await session.execute(stmt)
        return [
            CartLine(product_id=row.product_id, quantity=row.quantity, unit_price=row.price)
            for row in result
        ]

    async def _insert_order(
        self,
        session: AsyncSession,
        customer_id: int,
        total_amount: Decimal,
        shipping_address: str,
    ) -> int:
        stmt = (
            insert(Order)
            .values(
                customer_id=customer_id,
                total_amount=total_amount,
                shipping_address=shipping_address,
                status=OrderStatus.PENDING,
            )
            .returning(Order.id)
        )
        return (await session.execute(stmt)).scalar_one()

    async def _insert_order_items(
        self,
        session: AsyncSession,
        order_id: int,
        lines: List[CartLine],
    ) -> None:
        await session.execute(
            insert(OrderItem),
            [
                {
                    "order_id": order_id,
                    "product_id": line.product_id,
                    "quantity": line.quantity,
                    "price_at_purchase": line.unit_price,
                }
                for line in lines
            ],
        )

    async def _clear_cart(
        self,
        session: AsyncSession,
        customer_id: int,
        lines: List[CartLine],
    ) -> None:
        # only the rows that went into the order; lines added after the lock stay
        await session.execute(
            delete(CartItem).where(
                CartItem.customer_id == customer_id,
                CartItem.product_id.in_([line.product_id for line in lines]),
            )
        )
