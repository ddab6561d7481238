"""
Integration Tests - Cart
"""
from decimal import Decimal

import pytest

from storefront.errors import InvalidInputError, ProductNotFoundError
from storefront.ordering.cart import CartService


class TestCartService:
    """Tests for cart commands and queries"""

    async def test_empty_cart(self, session_factory, customer):
        assert await CartService(session_factory).get_cart(customer.id) == []

    async def test_add_item(self, session_factory, customer, catalog):
        service = CartService(session_factory)

        item = await service.add_item(customer.id, catalog["A"].id, 2)

        assert item.quantity == 2
        entries = await service.get_cart(customer.id)
        assert len(entries) == 1
        assert entries[0].product_id == catalog["A"].id
        assert entries[0].name == "Product A"
        assert entries[0].price == Decimal("10.00")

    async def test_adding_again_increases_quantity(self, session_factory, customer, catalog):
        service = CartService(session_factory)

        await service.add_item(customer.id, catalog["B"].id, 1)
        item = await service.add_item(customer.id, catalog["B"].id, 3)

        assert item.quantity == 4
        entries = await service.get_cart(customer.id)
        assert [(e.product_id, e.quantity) for e in entries] == [(catalog["B"].id, 4)]

    @pytest.mark.parametrize("quantity", [0, -1, None])
    async def test_rejects_bad_quantity(self, session_factory, customer, catalog, quantity):
        with pytest.raises(InvalidInputError):
            await CartService(session_factory).add_item(customer.id, catalog["A"].id, quantity)

    async def test_rejects_unknown_product(self, session_factory, customer):
        with pytest.raises(ProductNotFoundError):
            await CartService(session_factory).add_item(customer.id, 9999, 1)

    async def test_remove_item(self, session_factory, filled_cart, catalog):
        service = CartService(session_factory)

        await service.remove_item(filled_cart.id, catalog["A"].id)

        entries = await service.get_cart(filled_cart.id)
        assert [e.product_id for e in entries] == [catalog["B"].id]

    async def test_remove_missing_item_is_noop(self, session_factory, filled_cart, catalog):
        service = CartService(session_factory)

        await service.remove_item(filled_cart.id, 9999)

        assert len(await service.get_cart(filled_cart.id)) == 2
