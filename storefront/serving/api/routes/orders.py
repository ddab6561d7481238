"""
Orders API Endpoints

Checkout: converts the authenticated customer's cart into an order.
"""

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.database.connection import get_session_factory
from storefront.ordering.placement import OrderPlacement
from storefront.security import AuthenticatedCustomer
from storefront.serving.api.dependencies import get_current_customer

router = APIRouter()


class PlaceOrderRequest(BaseModel):
    shipping_address: Optional[str] = None


class PlacedOrderResponse(BaseModel):
    message: str = "Order created successfully!"
    order_id: int
    total_amount: Decimal
    item_count: int
    status: str


@router.post("", response_model=PlacedOrderResponse, status_code=201)
async def place_order(
    payload: PlaceOrderRequest,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> PlacedOrderResponse:
    """
    Place an order from the current cart.

    The total is computed from the cart under lock; the client never
    supplies prices.
    """
    order = await OrderPlacement(session_factory).place_order(
        customer.customer_id, payload.shipping_address
    )
    return PlacedOrderResponse(
        order_id=order.order_id,
        total_amount=order.total_amount,
        item_count=order.item_count,
        status=order.status.value,
    )
