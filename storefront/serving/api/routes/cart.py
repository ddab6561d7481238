"""
Cart API Endpoints
"""

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.database.connection import get_session_factory
from storefront.ordering.cart import CartService
from storefront.security import AuthenticatedCustomer
from storefront.serving.api.dependencies import get_current_customer

router = APIRouter()


class CartEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: int
    quantity: int
    name: Optional[str]
    price: Decimal
    image_urls: str


class AddToCartRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: Optional[int] = Field(default=None, alias="productId")
    quantity: Optional[int] = None


class CartItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    customer_id: int
    product_id: int
    quantity: int


@router.get("", response_model=List[CartEntryResponse])
async def get_cart(
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> List[CartEntryResponse]:
    entries = await CartService(session_factory).get_cart(customer.customer_id)
    return [CartEntryResponse.model_validate(e) for e in entries]


@router.post("", response_model=CartItemResponse)
async def add_to_cart(
    payload: AddToCartRequest,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> CartItemResponse:
    item = await CartService(session_factory).add_item(
        customer.customer_id, payload.product_id, payload.quantity
    )
    return CartItemResponse.model_validate(item)


@router.delete("/{product_id}", status_code=204)
async def remove_from_cart(
    product_id: int,
    customer: AuthenticatedCustomer = Depends(get_current_customer),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> Response:
    await CartService(session_factory).remove_item(customer.customer_id, product_id)
    return Response(status_code=204)
