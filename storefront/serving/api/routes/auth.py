"""
Authentication Endpoints

Registration, login and the authenticated customer's profile.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.accounts import AccountService
from storefront.database.connection import get_session_factory
from storefront.security import AuthenticatedCustomer
from storefront.serving.api.dependencies import get_current_customer

router = APIRouter()


class RegisterRequest(BaseModel):
    """Missing fields are reported as 400 by the service, not as 422."""
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class CustomerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    created_at: Optional[datetime]


class TokenResponse(BaseModel):
    message: str = "Login successful"
    token: str


class ProfileResponse(BaseModel):
    message: str = "This is protected data for your profile."
    customer_id: int
    email: str


@router.post("/auth/register", response_model=CustomerResponse, status_code=201)
async def register(
    payload: RegisterRequest,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> CustomerResponse:
    customer = await AccountService(session_factory).register(
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    return CustomerResponse.model_validate(customer)


@router.post("/auth/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> TokenResponse:
    token = await AccountService(session_factory).authenticate(payload.email, payload.password)
    return TokenResponse(token=token)


@router.get("/account/profile", response_model=ProfileResponse)
async def profile(
    customer: AuthenticatedCustomer = Depends(get_current_customer),
) -> ProfileResponse:
    return ProfileResponse(customer_id=customer.customer_id, email=customer.email)
