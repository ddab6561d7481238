"""
Customer Accounts

Registration and credential login. Email is the natural key of a customer;
registering an existing email is reported as a conflict.
"""

from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.concurrency import run_in_threadpool

from storefront.database.connection import session_scope
from storefront.database.models import Customer
from storefront.errors import AuthenticationError, CustomerAlreadyExistsError, InvalidInputError
from storefront.security import create_access_token, hash_password, verify_password

logger = structlog.get_logger(__name__)


class AccountService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def register(
        self,
        email: Optional[str],
        password: Optional[str],
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
    ) -> Customer:
        """
        Create a customer account.

        Raises:
            InvalidInputError: Email or password missing
            CustomerAlreadyExistsError: Email already registered
        """
        if not email or not password:
            raise InvalidInputError("Email and password are required.")
        if len(password.encode("utf-8")) > 72:
            # bcrypt only looks at the first 72 bytes
            raise InvalidInputError("Password must be at most 72 bytes long.")

        email = email.strip().lower()
        password_hash = await run_in_threadpool(hash_password, password)
        customer = Customer(
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
        )

        async with self._session_factory() as session:
            try:
                async with session.begin():
                    session.add(customer)
                    await session.flush()
                    await session.refresh(customer)
            except IntegrityError as e:
                # the unique email index is the only constraint a new row can hit
                logger.info("Registration rejected, email taken", email=email)
                raise CustomerAlreadyExistsError() from e

        logger.info("Customer registered", customer_id=customer.id)
        return customer

    async def authenticate(self, email: Optional[str], password: Optional[str]) -> str:
        """
        Check credentials and issue an access token.

        Raises:
            AuthenticationError: Unknown email or wrong password
        """
        if not email or not password or len(password.encode("utf-8")) > 72:
            raise AuthenticationError("Invalid credentials")

        async with session_scope(self._session_factory) as session:
            customer = await session.scalar(
                select(Customer).where(Customer.email == email.strip().lower())
            )

        if customer is None:
            raise AuthenticationError("Invalid credentials")

        matches = await run_in_threadpool(verify_password, password, customer.password_hash)
        if not matches:
            logger.info("Login rejected", customer_id=customer.id)
            raise AuthenticationError("Invalid credentials")

        return create_access_token(customer.id, customer.email)
