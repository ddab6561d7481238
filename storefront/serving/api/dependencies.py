"""
Shared FastAPI dependencies
"""

from typing import Optional

from fastapi import Header

from storefront.security import AuthenticatedCustomer, bearer_token, verify_access_token


async def get_current_customer(
    authorization: Optional[str] = Header(default=None),
) -> AuthenticatedCustomer:
    """Resolve the bearer token before the route body runs."""
    return verify_access_token(bearer_token(authorization))
