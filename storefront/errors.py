"""
Domain Errors

Every error a caller can act on carries the HTTP status it maps to. Anything
else (database outages, lock timeouts) propagates as the library's own
exception and is reported as a generic failure.
"""


class StorefrontError(Exception):
    """Base class for storefront errors"""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(StorefrontError):
    """Required input missing or malformed; raised before any transaction."""

    status_code = 400


class BusinessRuleError(StorefrontError):
    """A business rule rejected the operation; its transaction is rolled back."""

    status_code = 400


class EmptyCartError(BusinessRuleError):
    def __init__(self, message: str = "Cannot create order from an empty cart."):
        super().__init__(message)


class ConflictError(StorefrontError):
    """A unique natural key already exists."""

    status_code = 409


class CustomerAlreadyExistsError(ConflictError):
    def __init__(self, message: str = "A user with this email already exists."):
        super().__init__(message)


class NotFoundError(StorefrontError):
    status_code = 404


class ProductNotFoundError(NotFoundError):
    def __init__(self, message: str = "Product not found"):
        super().__init__(message)


class AuthenticationError(StorefrontError):
    """Credentials or token missing or wrong."""

    status_code = 401


class TokenRejectedError(AuthenticationError):
    """A token was presented but failed verification."""

    status_code = 403


class FeedParseError(StorefrontError):
    """The supplier feed could not be decoded; nothing was written."""

    status_code = 422
