"""
Integration Tests - Customer Accounts
"""
import pytest

from storefront import accounts
from storefront.accounts import AccountService
from storefront.database import connection
from storefront.database.models import Customer
from storefront.errors import AuthenticationError, CustomerAlreadyExistsError


class TestAccountService:
    """Tests for registration and login"""

    async def test_register_normalizes_email(self, session_factory):
        customer = await AccountService(session_factory).register("  Anna@Example.COM ", "s3cret-pass")

        assert customer.id is not None
        assert customer.email == "anna@example.com"
        assert customer.password_hash != "s3cret-pass"

    async def test_duplicate_email_is_not_an_error_event(self, session_factory, count_rows, record_logs):
        service = AccountService(session_factory)
        await service.register("anna@example.com", "s3cret-pass")
        account_logs = record_logs(accounts)
        session_logs = record_logs(connection)

        with pytest.raises(CustomerAlreadyExistsError):
            await service.register("ANNA@example.com", "other-pass")

        assert account_logs.events("error") == []
        assert session_logs.events("error") == []
        assert "Registration rejected, email taken" in account_logs.events("info")
        assert await count_rows(Customer) == 1

    async def test_authenticate_issues_token(self, session_factory):
        service = AccountService(session_factory)
        await service.register("anna@example.com", "s3cret-pass")

        token = await service.authenticate("anna@example.com", "s3cret-pass")

        assert token.count(".") == 2

    async def test_authenticate_rejects_wrong_password(self, session_factory):
        service = AccountService(session_factory)
        await service.register("anna@example.com", "s3cret-pass")

        with pytest.raises(AuthenticationError):
            await service.authenticate("anna@example.com", "wrong")
