"""
Test Suite Configuration
"""
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from storefront.config import Settings
from storefront.database.connection import create_session_factory
from storefront.database.models import Base, CartItem, Customer, Product


SAMPLE_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<Document>
  <responsibleProducers>
    <p>
      <name>Toy Factory Sp. z o.o.</name>
      <address>
        <countryCode>PL</countryCode>
        <street>ul. Fabryczna 7</street>
        <postalCode>30-001</postalCode>
        <city>Kraków</city>
      </address>
      <contact>
        <email>kontakt@toyfactory.pl</email>
        <phoneNumber>+48 12 345 67 89</phoneNumber>
      </contact>
    </p>
    <p>
      <name>Nordic Play AB</name>
      <address>
        <countryCode>SE</countryCode>
        <city>Malmö</city>
      </address>
      <contact>
        <email>info@nordicplay.se</email>
      </contact>
    </p>
  </responsibleProducers>
  <Produkt>
    <Indeks>X1</Indeks>
    <Nazwa>Klocki drewniane 50 el.</Nazwa>
    <Ean>5901234123457</Ean>
    <opis><![CDATA[<p>Kolorowe klocki</p>]]></opis>
    <Cena_z_cennika>49.90</Cena_z_cennika>
    <Vat>23%</Vat>
    <Stan_mag>12</Stan_mag>
    <Szt_dlugosc_opakowania>30.5</Szt_dlugosc_opakowania>
    <Szt_szerokosc_opakowania>20</Szt_szerokosc_opakowania>
    <Szt_wysokosc_opakowania>10</Szt_wysokosc_opakowania>
    <Szt_waga_brutto>1.25</Szt_waga_brutto>
    <linki_do_zdjec>
      <link_do_zdjecia>https://cdn.example.com/x1-a.jpg</link_do_zdjecia>
      <link_do_zdjecia>https://cdn.example.com/x1-b.jpg</link_do_zdjecia>
    </linki_do_zdjec>
    <Kategoria>Zabawki &gt; Klocki</Kategoria>
    <Marka>WoodPlay</Marka>
    <a name="Wiek">3+</a>
    <a name="Producent odpowiedzialny">Toy Factory Sp. z o.o.</a>
  </Produkt>
  <Produkt>
    <Indeks>X2</Indeks>
    <Nazwa>Puzzle 100 el.</Nazwa>
    <Cena_z_cennika>19.99</Cena_z_cennika>
    <Cena_z_sugerowana>24.99</Cena_z_sugerowana>
    <Vat>8%</Vat>
    <Stan_mag>40</Stan_mag>
    <Kategoria>Zabawki &gt; Puzzle</Kategoria>
    <Marka>WoodPlay</Marka>
    <a name="Producent odpowiedzialny">Nordic Play AB</a>
  </Produkt>
  <Produkt>
    <Indeks>X3</Indeks>
    <Nazwa>Kredki 12 kolorów</Nazwa>
    <Cena_z_cennika>8.50</Cena_z_cennika>
    <Kategoria>Plastyka</Kategoria>
  </Produkt>
</Document>
"""


def _serialize_like_row_locks(engine: AsyncEngine) -> None:
    """
    SQLite ignores FOR UPDATE; taking the write lock at BEGIN makes concurrent
    transactions queue the way row locks would make them queue on PostgreSQL.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(APP_ENV="testing", DEBUG=True)


@pytest.fixture
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File backed SQLite engine; in-memory databases are per connection."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}",
        echo=False,
    )
    _serialize_like_row_locks(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(test_engine)


@pytest.fixture
def sample_feed() -> str:
    return SAMPLE_FEED


@pytest.fixture
async def customer(session_factory) -> Customer:
    async with session_factory() as session:
        async with session.begin():
            customer = Customer(email="anna@example.com", password_hash="not-a-real-hash")
            session.add(customer)
        return customer


@pytest.fixture
async def catalog(session_factory) -> dict:
    """Two products: A at 10.00 and B at 5.50"""
    async with session_factory() as session:
        async with session.begin():
            product_a = Product(sku="A", name="Product A", price=Decimal("10.00"))
            product_b = Product(sku="B", name="Product B", price=Decimal("5.50"))
            session.add_all([product_a, product_b])
        return {"A": product_a, "B": product_b}


@pytest.fixture
async def filled_cart(session_factory, customer, catalog) -> Customer:
    """Cart: 2 x A, 1 x B"""
    async with session_factory() as session:
        async with session.begin():
            session.add_all([
                CartItem(customer_id=customer.id, product_id=catalog["A"].id, quantity=2),
                CartItem(customer_id=customer.id, product_id=catalog["B"].id, quantity=1),
            ])
    return customer


@pytest.fixture
def count_rows(session_factory):
    """Row count of a table, read in its own short transaction"""

    async def _count(model) -> int:
        async with session_factory() as session:
            return (await session.execute(select(func.count()).select_from(model))).scalar_one()

    return _count


class RecordingLogger:
    """Stand-in for a module level structlog logger; keeps (level, event, fields)"""

    def __init__(self):
        self.records = []

    def __getattr__(self, level):
        def record(event, **fields):
            self.records.append((level, event, fields))
        return record

    def events(self, level: str) -> list:
        return [event for record_level, event, _ in self.records if record_level == level]


@pytest.fixture
def record_logs(monkeypatch):
    """Replace ``module.logger`` with a RecordingLogger for the test."""

    def _record(module) -> RecordingLogger:
        recorder = RecordingLogger()
        monkeypatch.setattr(module, "logger", recorder)
        return recorder

    return _record
