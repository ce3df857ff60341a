"""
Back Office Reporting - Test Configuration

Pytest fixtures and configuration.

Store and API tests run the real SQL aggregate store against an in-memory
SQLite database (aiosqlite). Timestamps are written as UTC, the same way
PostgreSQL stores timestamptz.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator, Dict, Iterable, Optional, Tuple
from uuid import uuid4

import pytest
import pytest_asyncio
from dateutil import tz
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import backoffice.models  # noqa: F401
from backoffice.database import Base, get_async_session
from backoffice.models import (
    AccountClass,
    AccountSubClass,
    CategoryClass,
    ChartOfAccount,
    GeneralLedger,
    GeneralLedgerDetail,
    GeneralSetting,
    People,
    Transaction,
    TransactionDetail,
    TransactionType,
    Unit,
    Vector,
)
from backoffice.services.aggregate_store import SqlAggregateStore
from main import app


# Test database URL (in-memory, one per test)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

REPORT_TIMEZONE = "Asia/Bangkok"


def local_time(year: int, month: int, day: int, hour: int = 12, minute: int = 0) -> datetime:
    """A wall-clock time in the report time zone."""
    return datetime(year, month, day, hour, minute, tzinfo=tz.gettz(REPORT_TIMEZONE))


@pytest_asyncio.fixture(scope="function")
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database with every table created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def store(db_session: AsyncSession) -> SqlAggregateStore:
    return SqlAggregateStore(db_session, REPORT_TIMEZONE)


# ===========================================
# DATA FIXTURES
# ===========================================

# Class code and profit/loss polarity per category
CLASS_LAYOUT: Dict[CategoryClass, Tuple[str, Vector]] = {
    CategoryClass.CURRENT_ASSET: ("1", Vector.POSITIVE),
    CategoryClass.FIXED_ASSET: ("1.2", Vector.POSITIVE),
    CategoryClass.CURRENT_LIABILITIES: ("2", Vector.POSITIVE),
    CategoryClass.LONG_TERM_LIABILITIES: ("2.2", Vector.POSITIVE),
    CategoryClass.EQUITY: ("3", Vector.POSITIVE),
    CategoryClass.REVENUE: ("4", Vector.NEGATIVE),
    CategoryClass.COGS: ("5", Vector.POSITIVE),
    CategoryClass.COGM: ("5.5", Vector.POSITIVE),
    CategoryClass.EXPENSE: ("6", Vector.POSITIVE),
    CategoryClass.OTHER_REVENUE: ("7", Vector.NEGATIVE),
    CategoryClass.OTHER_EXPENSE: ("8", Vector.POSITIVE),
    CategoryClass.TAX: ("9", Vector.POSITIVE),
}

# Credit-normal classes; every other class is debit-normal
CREDIT_BALANCE_CATEGORIES = {
    CategoryClass.CURRENT_LIABILITIES,
    CategoryClass.LONG_TERM_LIABILITIES,
    CategoryClass.EQUITY,
}


class LedgerFactory:
    """Writes units, transactions and posted ledgers for a test."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._sub_classes: Dict[CategoryClass, AccountSubClass] = {}

    async def _save(self, *objects):
        self.session.add_all(objects)
        await self.session.flush()

    async def unit(self, name: str = "Toko Pusat") -> Unit:
        unit = Unit(id=uuid4(), name=name, code=name.upper().replace(" ", "-")[:50])
        await self._save(unit)
        return unit

    async def people(self, unit: Unit, code: str, name: str) -> People:
        partner = People(id=uuid4(), unit_id=unit.id, code=code, name=name)
        await self._save(partner)
        return partner

    async def general_setting(self, unit: Unit, current_profit_account: Optional[ChartOfAccount]) -> GeneralSetting:
        setting = GeneralSetting(
            id=uuid4(),
            unit_id=unit.id,
            current_profit_account_id=current_profit_account.id if current_profit_account else None,
        )
        await self._save(setting)
        return setting

    async def _sub_class(self, category: CategoryClass) -> AccountSubClass:
        if category not in self._sub_classes:
            code, position = CLASS_LAYOUT[category]
            account_class = AccountClass(
                id=uuid4(),
                code=code,
                name=category.value.replace("_", " ").title(),
                category_class=category,
                balance_sheet_position=(
                    Vector.NEGATIVE if category in CREDIT_BALANCE_CATEGORIES else Vector.POSITIVE
                ),
                profit_loss_position=position,
            )
            sub_class = AccountSubClass(
                id=uuid4(),
                account_class_id=account_class.id,
                code=f"{code}.1",
                name=f"{account_class.name} Sub",
            )
            await self._save(account_class, sub_class)
            self._sub_classes[category] = sub_class
        return self._sub_classes[category]

    async def account(self, unit: Unit, category: CategoryClass, code: str, name: Optional[str] = None) -> ChartOfAccount:
        sub_class = await self._sub_class(category)
        account = ChartOfAccount(
            id=uuid4(),
            account_sub_class_id=sub_class.id,
            unit_id=unit.id,
            code=code,
            name=name or f"Account {code}",
        )
        await self._save(account)
        return account

    async def transaction(
        self,
        unit: Unit,
        transaction_type: TransactionType,
        entry_date: datetime,
        total: str = "0",
        under_payment: str = "0",
        number: Optional[str] = None,
        partner: Optional[People] = None,
    ) -> Transaction:
        transaction = Transaction(
            id=uuid4(),
            unit_id=unit.id,
            transaction_number=number,
            people_id=partner.id if partner else None,
            transaction_type=transaction_type,
            entry_date=entry_date.astimezone(timezone.utc),
            total=Decimal(total),
            under_payment=Decimal(under_payment),
        )
        await self._save(transaction)
        return transaction

    async def payment(
        self,
        unit: Unit,
        payment_type: TransactionType,
        entry_date: datetime,
        settles: Iterable[Tuple[Transaction, str]],
        number: Optional[str] = None,
    ) -> Transaction:
        """A payment transaction with one detail row per settled invoice."""
        settles = list(settles)
        payment = await self.transaction(
            unit,
            payment_type,
            entry_date,
            total=str(sum(Decimal(amount) for _, amount in settles)),
            number=number,
        )
        details = [
            TransactionDetail(
                id=uuid4(),
                transaction_id=payment.id,
                transaction_payment_id=invoice.id,
                price_input=Decimal(amount),
            )
            for invoice, amount in settles
        ]
        await self._save(*details)
        return payment

    async def post(
        self,
        transaction: Transaction,
        lines: Iterable[Tuple[ChartOfAccount, str, Vector]],
    ) -> GeneralLedger:
        """Ledger of a transaction with the given (account, amount, vector) lines."""
        ledger = GeneralLedger(id=uuid4(), unit_id=transaction.unit_id, transaction_id=transaction.id)
        await self._save(ledger)
        details = [
            GeneralLedgerDetail(
                id=uuid4(),
                general_ledger_id=ledger.id,
                chart_of_account_id=account.id,
                amount=Decimal(amount),
                vector=vector,
            )
            for account, amount, vector in lines
        ]
        await self._save(*details)
        return ledger


@pytest.fixture
def ledger(db_session: AsyncSession) -> LedgerFactory:
    return LedgerFactory(db_session)


@pytest_asyncio.fixture
async def test_unit(ledger: LedgerFactory) -> Unit:
    """Create a test unit."""
    return await ledger.unit()


@pytest_asyncio.fixture
async def trading_books(ledger: LedgerFactory, test_unit: Unit) -> Dict[str, ChartOfAccount]:
    """
    A unit with a month of posted trading in January 2024.

    Income 1,200 (sales 1,000 + other revenue 200), expenses 450
    (cost of goods 300 + operating expense 100 + tax 50). Every posting
    balances.
    """
    accounts = {
        "cash": await ledger.account(test_unit, CategoryClass.CURRENT_ASSET, "1101", "Kas"),
        "inventory": await ledger.account(test_unit, CategoryClass.CURRENT_ASSET, "1102", "Persediaan"),
        "sales": await ledger.account(test_unit, CategoryClass.REVENUE, "4101", "Penjualan"),
        "other_revenue": await ledger.account(test_unit, CategoryClass.OTHER_REVENUE, "7101", "Pendapatan Lain"),
        "cogs": await ledger.account(test_unit, CategoryClass.COGS, "5101", "Harga Pokok"),
        "expense": await ledger.account(test_unit, CategoryClass.EXPENSE, "6101", "Beban Listrik"),
        "tax": await ledger.account(test_unit, CategoryClass.TAX, "9101", "Pajak"),
    }

    sale = await ledger.transaction(test_unit, TransactionType.SALE_INVOICE, local_time(2024, 1, 5), total="1000")
    await ledger.post(sale, [
        (accounts["cash"], "1000", Vector.POSITIVE),
        (accounts["sales"], "1000", Vector.NEGATIVE),
        (accounts["cogs"], "300", Vector.POSITIVE),
        (accounts["inventory"], "300", Vector.NEGATIVE),
    ])

    revenue = await ledger.transaction(test_unit, TransactionType.REVENUE, local_time(2024, 1, 10), total="200")
    await ledger.post(revenue, [
        (accounts["cash"], "200", Vector.POSITIVE),
        (accounts["other_revenue"], "200", Vector.NEGATIVE),
    ])

    expense = await ledger.transaction(test_unit, TransactionType.EXPENSE, local_time(2024, 1, 20), total="150")
    await ledger.post(expense, [
        (accounts["expense"], "100", Vector.POSITIVE),
        (accounts["tax"], "50", Vector.POSITIVE),
        (accounts["cash"], "150", Vector.NEGATIVE),
    ])

    return accounts


@pytest_asyncio.fixture
async def balance_books(ledger: LedgerFactory, test_unit: Unit, trading_books) -> Dict[str, ChartOfAccount]:
    """
    trading_books with December 2023 opening activity, a February 2024 sale
    and a current-profit account configured for the unit.

    Balance sheet for January 2024 (begin / debit / credit / end):
    - Kas 4,600 / 1,200 / 150 / 5,650
    - Persediaan 800 / 0 / 300 / 500
    - Modal 5,000 / 0 / 0 / 5,000
    - Laba Tahun Berjalan 400 / 450 / 1,200 / 1,150
    """
    accounts = dict(trading_books)
    accounts["capital"] = await ledger.account(test_unit, CategoryClass.EQUITY, "3101", "Modal")
    accounts["current_profit"] = await ledger.account(test_unit, CategoryClass.EQUITY, "3201", "Laba Tahun Berjalan")

    opening = await ledger.transaction(test_unit, TransactionType.JOURNAL_ENTRY, local_time(2023, 12, 1))
    await ledger.post(opening, [
        (accounts["cash"], "5000", Vector.POSITIVE),
        (accounts["capital"], "5000", Vector.NEGATIVE),
    ])

    stock = await ledger.transaction(test_unit, TransactionType.PURCHASE_INVOICE, local_time(2023, 12, 10), total="800")
    await ledger.post(stock, [
        (accounts["inventory"], "800", Vector.POSITIVE),
        (accounts["cash"], "800", Vector.NEGATIVE),
    ])

    december_sale = await ledger.transaction(
        test_unit, TransactionType.SALE_INVOICE, local_time(2023, 12, 20), total="400",
    )
    await ledger.post(december_sale, [
        (accounts["cash"], "400", Vector.POSITIVE),
        (accounts["sales"], "400", Vector.NEGATIVE),
    ])

    # Local February 1st, still January 31st in UTC
    february_sale = await ledger.transaction(
        test_unit, TransactionType.SALE_INVOICE, local_time(2024, 2, 1, 0, 30), total="70",
    )
    await ledger.post(february_sale, [
        (accounts["cash"], "70", Vector.POSITIVE),
        (accounts["sales"], "70", Vector.NEGATIVE),
    ])

    await ledger.general_setting(test_unit, accounts["current_profit"])
    return accounts
