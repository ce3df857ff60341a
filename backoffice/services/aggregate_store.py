"""
Back Office Reporting - Aggregate Store

Read-only query surface the reporting services depend on. Each aggregate
takes a fixed query record and returns fixed row records; the SQL store
implements them with SQLAlchemy Core selects over the ledger models.

Every date comparison is done on the calendar date of the stored
timestamp in the report time zone (see `local_date`).
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, FrozenSet, List, Optional, Protocol, Tuple

from dateutil import tz
from sqlalchemy import Date, and_, case, extract, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import aliased
from sqlalchemy.sql.functions import FunctionElement

from backoffice.models.accounting import (
    AccountClass,
    AccountSubClass,
    CategoryClass,
    ChartOfAccount,
    GeneralLedger,
    GeneralLedgerDetail,
    GeneralSetting,
    Vector,
)
from backoffice.models.people import People
from backoffice.models.transaction import Transaction, TransactionDetail, TransactionType
from backoffice.models.unit import Unit
from backoffice.services.classification import position_signed_amount, signed_ledger_amount
from backoffice.utils.error_handling import StoreUnavailableException


logger = logging.getLogger(__name__)


# ===========================================
# QUERY / ROW RECORDS
# ===========================================

@dataclass(frozen=True)
class DailyTransactionQuery:
    unit_id: uuid.UUID
    transaction_type: TransactionType
    start_date: date
    end_date: date


@dataclass(frozen=True)
class MonthlyTransactionQuery:
    unit_id: uuid.UUID
    transaction_type: TransactionType
    start_year: int
    end_year: int


@dataclass(frozen=True)
class OutstandingBalanceQuery:
    unit_id: uuid.UUID
    invoice_type: TransactionType
    payment_type: TransactionType
    start_date: date
    end_date: date


@dataclass(frozen=True)
class LedgerCategoryQuery:
    unit_id: uuid.UUID
    categories: FrozenSet[CategoryClass]
    start_date: date
    end_date: date


@dataclass(frozen=True)
class DailyTotalRow:
    day: date
    total: Decimal


@dataclass(frozen=True)
class MonthlyTotalRow:
    month: int
    total: Decimal


@dataclass(frozen=True)
class CategoryTotalRow:
    category: CategoryClass
    total: Decimal


@dataclass(frozen=True)
class AccountTotalRow:
    """Per-account totals of the profit and loss statement."""
    account_id: uuid.UUID
    category: CategoryClass
    class_code: str
    class_name: str
    account_code: str
    account_name: str
    value: Decimal
    sum_value: Decimal


@dataclass(frozen=True)
class AccountBalanceRow:
    """Opening balance and period movements of one balance-sheet account."""
    account_id: uuid.UUID
    category: CategoryClass
    class_code: str
    class_name: str
    sub_class_code: str
    sub_class_name: str
    account_code: str
    account_name: str
    position: Vector
    begin_balance: Decimal
    debit: Decimal
    credit: Decimal


@dataclass(frozen=True)
class InvoicePaymentRow:
    payment_id: uuid.UUID
    transaction_number: Optional[str]
    entry_date: date
    amount: Decimal


@dataclass(frozen=True)
class OpenInvoiceRow:
    """An invoice with an open balance and the payments linked to it."""
    invoice_id: uuid.UUID
    transaction_number: Optional[str]
    entry_date: date
    partner_code: Optional[str]
    partner_name: Optional[str]
    total: Decimal
    under_payment: Decimal
    payments: Tuple[InvoicePaymentRow, ...] = ()


class AggregateStore(Protocol):
    """Read operations the reporting services are allowed to use."""

    async def find_unit(self, unit_id: uuid.UUID) -> Optional[Unit]:
        ...

    async def sum_transactions_by_day(self, query: DailyTransactionQuery) -> List[DailyTotalRow]:
        ...

    async def sum_transactions_by_month(self, query: MonthlyTransactionQuery) -> List[MonthlyTotalRow]:
        ...

    async def sum_outstanding_balance(self, query: OutstandingBalanceQuery) -> Decimal:
        ...

    async def sum_ledger_by_category(self, query: LedgerCategoryQuery) -> List[CategoryTotalRow]:
        ...

    async def sum_ledger_by_account(self, query: LedgerCategoryQuery) -> List[AccountTotalRow]:
        ...

    async def sum_balance_sheet_by_account(self, query: LedgerCategoryQuery) -> List[AccountBalanceRow]:
        ...

    async def sum_current_profit(self, query: LedgerCategoryQuery) -> Optional[AccountBalanceRow]:
        ...

    async def list_outstanding_invoices(self, query: OutstandingBalanceQuery) -> List[OpenInvoiceRow]:
        ...


# ===========================================
# TIME ZONE NORMALIZATION
# ===========================================

class local_date(FunctionElement):
    """
    Calendar date of a timestamp column in a named time zone.

    The zone is rendered inline so the same expression can appear in the
    select list and the GROUP BY clause.
    """

    type = Date()
    name = "local_date"
    inherit_cache = False

    def __init__(self, column, zone: str):
        self.zone = zone
        super().__init__(column)


def _quote(value: str) -> str:
    return value.replace("'", "''")


@compiles(local_date, "postgresql")
def _compile_local_date_postgresql(element, compiler, **kw):
    column = compiler.process(element.clauses, **kw)
    return f"DATE(TIMEZONE('{_quote(element.zone)}', {column}))"


@compiles(local_date, "sqlite")
def _compile_local_date_sqlite(element, compiler, **kw):
    # SQLite stores UTC text; shift by the zone's current offset
    zone = tz.gettz(element.zone)
    if zone is None:
        raise ValueError(f"Unknown time zone '{element.zone}'")
    offset = datetime.now(zone).utcoffset()
    minutes = int(offset.total_seconds() // 60) if offset else 0
    column = compiler.process(element.clauses, **kw)
    return f"DATE({column}, '{minutes:+d} minutes')"


def _to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


# ===========================================
# SQL IMPLEMENTATION
# ===========================================

class SqlAggregateStore:
    """AggregateStore backed by an AsyncSession. Never writes."""

    def __init__(self, session: AsyncSession, timezone: str):
        self.session = session
        self.timezone = timezone

    def _local_date(self, column) -> local_date:
        return local_date(column, self.timezone)

    async def _execute(self, operation: str, statement):
        try:
            return await self.session.execute(statement)
        except SQLAlchemyError as exc:
            logger.error(f"Aggregate query '{operation}' failed: {exc}", exc_info=True)
            raise StoreUnavailableException(operation, original_error=exc) from exc

    async def find_unit(self, unit_id: uuid.UUID) -> Optional[Unit]:
        result = await self._execute(
            "find_unit",
            select(Unit).where(Unit.id == unit_id),
        )
        return result.scalar_one_or_none()

    async def sum_transactions_by_day(self, query: DailyTransactionQuery) -> List[DailyTotalRow]:
        day = self._local_date(Transaction.entry_date).label("day")
        statement = (
            select(day, func.sum(Transaction.total).label("total"))
            .where(
                Transaction.unit_id == query.unit_id,
                Transaction.transaction_type == query.transaction_type,
                self._local_date(Transaction.entry_date) >= query.start_date,
                self._local_date(Transaction.entry_date) <= query.end_date,
            )
            .group_by(day)
            .order_by(day)
        )
        result = await self._execute("sum_transactions_by_day", statement)
        return [
            DailyTotalRow(day=row.day, total=_to_decimal(row.total))
            for row in result
        ]

    async def sum_transactions_by_month(self, query: MonthlyTransactionQuery) -> List[MonthlyTotalRow]:
        month = extract("month", self._local_date(Transaction.entry_date)).label("month")
        year = extract("year", self._local_date(Transaction.entry_date))
        statement = (
            select(month, func.sum(Transaction.total).label("total"))
            .where(
                Transaction.unit_id == query.unit_id,
                Transaction.transaction_type == query.transaction_type,
                year >= query.start_year,
                year <= query.end_year,
            )
            .group_by(month)
            .order_by(month)
        )
        result = await self._execute("sum_transactions_by_month", statement)
        return [
            MonthlyTotalRow(month=int(row.month), total=_to_decimal(row.total))
            for row in result
        ]

    async def sum_outstanding_balance(self, query: OutstandingBalanceQuery) -> Decimal:
        payment = aliased(Transaction, name="payment")
        paid = (
            select(
                TransactionDetail.transaction_payment_id.label("invoice_id"),
                func.coalesce(func.sum(TransactionDetail.price_input), 0).label("paid"),
            )
            .join(payment, payment.id == TransactionDetail.transaction_id)
            .where(
                payment.transaction_type == query.payment_type,
                payment.unit_id == query.unit_id,
            )
            .group_by(TransactionDetail.transaction_payment_id)
            .subquery("paid")
        )
        statement = (
            select(
                func.coalesce(
                    func.sum(Transaction.under_payment - func.coalesce(paid.c.paid, 0)),
                    0,
                ).label("total")
            )
            .select_from(Transaction)
            .outerjoin(paid, paid.c.invoice_id == Transaction.id)
            .where(
                Transaction.unit_id == query.unit_id,
                Transaction.transaction_type == query.invoice_type,
                self._local_date(Transaction.entry_date) >= query.start_date,
                self._local_date(Transaction.entry_date) <= query.end_date,
            )
        )
        result = await self._execute("sum_outstanding_balance", statement)
        return _to_decimal(result.scalar_one())

    def _ledger_join(self, query: LedgerCategoryQuery, *columns):
        """Ledger details of the unit in the query categories, joined up to their account class."""
        return (
            select(*columns)
            .select_from(GeneralLedger)
            .join(Transaction, Transaction.id == GeneralLedger.transaction_id)
            .join(GeneralLedgerDetail, GeneralLedgerDetail.general_ledger_id == GeneralLedger.id)
            .join(ChartOfAccount, ChartOfAccount.id == GeneralLedgerDetail.chart_of_account_id)
            .join(AccountSubClass, AccountSubClass.id == ChartOfAccount.account_sub_class_id)
            .join(AccountClass, AccountClass.id == AccountSubClass.account_class_id)
            .where(
                AccountClass.category_class.in_(sorted(query.categories, key=lambda c: c.value)),
                GeneralLedger.unit_id == query.unit_id,
            )
        )

    def _ledger_statement(self, query: LedgerCategoryQuery, *columns):
        return self._ledger_join(query, *columns).where(
            self._local_date(Transaction.entry_date) >= query.start_date,
            self._local_date(Transaction.entry_date) <= query.end_date,
        )

    async def sum_ledger_by_category(self, query: LedgerCategoryQuery) -> List[CategoryTotalRow]:
        if not query.categories:
            return []
        amount = signed_ledger_amount(GeneralLedgerDetail.amount, GeneralLedgerDetail.vector)
        statement = (
            self._ledger_statement(
                query,
                AccountClass.category_class.label("category"),
                func.sum(amount).label("total"),
            )
            .group_by(AccountClass.category_class)
            .order_by(AccountClass.category_class)
        )
        result = await self._execute("sum_ledger_by_category", statement)
        return [
            CategoryTotalRow(category=CategoryClass(row.category), total=_to_decimal(row.total))
            for row in result
        ]

    async def sum_ledger_by_account(self, query: LedgerCategoryQuery) -> List[AccountTotalRow]:
        if not query.categories:
            return []
        value = position_signed_amount(
            GeneralLedgerDetail.amount,
            GeneralLedgerDetail.vector,
            AccountClass.profit_loss_position,
        )
        sum_value = signed_ledger_amount(GeneralLedgerDetail.amount, GeneralLedgerDetail.vector)
        statement = (
            self._ledger_statement(
                query,
                GeneralLedgerDetail.chart_of_account_id.label("account_id"),
                AccountClass.category_class.label("category"),
                AccountClass.code.label("class_code"),
                AccountClass.name.label("class_name"),
                ChartOfAccount.code.label("account_code"),
                ChartOfAccount.name.label("account_name"),
                func.sum(value).label("value"),
                func.sum(sum_value).label("sum_value"),
            )
            .group_by(
                GeneralLedgerDetail.chart_of_account_id,
                AccountClass.category_class,
                AccountClass.code,
                AccountClass.name,
                ChartOfAccount.code,
                ChartOfAccount.name,
            )
            .order_by(AccountClass.code, ChartOfAccount.code)
        )
        result = await self._execute("sum_ledger_by_account", statement)
        return [
            AccountTotalRow(
                account_id=row.account_id,
                category=CategoryClass(row.category),
                class_code=row.class_code,
                class_name=row.class_name,
                account_code=row.account_code,
                account_name=row.account_name,
                value=_to_decimal(row.value),
                sum_value=_to_decimal(row.sum_value),
            )
            for row in result
        ]

    def _movement_columns(self, query: LedgerCategoryQuery, opening):
        """Opening balance before the range, then debit and credit inside it."""
        entry_day = self._local_date(Transaction.entry_date)
        within = and_(entry_day >= query.start_date, entry_day <= query.end_date)
        return (
            func.sum(case((entry_day < query.start_date, opening), else_=0)).label("begin_balance"),
            func.sum(case(
                (and_(within, GeneralLedgerDetail.vector == Vector.POSITIVE), GeneralLedgerDetail.amount),
                else_=0,
            )).label("debit"),
            func.sum(case(
                (and_(within, GeneralLedgerDetail.vector == Vector.NEGATIVE), GeneralLedgerDetail.amount),
                else_=0,
            )).label("credit"),
        )

    async def sum_balance_sheet_by_account(self, query: LedgerCategoryQuery) -> List[AccountBalanceRow]:
        if not query.categories:
            return []
        opening = position_signed_amount(
            GeneralLedgerDetail.amount,
            GeneralLedgerDetail.vector,
            AccountClass.balance_sheet_position,
        )
        statement = (
            self._ledger_join(
                query,
                GeneralLedgerDetail.chart_of_account_id.label("account_id"),
                AccountClass.category_class.label("category"),
                AccountClass.code.label("class_code"),
                AccountClass.name.label("class_name"),
                AccountSubClass.code.label("sub_class_code"),
                AccountSubClass.name.label("sub_class_name"),
                ChartOfAccount.code.label("account_code"),
                ChartOfAccount.name.label("account_name"),
                AccountClass.balance_sheet_position.label("position"),
                *self._movement_columns(query, opening),
            )
            .where(self._local_date(Transaction.entry_date) <= query.end_date)
            .group_by(
                GeneralLedgerDetail.chart_of_account_id,
                AccountClass.category_class,
                AccountClass.code,
                AccountClass.name,
                AccountSubClass.code,
                AccountSubClass.name,
                ChartOfAccount.code,
                ChartOfAccount.name,
                AccountClass.balance_sheet_position,
            )
            .order_by(AccountClass.code, ChartOfAccount.code)
        )
        result = await self._execute("sum_balance_sheet_by_account", statement)
        return [
            AccountBalanceRow(
                account_id=row.account_id,
                category=CategoryClass(row.category),
                class_code=row.class_code,
                class_name=row.class_name,
                sub_class_code=row.sub_class_code,
                sub_class_name=row.sub_class_name,
                account_code=row.account_code,
                account_name=row.account_name,
                position=Vector(row.position),
                begin_balance=_to_decimal(row.begin_balance),
                debit=_to_decimal(row.debit),
                credit=_to_decimal(row.credit),
            )
            for row in result
        ]

    async def sum_current_profit(self, query: LedgerCategoryQuery) -> Optional[AccountBalanceRow]:
        """
        Income-statement activity rolled up into the unit's current-profit account.

        None when the unit has no current-profit account configured.
        """
        account_statement = (
            select(
                ChartOfAccount.id.label("account_id"),
                AccountClass.category_class.label("category"),
                AccountClass.code.label("class_code"),
                AccountClass.name.label("class_name"),
                AccountSubClass.code.label("sub_class_code"),
                AccountSubClass.name.label("sub_class_name"),
                ChartOfAccount.code.label("account_code"),
                ChartOfAccount.name.label("account_name"),
                AccountClass.balance_sheet_position.label("position"),
            )
            .select_from(GeneralSetting)
            .join(ChartOfAccount, ChartOfAccount.id == GeneralSetting.current_profit_account_id)
            .join(AccountSubClass, AccountSubClass.id == ChartOfAccount.account_sub_class_id)
            .join(AccountClass, AccountClass.id == AccountSubClass.account_class_id)
            .where(GeneralSetting.unit_id == query.unit_id)
        )
        account = (await self._execute("sum_current_profit", account_statement)).first()
        if account is None:
            return None

        movement = None
        if query.categories:
            opening = signed_ledger_amount(GeneralLedgerDetail.amount, GeneralLedgerDetail.vector)
            statement = (
                self._ledger_join(query, *self._movement_columns(query, opening))
                .where(self._local_date(Transaction.entry_date) <= query.end_date)
            )
            movement = (await self._execute("sum_current_profit", statement)).one()

        return AccountBalanceRow(
            account_id=account.account_id,
            category=CategoryClass(account.category),
            class_code=account.class_code,
            class_name=account.class_name,
            sub_class_code=account.sub_class_code,
            sub_class_name=account.sub_class_name,
            account_code=account.account_code,
            account_name=account.account_name,
            position=Vector(account.position),
            begin_balance=_to_decimal(movement.begin_balance if movement else None),
            debit=_to_decimal(movement.debit if movement else None),
            credit=_to_decimal(movement.credit if movement else None),
        )

    async def list_outstanding_invoices(self, query: OutstandingBalanceQuery) -> List[OpenInvoiceRow]:
        """Invoices with a positive under-payment, each with its linked payments."""
        entry_day = self._local_date(Transaction.entry_date)
        statement = (
            select(
                Transaction.id.label("invoice_id"),
                Transaction.transaction_number,
                entry_day.label("entry_date"),
                People.code.label("partner_code"),
                People.name.label("partner_name"),
                Transaction.total,
                Transaction.under_payment,
            )
            .select_from(Transaction)
            .outerjoin(People, People.id == Transaction.people_id)
            .where(
                Transaction.unit_id == query.unit_id,
                Transaction.transaction_type == query.invoice_type,
                Transaction.under_payment > 0,
                entry_day >= query.start_date,
                entry_day <= query.end_date,
            )
            .order_by(Transaction.entry_date, Transaction.transaction_number)
        )
        invoices = (await self._execute("list_outstanding_invoices", statement)).all()
        if not invoices:
            return []

        payment = aliased(Transaction, name="payment")
        payment_statement = (
            select(
                TransactionDetail.transaction_payment_id.label("invoice_id"),
                payment.id.label("payment_id"),
                payment.transaction_number,
                self._local_date(payment.entry_date).label("entry_date"),
                TransactionDetail.price_input.label("amount"),
            )
            .join(payment, payment.id == TransactionDetail.transaction_id)
            .where(
                payment.transaction_type == query.payment_type,
                payment.unit_id == query.unit_id,
                TransactionDetail.transaction_payment_id.in_([row.invoice_id for row in invoices]),
            )
            .order_by(payment.entry_date, payment.transaction_number)
        )
        payments: Dict[uuid.UUID, List[InvoicePaymentRow]] = {}
        for row in await self._execute("list_outstanding_invoices", payment_statement):
            payments.setdefault(row.invoice_id, []).append(
                InvoicePaymentRow(
                    payment_id=row.payment_id,
                    transaction_number=row.transaction_number,
                    entry_date=row.entry_date,
                    amount=_to_decimal(row.amount),
                )
            )

        return [
            OpenInvoiceRow(
                invoice_id=row.invoice_id,
                transaction_number=row.transaction_number,
                entry_date=row.entry_date,
                partner_code=row.partner_code,
                partner_name=row.partner_name,
                total=_to_decimal(row.total),
                under_payment=_to_decimal(row.under_payment),
                payments=tuple(payments.get(row.invoice_id, ())),
            )
            for row in invoices
        ]
