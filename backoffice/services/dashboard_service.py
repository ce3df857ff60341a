"""
Back Office Reporting - Dashboard Service

Financial aggregation behind the back-office dashboard:
1. Daily sales/purchase totals, zero-filled for every day of the range
2. Monthly sales/purchase totals, always twelve calendar months
3. Outstanding debt/receivable after netting linked payments
4. Income, expense and profit/loss from the general ledger

Every operation validates its arguments, then requires the unit to exist
before any aggregate query is issued. Date bounds are compared as calendar
dates in the configured report time zone.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from decimal import Decimal
from typing import List, Tuple, Union

from backoffice.services.aggregate_store import (
    AggregateStore,
    DailyTransactionQuery,
    LedgerCategoryQuery,
    MonthlyTransactionQuery,
    OutstandingBalanceQuery,
)
from backoffice.services.calendar_service import (
    daily_sequence,
    day_key,
    month_buckets,
    report_zone,
    to_report_date,
)
from backoffice.services.classification import (
    BALANCE_KIND_TYPES,
    TRANSACTION_KIND_TYPES,
    BalanceKind,
    LedgerReport,
    TransactionKind,
    resolve_balance_kind,
    resolve_transaction_kind,
)
from backoffice.utils.error_handling import InvalidDateRangeException, UnitNotFoundException


logger = logging.getLogger(__name__)

DateBound = Union[date, datetime, str]
UnitId = Union[uuid.UUID, str]


@dataclass(frozen=True)
class DailyTotal:
    date: date
    total: Decimal


@dataclass(frozen=True)
class MonthlyTotal:
    month: str
    short_month: str
    total: Decimal


def resolve_date_range(start: DateBound, end: DateBound, timezone: Union[str, tzinfo]) -> Tuple[date, date]:
    """Normalize both bounds into the report zone; start may not be after end."""
    zone = report_zone(timezone)
    try:
        start_date = to_report_date(start, zone)
        end_date = to_report_date(end, zone)
    except (ValueError, OverflowError):
        raise InvalidDateRangeException(
            str(start),
            str(end),
            message=f"Invalid date range: {start} to {end}. Dates must be ISO-8601.",
        )
    if start_date > end_date:
        raise InvalidDateRangeException(start_date.isoformat(), end_date.isoformat())
    return start_date, end_date


async def ensure_unit(store: AggregateStore, unit_id: UnitId) -> uuid.UUID:
    """Resolve the unit or fail with UnitNotFoundException."""
    if not isinstance(unit_id, uuid.UUID):
        try:
            unit_id = uuid.UUID(str(unit_id))
        except ValueError:
            raise UnitNotFoundException(unit_id)

    unit = await store.find_unit(unit_id)
    if unit is None:
        raise UnitNotFoundException(unit_id)
    return unit_id


class DashboardService:
    """Service for generating dashboard aggregates of one unit."""

    def __init__(self, store: AggregateStore, timezone: str, month_locale: str = "id"):
        """Raises ValueError for an unknown zone or month locale."""
        self.store = store
        self.timezone = report_zone(timezone)
        self.months = month_buckets(month_locale)

    # ===========================================
    # TRANSACTION SERIES
    # ===========================================

    async def get_transaction_daily(
        self,
        unit_id: UnitId,
        kind: Union[str, TransactionKind],
        start: DateBound,
        end: DateBound,
    ) -> List[DailyTotal]:
        """
        Sum of invoice totals per day of [start, end].

        Returns one entry per calendar day in ascending order; days
        without invoices are 0.
        """
        kind = resolve_transaction_kind(kind)
        start_date, end_date = resolve_date_range(start, end, self.timezone)
        unit_id = await ensure_unit(self.store, unit_id)

        logger.info(f"Dashboard read: transaction-daily/{kind.value} for unit {unit_id}")

        rows = await self.store.sum_transactions_by_day(
            DailyTransactionQuery(
                unit_id=unit_id,
                transaction_type=TRANSACTION_KIND_TYPES[kind],
                start_date=start_date,
                end_date=end_date,
            )
        )
        totals = {day_key(row.day): row.total for row in rows}

        return [
            DailyTotal(
                date=date.fromisoformat(key),
                total=totals.get(key, Decimal("0")),
            )
            for key in daily_sequence(start_date, end_date)
        ]

    async def get_transaction_monthly(
        self,
        unit_id: UnitId,
        kind: Union[str, TransactionKind],
        start: DateBound,
        end: DateBound,
    ) -> List[MonthlyTotal]:
        """
        Sum of invoice totals per calendar month.

        Invoices are selected by year only (start year through end year),
        so months of different years share one bucket. Always returns the
        twelve months in calendar order.
        """
        kind = resolve_transaction_kind(kind)
        start_date, end_date = resolve_date_range(start, end, self.timezone)
        unit_id = await ensure_unit(self.store, unit_id)

        logger.info(f"Dashboard read: transaction-monthly/{kind.value} for unit {unit_id}")

        rows = await self.store.sum_transactions_by_month(
            MonthlyTransactionQuery(
                unit_id=unit_id,
                transaction_type=TRANSACTION_KIND_TYPES[kind],
                start_year=start_date.year,
                end_year=end_date.year,
            )
        )
        totals = {row.month: row.total for row in rows}

        return [
            MonthlyTotal(
                month=bucket.name,
                short_month=bucket.short,
                total=totals.get(bucket.index, Decimal("0")),
            )
            for bucket in self.months
        ]

    # ===========================================
    # OUTSTANDING BALANCES
    # ===========================================

    async def get_debt_receivable_total(
        self,
        unit_id: UnitId,
        kind: Union[str, BalanceKind],
        start: DateBound,
        end: DateBound,
    ) -> Decimal:
        """
        Open balance of the unit's invoices dated in [start, end].

        Each invoice contributes its under-payment less every payment of
        the matching payment type linked to it. Over-payment nets below
        zero.
        """
        kind = resolve_balance_kind(kind)
        start_date, end_date = resolve_date_range(start, end, self.timezone)
        unit_id = await ensure_unit(self.store, unit_id)

        logger.info(f"Dashboard read: debt-receivable-total/{kind.value} for unit {unit_id}")

        invoice_type, payment_type = BALANCE_KIND_TYPES[kind]
        return await self.store.sum_outstanding_balance(
            OutstandingBalanceQuery(
                unit_id=unit_id,
                invoice_type=invoice_type,
                payment_type=payment_type,
                start_date=start_date,
                end_date=end_date,
            )
        )

    # ===========================================
    # LEDGER TOTALS
    # ===========================================

    async def _ledger_total(
        self,
        report: LedgerReport,
        unit_id: UnitId,
        start: DateBound,
        end: DateBound,
    ) -> Decimal:
        start_date, end_date = resolve_date_range(start, end, self.timezone)
        unit_id = await ensure_unit(self.store, unit_id)

        logger.info(f"Dashboard read: {report.value} for unit {unit_id}")

        rows = await self.store.sum_ledger_by_category(
            LedgerCategoryQuery(
                unit_id=unit_id,
                categories=report.categories,
                start_date=start_date,
                end_date=end_date,
            )
        )
        total = sum((row.total for row in rows), Decimal("0"))
        return abs(total) if report.absolute else total

    async def get_income(self, unit_id: UnitId, start: DateBound, end: DateBound) -> Decimal:
        """Revenue and other revenue, positive means income."""
        return await self._ledger_total(LedgerReport.INCOME, unit_id, start, end)

    async def get_expense(self, unit_id: UnitId, start: DateBound, end: DateBound) -> Decimal:
        """Cost, expense and tax categories, always reported non-negative."""
        return await self._ledger_total(LedgerReport.EXPENSE, unit_id, start, end)

    async def get_profit_loss(self, unit_id: UnitId, start: DateBound, end: DateBound) -> Decimal:
        """Signed sum over every income-statement category."""
        return await self._ledger_total(LedgerReport.PROFIT_LOSS, unit_id, start, end)
