"""
Back Office Reporting - Financial Report Service

Account-level financial reports of one unit:
- Profit and loss statement per chart of account
- Balance sheet with opening balance, movements and ending balance
- Open debt/receivable invoices with the payments linked to them
"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Union

from backoffice.models.accounting import CategoryClass, Vector
from backoffice.services.aggregate_store import (
    AccountBalanceRow,
    AccountTotalRow,
    AggregateStore,
    LedgerCategoryQuery,
    OpenInvoiceRow,
    OutstandingBalanceQuery,
)
from backoffice.services.calendar_service import report_zone
from backoffice.services.classification import (
    BALANCE_KIND_TYPES,
    BALANCE_SHEET_CATEGORIES,
    CURRENT_PROFIT_CATEGORIES,
    GROSS_PROFIT_CATEGORIES,
    PROFIT_LOSS_CATEGORIES,
    REPORT_BALANCE_KINDS,
    BalanceKind,
    closing_balance,
    resolve_report_balance_kind,
)
from backoffice.services.dashboard_service import DateBound, UnitId, ensure_unit, resolve_date_range


logger = logging.getLogger(__name__)


# ===========================================
# PROFIT & LOSS
# ===========================================

@dataclass(frozen=True)
class ProfitLossLine:
    account_id: uuid.UUID
    category: CategoryClass
    class_code: str
    class_name: str
    account_code: str
    account_name: str
    value: Decimal
    sum_value: Decimal


@dataclass
class ProfitLossSection:
    """All lines of one account class with their subtotal."""
    class_code: str
    class_name: str
    lines: List[ProfitLossLine] = field(default_factory=list)
    subtotal: Decimal = Decimal("0")


@dataclass
class ProfitLossStatement:
    unit_id: uuid.UUID
    start_date: date
    end_date: date
    sections: List[ProfitLossSection]
    gross_profit: Decimal
    total: Decimal

    @property
    def lines(self) -> List[ProfitLossLine]:
        return [line for section in self.sections for line in section.lines]


# ===========================================
# BALANCE SHEET
# ===========================================

@dataclass(frozen=True)
class BalanceSheetLine:
    account_id: uuid.UUID
    category: CategoryClass
    class_code: str
    class_name: str
    sub_class_code: str
    sub_class_name: str
    account_code: str
    account_name: str
    begin_balance: Decimal
    debit: Decimal
    credit: Decimal
    end_balance: Decimal


@dataclass
class BalanceSheetSection:
    class_code: str
    class_name: str
    position: Vector
    lines: List[BalanceSheetLine] = field(default_factory=list)
    subtotal: Decimal = Decimal("0")


@dataclass
class BalanceSheet:
    """
    Balance sheet of one unit at the end of a range.

    `total_assets` adds up the ending balances of POSITIVE classes and
    `total_liabilities_equity` those of NEGATIVE classes; on balanced
    books with a current-profit account configured the two are equal.
    """
    unit_id: uuid.UUID
    start_date: date
    end_date: date
    sections: List[BalanceSheetSection]
    total_assets: Decimal
    total_liabilities_equity: Decimal
    current_profit_account_id: Optional[uuid.UUID] = None

    @property
    def lines(self) -> List[BalanceSheetLine]:
        return [line for section in self.sections for line in section.lines]


# ===========================================
# DEBT / RECEIVABLE
# ===========================================

@dataclass(frozen=True)
class InvoicePayment:
    payment_id: uuid.UUID
    transaction_number: Optional[str]
    entry_date: date
    amount: Decimal


@dataclass
class OutstandingInvoice:
    invoice_id: uuid.UUID
    transaction_number: Optional[str]
    entry_date: date
    partner_code: Optional[str]
    partner_name: Optional[str]
    total: Decimal
    under_payment: Decimal
    payments: List[InvoicePayment] = field(default_factory=list)

    @property
    def paid(self) -> Decimal:
        return sum((payment.amount for payment in self.payments), Decimal("0"))

    @property
    def remaining(self) -> Decimal:
        """Under-payment less linked payments; below zero when over-paid."""
        return self.under_payment - self.paid


@dataclass
class DebtReceivableReport:
    unit_id: uuid.UUID
    kind: str
    start_date: date
    end_date: date
    invoices: List[OutstandingInvoice]

    @property
    def total(self) -> Decimal:
        return sum((invoice.remaining for invoice in self.invoices), Decimal("0"))


def _profit_loss_line(row: AccountTotalRow) -> ProfitLossLine:
    return ProfitLossLine(
        account_id=row.account_id,
        category=row.category,
        class_code=row.class_code,
        class_name=row.class_name,
        account_code=row.account_code,
        account_name=row.account_name,
        value=row.value,
        sum_value=row.sum_value,
    )


def _balance_sheet_line(row: AccountBalanceRow) -> BalanceSheetLine:
    return BalanceSheetLine(
        account_id=row.account_id,
        category=row.category,
        class_code=row.class_code,
        class_name=row.class_name,
        sub_class_code=row.sub_class_code,
        sub_class_name=row.sub_class_name,
        account_code=row.account_code,
        account_name=row.account_name,
        begin_balance=row.begin_balance,
        debit=row.debit,
        credit=row.credit,
        end_balance=closing_balance(row.position, row.begin_balance, row.debit, row.credit),
    )


def _outstanding_invoice(row: OpenInvoiceRow) -> OutstandingInvoice:
    return OutstandingInvoice(
        invoice_id=row.invoice_id,
        transaction_number=row.transaction_number,
        entry_date=row.entry_date,
        partner_code=row.partner_code,
        partner_name=row.partner_name,
        total=row.total,
        under_payment=row.under_payment,
        payments=[
            InvoicePayment(
                payment_id=payment.payment_id,
                transaction_number=payment.transaction_number,
                entry_date=payment.entry_date,
                amount=payment.amount,
            )
            for payment in row.payments
        ],
    )


class ReportService:
    """Service for the account-level financial statements."""

    def __init__(self, store: AggregateStore, timezone: str):
        self.store = store
        self.timezone = report_zone(timezone)

    async def get_profit_loss_statement(
        self,
        unit_id: UnitId,
        start: DateBound,
        end: DateBound,
    ) -> ProfitLossStatement:
        """
        Profit and loss per account, grouped by account class.

        Lines are ordered by class code then account code. Section
        subtotals add up `value` (signed by the class polarity); gross
        profit and total add up `sum_value`, so `total` equals the
        dashboard profit/loss for the same range.
        """
        start_date, end_date = resolve_date_range(start, end, self.timezone)
        unit_id = await ensure_unit(self.store, unit_id)

        logger.info(f"Report read: profit-loss statement for unit {unit_id}")

        rows = await self.store.sum_ledger_by_account(
            LedgerCategoryQuery(
                unit_id=unit_id,
                categories=PROFIT_LOSS_CATEGORIES,
                start_date=start_date,
                end_date=end_date,
            )
        )

        sections: List[ProfitLossSection] = []
        gross_profit = Decimal("0")
        total = Decimal("0")
        for row in rows:
            if not sections or sections[-1].class_code != row.class_code:
                sections.append(ProfitLossSection(class_code=row.class_code, class_name=row.class_name))
            section = sections[-1]
            section.lines.append(_profit_loss_line(row))
            section.subtotal += row.value

            if row.category in GROSS_PROFIT_CATEGORIES:
                gross_profit += row.sum_value
            total += row.sum_value

        return ProfitLossStatement(
            unit_id=unit_id,
            start_date=start_date,
            end_date=end_date,
            sections=sections,
            gross_profit=gross_profit,
            total=total,
        )

    async def get_balance_sheet(
        self,
        unit_id: UnitId,
        start: DateBound,
        end: DateBound,
    ) -> BalanceSheet:
        """
        Balance sheet per account for [start, end].

        Each balance-sheet account carries its opening balance (everything
        posted before start, signed by the class position), the debit and
        credit posted inside the range, and the ending balance. Income
        statement activity is rolled up into the unit's current-profit
        account, merged with that account's own postings.
        """
        start_date, end_date = resolve_date_range(start, end, self.timezone)
        unit_id = await ensure_unit(self.store, unit_id)

        logger.info(f"Report read: balance sheet for unit {unit_id}")

        rows = await self.store.sum_balance_sheet_by_account(
            LedgerCategoryQuery(
                unit_id=unit_id,
                categories=BALANCE_SHEET_CATEGORIES,
                start_date=start_date,
                end_date=end_date,
            )
        )
        current_profit = await self.store.sum_current_profit(
            LedgerCategoryQuery(
                unit_id=unit_id,
                categories=CURRENT_PROFIT_CATEGORIES,
                start_date=start_date,
                end_date=end_date,
            )
        )

        balances: Dict[uuid.UUID, AccountBalanceRow] = {row.account_id: row for row in rows}
        if current_profit is not None:
            own = balances.get(current_profit.account_id)
            if own is not None:
                current_profit = replace(
                    own,
                    begin_balance=own.begin_balance + current_profit.begin_balance,
                    debit=own.debit + current_profit.debit,
                    credit=own.credit + current_profit.credit,
                )
            balances[current_profit.account_id] = current_profit

        sections: List[BalanceSheetSection] = []
        totals = {Vector.POSITIVE: Decimal("0"), Vector.NEGATIVE: Decimal("0")}
        for row in sorted(balances.values(), key=lambda r: (r.class_code, r.account_code)):
            if not sections or sections[-1].class_code != row.class_code:
                sections.append(BalanceSheetSection(
                    class_code=row.class_code,
                    class_name=row.class_name,
                    position=row.position,
                ))
            line = _balance_sheet_line(row)
            sections[-1].lines.append(line)
            sections[-1].subtotal += line.end_balance
            totals[row.position] += line.end_balance

        return BalanceSheet(
            unit_id=unit_id,
            start_date=start_date,
            end_date=end_date,
            sections=sections,
            total_assets=totals[Vector.POSITIVE],
            total_liabilities_equity=totals[Vector.NEGATIVE],
            current_profit_account_id=current_profit.account_id if current_profit else None,
        )

    async def get_debt_receivable(
        self,
        unit_id: UnitId,
        kind: Union[str, BalanceKind],
        start: DateBound,
        end: DateBound,
    ) -> DebtReceivableReport:
        """
        Open invoices of the unit dated in [start, end].

        `kind` is "debt" (purchase invoices settled by debt payments) or
        "receivable" (sale invoices settled by receivable payments). Only
        invoices with a positive under-payment are listed; each carries the
        payments of the settling type linked to it.
        """
        balance_kind = resolve_report_balance_kind(kind)
        start_date, end_date = resolve_date_range(start, end, self.timezone)
        unit_id = await ensure_unit(self.store, unit_id)

        kind_name = next(name for name, value in REPORT_BALANCE_KINDS.items() if value is balance_kind)
        logger.info(f"Report read: debt-receivable/{kind_name} for unit {unit_id}")

        invoice_type, payment_type = BALANCE_KIND_TYPES[balance_kind]
        rows = await self.store.list_outstanding_invoices(
            OutstandingBalanceQuery(
                unit_id=unit_id,
                invoice_type=invoice_type,
                payment_type=payment_type,
                start_date=start_date,
                end_date=end_date,
            )
        )

        return DebtReceivableReport(
            unit_id=unit_id,
            kind=kind_name,
            start_date=start_date,
            end_date=end_date,
            invoices=[_outstanding_invoice(row) for row in rows],
        )
