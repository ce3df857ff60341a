"""
Back Office Reporting - Ledger Classification Rules

Named category sets per report, the kind -> transaction type maps used by
the dashboard, and the SQL sign expressions that turn stored ledger
direction into business-facing amounts.
"""

from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, Tuple, Union

from sqlalchemy import case
from sqlalchemy.sql.elements import ColumnElement

from backoffice.models.accounting import CategoryClass, Vector
from backoffice.models.transaction import TransactionType
from backoffice.utils.error_handling import UnsupportedReportKindException


# ===========================================
# CATEGORY SETS
# ===========================================

INCOME_CATEGORIES: FrozenSet[CategoryClass] = frozenset({
    CategoryClass.REVENUE,
    CategoryClass.OTHER_REVENUE,
})

EXPENSE_CATEGORIES: FrozenSet[CategoryClass] = frozenset({
    CategoryClass.COGS,
    CategoryClass.COGM,
    CategoryClass.EXPENSE,
    CategoryClass.OTHER_EXPENSE,
    CategoryClass.TAX,
})

PROFIT_LOSS_CATEGORIES: FrozenSet[CategoryClass] = INCOME_CATEGORIES | EXPENSE_CATEGORIES

# Gross profit line of the statement
GROSS_PROFIT_CATEGORIES: FrozenSet[CategoryClass] = frozenset({
    CategoryClass.REVENUE,
    CategoryClass.COGS,
})

BALANCE_SHEET_CATEGORIES: FrozenSet[CategoryClass] = frozenset({
    CategoryClass.CURRENT_ASSET,
    CategoryClass.FIXED_ASSET,
    CategoryClass.CURRENT_LIABILITIES,
    CategoryClass.LONG_TERM_LIABILITIES,
    CategoryClass.EQUITY,
})

# Rolled up into the unit's current-profit account on the balance sheet
CURRENT_PROFIT_CATEGORIES: FrozenSet[CategoryClass] = PROFIT_LOSS_CATEGORIES | {CategoryClass.NET_PROFIT}


class LedgerReport(str, Enum):
    """Scalar ledger reports of the dashboard."""
    INCOME = "income"
    EXPENSE = "expense"
    PROFIT_LOSS = "profit_loss"

    @property
    def categories(self) -> FrozenSet[CategoryClass]:
        return REPORT_CATEGORIES[self]

    @property
    def absolute(self) -> bool:
        """Whether the report is shown as an absolute value."""
        return self is LedgerReport.EXPENSE


REPORT_CATEGORIES: Dict[LedgerReport, FrozenSet[CategoryClass]] = {
    LedgerReport.INCOME: INCOME_CATEGORIES,
    LedgerReport.EXPENSE: EXPENSE_CATEGORIES,
    LedgerReport.PROFIT_LOSS: PROFIT_LOSS_CATEGORIES,
}


# ===========================================
# REPORT KINDS
# ===========================================

class TransactionKind(str, Enum):
    """Series kind of the transaction charts."""
    SALES = "sales"
    PURCHASE = "purchase"


class BalanceKind(str, Enum):
    """Outstanding balance kind."""
    DEBT = "debt"
    RECEIVE = "receive"


TRANSACTION_KIND_TYPES: Dict[TransactionKind, TransactionType] = {
    TransactionKind.SALES: TransactionType.SALE_INVOICE,
    TransactionKind.PURCHASE: TransactionType.PURCHASE_INVOICE,
}

# kind -> (invoice type, payment type settling it)
BALANCE_KIND_TYPES: Dict[BalanceKind, Tuple[TransactionType, TransactionType]] = {
    BalanceKind.RECEIVE: (TransactionType.SALE_INVOICE, TransactionType.RECEIVABLE_PAYMENT),
    BalanceKind.DEBT: (TransactionType.PURCHASE_INVOICE, TransactionType.DEBT_PAYMENT),
}


def resolve_transaction_kind(kind: Union[str, TransactionKind]) -> TransactionKind:
    try:
        return TransactionKind(kind)
    except ValueError:
        raise UnsupportedReportKindException(kind, [k.value for k in TransactionKind])


def resolve_balance_kind(kind: Union[str, BalanceKind]) -> BalanceKind:
    try:
        return BalanceKind(kind)
    except ValueError:
        raise UnsupportedReportKindException(kind, [k.value for k in BalanceKind])


# Kind names of the debt/receivable report, as the report routes spell them
REPORT_BALANCE_KINDS: Dict[str, BalanceKind] = {
    "debt": BalanceKind.DEBT,
    "receivable": BalanceKind.RECEIVE,
}


def resolve_report_balance_kind(kind: Union[str, BalanceKind]) -> BalanceKind:
    if isinstance(kind, BalanceKind):
        return kind
    try:
        return REPORT_BALANCE_KINDS[kind]
    except KeyError:
        raise UnsupportedReportKindException(kind, list(REPORT_BALANCE_KINDS))


# ===========================================
# SIGN EXPRESSIONS
# ===========================================

def vector_sign(vector) -> ColumnElement:
    """1 for POSITIVE, -1 otherwise."""
    return case((vector == Vector.POSITIVE, 1), else_=-1)


def signed_ledger_amount(amount, vector) -> ColumnElement:
    """
    Business-facing sign of a ledger amount: (amount * -1) * vector sign.

    Positive means income for revenue accounts; the same expression summed
    over every income-statement category gives profit or loss.
    """
    return (amount * -1) * vector_sign(vector)


def position_signed_amount(amount, vector, position) -> ColumnElement:
    """Ledger amount signed by its vector and by the class polarity."""
    return amount * vector_sign(vector) * vector_sign(position)


def closing_balance(position: Vector, begin: Decimal, debit: Decimal, credit: Decimal) -> Decimal:
    """
    Ending balance of a balance-sheet account.

    Debits increase POSITIVE (debit-normal) classes and credits increase
    NEGATIVE ones.
    """
    if position == Vector.POSITIVE:
        return begin + debit - credit
    return begin + credit - debit
