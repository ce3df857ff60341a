"""
Back Office Reporting - Classification Rules Tests
"""

import pytest
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite

from backoffice.models import AccountClass, CategoryClass, GeneralLedgerDetail, Transaction, TransactionType
from backoffice.services.aggregate_store import local_date
from backoffice.services.classification import (
    BALANCE_KIND_TYPES,
    BALANCE_SHEET_CATEGORIES,
    CURRENT_PROFIT_CATEGORIES,
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    PROFIT_LOSS_CATEGORIES,
    REPORT_BALANCE_KINDS,
    TRANSACTION_KIND_TYPES,
    BalanceKind,
    LedgerReport,
    TransactionKind,
    position_signed_amount,
    resolve_balance_kind,
    resolve_report_balance_kind,
    resolve_transaction_kind,
    signed_ledger_amount,
)
from backoffice.utils.error_handling import ErrorCode, UnsupportedReportKindException


def compile_pg(statement) -> str:
    return str(statement.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True}))


class TestCategorySets:
    """Test the named category sets."""

    def test_income_categories(self):
        assert INCOME_CATEGORIES == {CategoryClass.REVENUE, CategoryClass.OTHER_REVENUE}

    def test_expense_categories(self):
        assert EXPENSE_CATEGORIES == {
            CategoryClass.COGS,
            CategoryClass.COGM,
            CategoryClass.EXPENSE,
            CategoryClass.OTHER_EXPENSE,
            CategoryClass.TAX,
        }

    def test_profit_loss_is_union_of_seven(self):
        assert PROFIT_LOSS_CATEGORIES == INCOME_CATEGORIES | EXPENSE_CATEGORIES
        assert len(PROFIT_LOSS_CATEGORIES) == 7

    def test_sets_partition_every_category(self):
        assert not CURRENT_PROFIT_CATEGORIES & BALANCE_SHEET_CATEGORIES
        assert CURRENT_PROFIT_CATEGORIES | BALANCE_SHEET_CATEGORIES == set(CategoryClass)

    def test_current_profit_rolls_up_income_statement(self):
        assert CURRENT_PROFIT_CATEGORIES == PROFIT_LOSS_CATEGORIES | {CategoryClass.NET_PROFIT}
        assert CategoryClass.NET_PROFIT not in BALANCE_SHEET_CATEGORIES

    def test_ledger_reports(self):
        assert LedgerReport.INCOME.categories is INCOME_CATEGORIES
        assert LedgerReport.PROFIT_LOSS.categories is PROFIT_LOSS_CATEGORIES
        assert LedgerReport.EXPENSE.absolute
        assert not LedgerReport.INCOME.absolute
        assert not LedgerReport.PROFIT_LOSS.absolute


class TestReportKinds:
    """Test kind resolution and type maps."""

    def test_transaction_kind_types(self):
        assert TRANSACTION_KIND_TYPES[TransactionKind.SALES] == TransactionType.SALE_INVOICE
        assert TRANSACTION_KIND_TYPES[TransactionKind.PURCHASE] == TransactionType.PURCHASE_INVOICE

    def test_balance_kind_types(self):
        assert BALANCE_KIND_TYPES[BalanceKind.RECEIVE] == (
            TransactionType.SALE_INVOICE,
            TransactionType.RECEIVABLE_PAYMENT,
        )
        assert BALANCE_KIND_TYPES[BalanceKind.DEBT] == (
            TransactionType.PURCHASE_INVOICE,
            TransactionType.DEBT_PAYMENT,
        )

    def test_resolve_from_string(self):
        assert resolve_transaction_kind("purchase") is TransactionKind.PURCHASE
        assert resolve_balance_kind("receive") is BalanceKind.RECEIVE

    def test_unsupported_transaction_kind(self):
        with pytest.raises(UnsupportedReportKindException) as exc_info:
            resolve_transaction_kind("refund")

        assert exc_info.value.code == ErrorCode.UNSUPPORTED_REPORT_KIND
        assert exc_info.value.status_code == 422
        assert exc_info.value.details["allowed"] == ["sales", "purchase"]

    def test_balance_kind_rejects_transaction_kind(self):
        with pytest.raises(UnsupportedReportKindException):
            resolve_balance_kind("sales")

    def test_report_balance_kinds(self):
        assert resolve_report_balance_kind("receivable") is BalanceKind.RECEIVE
        assert resolve_report_balance_kind("debt") is BalanceKind.DEBT
        assert resolve_report_balance_kind(BalanceKind.RECEIVE) is BalanceKind.RECEIVE

    def test_report_balance_kind_uses_report_spelling(self):
        with pytest.raises(UnsupportedReportKindException) as exc_info:
            resolve_report_balance_kind("receive")

        assert exc_info.value.details["allowed"] == list(REPORT_BALANCE_KINDS)


class TestSignExpressions:
    """Test the SQL sign formulas."""

    def test_signed_ledger_amount(self):
        sql = compile_pg(select(signed_ledger_amount(GeneralLedgerDetail.amount, GeneralLedgerDetail.vector)))

        assert "general_ledger_details.amount * -1" in sql
        assert "general_ledger_details.vector = 'POSITIVE'" in sql
        assert "THEN 1 ELSE -1 END" in sql

    def test_position_signed_amount(self):
        sql = compile_pg(select(position_signed_amount(
            GeneralLedgerDetail.amount,
            GeneralLedgerDetail.vector,
            AccountClass.profit_loss_position,
        )))

        assert "account_classes.profit_loss_position = 'POSITIVE'" in sql
        assert "-1 *" not in sql


class TestLocalDate:
    """Test the per-dialect rendering of the report-zone date."""

    def test_postgresql_renders_timezone_inline(self):
        sql = compile_pg(select(local_date(Transaction.entry_date, "Asia/Bangkok")))

        assert "DATE(TIMEZONE('Asia/Bangkok', transactions.entry_date))" in sql

    def test_sqlite_renders_offset(self):
        statement = select(local_date(Transaction.entry_date, "Asia/Bangkok"))
        sql = str(statement.compile(dialect=sqlite.dialect()))

        assert "DATE(transactions.entry_date, '+420 minutes')" in sql

    def test_sqlite_rejects_unknown_zone(self):
        statement = select(local_date(Transaction.entry_date, "Mars/Olympus"))

        with pytest.raises(ValueError):
            statement.compile(dialect=sqlite.dialect())
