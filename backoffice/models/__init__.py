"""
Back Office Reporting - SQLAlchemy Models Package

Read-side mapping of the ledger schema used by the reporting layer.
"""

from backoffice.models.base import BaseModel, TimestampMixin
from backoffice.models.unit import Unit
from backoffice.models.people import People
from backoffice.models.transaction import Transaction, TransactionDetail, TransactionType
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

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "Unit",
    "People",
    "Transaction",
    "TransactionDetail",
    "TransactionType",
    "AccountClass",
    "AccountSubClass",
    "CategoryClass",
    "ChartOfAccount",
    "GeneralLedger",
    "GeneralLedgerDetail",
    "GeneralSetting",
    "Vector",
]
