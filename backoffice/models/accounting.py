"""
Back Office Reporting - Chart of Accounts & General Ledger Models

Fixed three-level classification hierarchy:

    AccountClass -> AccountSubClass -> ChartOfAccount

and the general ledger produced by posting a transaction:

    GeneralLedger (one per transaction) -> GeneralLedgerDetail (signed lines)

Every ledger detail references a chart of account whose class is
resolvable through the hierarchy; the foreign keys are non-nullable for
that reason.
"""

import uuid
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import ForeignKey, Numeric, String, Uuid, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.models.base import BaseModel
from backoffice.models.transaction import Transaction


# =============================================================================
# ENUMS
# =============================================================================

class CategoryClass(str, Enum):
    """Report bucket an account class belongs to."""
    # Balance sheet
    CURRENT_ASSET = "CURRENT_ASSET"
    FIXED_ASSET = "FIXED_ASSET"
    CURRENT_LIABILITIES = "CURRENT_LIABILITIES"
    LONG_TERM_LIABILITIES = "LONG_TERM_LIABILITIES"
    EQUITY = "EQUITY"
    NET_PROFIT = "NET_PROFIT"
    # Income statement
    REVENUE = "REVENUE"
    OTHER_REVENUE = "OTHER_REVENUE"
    COGS = "COGS"
    COGM = "COGM"
    EXPENSE = "EXPENSE"
    OTHER_EXPENSE = "OTHER_EXPENSE"
    TAX = "TAX"


class Vector(str, Enum):
    """Stored direction of a ledger amount, also used for class polarity."""
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"


# =============================================================================
# CLASSIFICATION HIERARCHY
# =============================================================================

class AccountClass(BaseModel):
    """Top level of the account hierarchy, tagged with a category and polarity."""

    __tablename__ = "account_classes"

    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category_class: Mapped[CategoryClass] = mapped_column(
        SQLEnum(CategoryClass),
        nullable=False,
        index=True,
    )
    balance_sheet_position: Mapped[Vector] = mapped_column(
        SQLEnum(Vector, name="balance_sheet_position"),
        default=Vector.POSITIVE,
        nullable=False,
    )
    profit_loss_position: Mapped[Vector] = mapped_column(
        SQLEnum(Vector, name="profit_loss_position"),
        default=Vector.POSITIVE,
        nullable=False,
    )

    sub_classes: Mapped[List["AccountSubClass"]] = relationship(
        "AccountSubClass",
        back_populates="account_class",
    )


class AccountSubClass(BaseModel):
    """Second level of the account hierarchy."""

    __tablename__ = "account_sub_classes"

    account_class_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("account_classes.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    account_class: Mapped["AccountClass"] = relationship(
        "AccountClass",
        back_populates="sub_classes",
    )
    accounts: Mapped[List["ChartOfAccount"]] = relationship(
        "ChartOfAccount",
        back_populates="sub_class",
    )


class ChartOfAccount(BaseModel):
    """Postable account; the leaf of the classification hierarchy."""

    __tablename__ = "chart_of_accounts"

    __table_args__ = (
        UniqueConstraint("code", "unit_id", name="uq_chart_of_accounts_code_unit"),
    )

    account_sub_class_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("account_sub_classes.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    unit_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    sub_class: Mapped["AccountSubClass"] = relationship(
        "AccountSubClass",
        back_populates="accounts",
    )


# =============================================================================
# GENERAL LEDGER
# =============================================================================

class GeneralLedger(BaseModel):
    """Ledger header produced by posting one transaction."""

    __tablename__ = "general_ledgers"

    unit_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    transaction_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    transaction: Mapped["Transaction"] = relationship("Transaction")
    details: Mapped[List["GeneralLedgerDetail"]] = relationship(
        "GeneralLedgerDetail",
        back_populates="general_ledger",
    )


class GeneralLedgerDetail(BaseModel):
    """One monetary movement against one chart of account."""

    __tablename__ = "general_ledger_details"

    general_ledger_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("general_ledgers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chart_of_account_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("chart_of_accounts.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        nullable=False,
    )
    vector: Mapped[Vector] = mapped_column(
        SQLEnum(Vector, name="vector"),
        nullable=False,
    )

    general_ledger: Mapped["GeneralLedger"] = relationship(
        "GeneralLedger",
        back_populates="details",
    )
    chart_of_account: Mapped["ChartOfAccount"] = relationship("ChartOfAccount")


# =============================================================================
# UNIT SETTINGS
# =============================================================================

class GeneralSetting(BaseModel):
    """
    Accounting settings of one unit.

    `current_profit_account_id` is the equity account the balance sheet
    rolls income-statement activity into.
    """

    __tablename__ = "general_settings"

    unit_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    current_profit_account_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("chart_of_accounts.id", ondelete="SET NULL"),
        nullable=True,
    )
