"""
Back Office Reporting - Transaction Models

Posted business events (invoices, payments, journal entries, ...) and the
detail rows that link a payment to the invoices it settles.

These rows are owned by the posting subsystem; the reporting layer maps
them read-only.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Uuid, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backoffice.models.base import BaseModel

if TYPE_CHECKING:
    from backoffice.models.unit import Unit


class TransactionType(str, Enum):
    """Type of posted business event."""
    SALE_QUOTATION = "SALE_QUOTATION"
    SALE_ORDER = "SALE_ORDER"
    SALE_INVOICE = "SALE_INVOICE"
    SALE_RETURN = "SALE_RETURN"
    RECEIVABLE_PAYMENT = "RECEIVABLE_PAYMENT"
    PURCHASE_QUOTATION = "PURCHASE_QUOTATION"
    PURCHASE_ORDER = "PURCHASE_ORDER"
    PURCHASE_INVOICE = "PURCHASE_INVOICE"
    PURCHASE_RETURN = "PURCHASE_RETURN"
    DEBT_PAYMENT = "DEBT_PAYMENT"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"
    JOURNAL_ENTRY = "JOURNAL_ENTRY"
    TRANSFER_FUND = "TRANSFER_FUND"
    TRANSFER_ITEM_SEND = "TRANSFER_ITEM_SEND"
    TRANSFER_ITEM_RECEIVE = "TRANSFER_ITEM_RECEIVE"
    STOCK_OPNAME = "STOCK_OPNAME"
    BEGINNING_BALANCE_STOCK = "BEGINNING_BALANCE_STOCK"
    BEGINNING_BALANCE_DEBT = "BEGINNING_BALANCE_DEBT"
    BEGINNING_BALANCE_RECEIVABLE = "BEGINNING_BALANCE_RECEIVABLE"
    OPEN_REGISTER = "OPEN_REGISTER"
    CLOSE_REGISTER = "CLOSE_REGISTER"


class Transaction(BaseModel):
    """
    Transaction model - one posted business event of a unit.

    `under_payment` is the balance left open on an invoice at posting time;
    linked payment details are netted against it for debt/receivable totals.
    """

    __tablename__ = "transactions"

    # Unit
    unit_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    transaction_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Counterparty of invoices and payments
    people_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("people.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Type
    transaction_type: Mapped[TransactionType] = mapped_column(
        SQLEnum(TransactionType),
        nullable=False,
        index=True,
    )

    # Stored as an instant; reports compare it as a date in the report zone
    entry_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )

    # Amounts
    total: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    under_payment: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=False,
        comment="Amount left unpaid on the invoice",
    )

    # Relationships
    unit: Mapped["Unit"] = relationship("Unit", back_populates="transactions")
    details: Mapped[List["TransactionDetail"]] = relationship(
        "TransactionDetail",
        back_populates="transaction",
        foreign_keys="TransactionDetail.transaction_id",
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, type={self.transaction_type}, total={self.total})>"


class TransactionDetail(BaseModel):
    """
    Detail row of a transaction.

    On a payment transaction, `transaction_payment_id` references the
    invoice being settled and `price_input` is the amount applied to it.
    """

    __tablename__ = "transaction_details"

    transaction_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    transaction_payment_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("transactions.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    price_input: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )

    transaction: Mapped["Transaction"] = relationship(
        "Transaction",
        back_populates="details",
        foreign_keys=[transaction_id],
    )
