"""
Back Office Reporting - Financial Report Schemas

Pydantic response schemas for the account-level reports.
"""

import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from backoffice.models.accounting import CategoryClass, Vector


# ===========================================
# PROFIT & LOSS STATEMENT
# ===========================================

class ProfitLossLineResponse(BaseModel):
    """One chart of account on the statement."""
    model_config = ConfigDict(from_attributes=True)

    account_id: UUID
    category: CategoryClass
    class_code: str
    class_name: str
    account_code: str
    account_name: str
    value: float = Field(..., description="Amount signed by the class polarity")
    sum_value: float = Field(..., description="Amount in the dashboard profit/loss sign")


class ProfitLossSectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    class_code: str
    class_name: str
    lines: List[ProfitLossLineResponse] = Field(default_factory=list)
    subtotal: float = 0


class ProfitLossStatementResponse(BaseModel):
    """Profit and loss statement of one unit for a date range."""
    model_config = ConfigDict(from_attributes=True)

    unit_id: UUID
    start_date: datetime.date
    end_date: datetime.date
    sections: List[ProfitLossSectionResponse] = Field(default_factory=list)
    gross_profit: float = 0
    total: float = Field(0, description="Net profit; equals the dashboard profit/loss")


# ===========================================
# BALANCE SHEET
# ===========================================

class BalanceSheetLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    account_id: UUID
    category: CategoryClass
    class_code: str
    class_name: str
    sub_class_code: str
    sub_class_name: str
    account_code: str
    account_name: str
    begin_balance: float = Field(..., description="Balance before the start date")
    debit: float
    credit: float
    end_balance: float


class BalanceSheetSectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    class_code: str
    class_name: str
    position: Vector
    lines: List[BalanceSheetLineResponse] = Field(default_factory=list)
    subtotal: float = 0


class BalanceSheetResponse(BaseModel):
    """Balance sheet of one unit at the end of a date range."""
    model_config = ConfigDict(from_attributes=True)

    unit_id: UUID
    start_date: datetime.date
    end_date: datetime.date
    sections: List[BalanceSheetSectionResponse] = Field(default_factory=list)
    total_assets: float = 0
    total_liabilities_equity: float = 0
    current_profit_account_id: Optional[UUID] = None


# ===========================================
# DEBT / RECEIVABLE
# ===========================================

class InvoicePaymentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    payment_id: UUID
    transaction_number: Optional[str] = None
    entry_date: datetime.date
    amount: float


class OutstandingInvoiceResponse(BaseModel):
    """An open invoice with the payments applied to it."""
    model_config = ConfigDict(from_attributes=True)

    invoice_id: UUID
    transaction_number: Optional[str] = None
    entry_date: datetime.date
    partner_code: Optional[str] = None
    partner_name: Optional[str] = None
    total: float
    under_payment: float
    paid: float
    remaining: float
    payments: List[InvoicePaymentResponse] = Field(default_factory=list)


class DebtReceivableResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    unit_id: UUID
    kind: str = Field(..., description="debt or receivable")
    start_date: datetime.date
    end_date: datetime.date
    invoices: List[OutstandingInvoiceResponse] = Field(default_factory=list)
    total: float = Field(0, description="Sum of the remaining balances")
