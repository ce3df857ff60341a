"""
Back Office Reporting - Financial Reports API Router

Account-level reports of one unit for a date range:
- Profit and loss statement
- Balance sheet
- Open debt / receivable invoices
"""

from fastapi import APIRouter, Depends, Path, Query

from backoffice.dependencies import get_report_service
from backoffice.schemas.reports import (
    BalanceSheetResponse,
    DebtReceivableResponse,
    ProfitLossStatementResponse,
)
from backoffice.services.report_service import ReportService


router = APIRouter(prefix="/api/v1/reports", tags=["Reports"])


@router.get("/profit-loss/{start_date}/{end_date}", response_model=ProfitLossStatementResponse)
async def get_profit_loss_statement(
    start_date: str = Path(..., description="First day (inclusive)"),
    end_date: str = Path(..., description="Last day (inclusive)"),
    unit_id: str = Query(..., description="Unit ID"),
    service: ReportService = Depends(get_report_service),
):
    """
    Profit and loss statement per chart of account.

    Accounts are grouped by account class with a subtotal each; the
    statement total matches the dashboard profit/loss.
    """
    statement = await service.get_profit_loss_statement(unit_id, start_date, end_date)
    return ProfitLossStatementResponse.model_validate(statement)


@router.get("/balance-sheet/{start_date}/{end_date}", response_model=BalanceSheetResponse)
async def get_balance_sheet(
    start_date: str = Path(..., description="First day (inclusive)"),
    end_date: str = Path(..., description="Last day (inclusive)"),
    unit_id: str = Query(..., description="Unit ID"),
    service: ReportService = Depends(get_report_service),
):
    """
    Balance sheet per chart of account.

    Opening balance before the range, debit and credit inside it, and the
    ending balance. Income-statement activity is shown on the unit's
    current-profit account.
    """
    balance_sheet = await service.get_balance_sheet(unit_id, start_date, end_date)
    return BalanceSheetResponse.model_validate(balance_sheet)


@router.get("/debt-receivable/{kind}/{start_date}/{end_date}", response_model=DebtReceivableResponse)
async def get_debt_receivable(
    kind: str = Path(..., description="debt or receivable"),
    start_date: str = Path(...),
    end_date: str = Path(...),
    unit_id: str = Query(..., description="Unit ID"),
    service: ReportService = Depends(get_report_service),
):
    """Open invoices with their linked payments."""
    report = await service.get_debt_receivable(unit_id, kind, start_date, end_date)
    return DebtReceivableResponse.model_validate(report)
