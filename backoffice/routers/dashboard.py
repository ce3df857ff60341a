"""
Back Office Reporting - Dashboard API Router

Charts and headline figures of the back-office dashboard, all scoped to
one unit and a date range:
- Daily / monthly sales and purchase series
- Outstanding debt and receivable
- Income, expense and profit/loss

Bounds are ISO-8601 dates (or datetimes) and are compared as calendar
dates in the configured report time zone.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, Query

from backoffice.dependencies import get_dashboard_service
from backoffice.schemas.dashboard import (
    DailyTotalResponse,
    MonthlyTotalResponse,
    TotalResponse,
)
from backoffice.services.dashboard_service import DashboardService


router = APIRouter(prefix="/api/v1/dashboard", tags=["Dashboard"])


# ===========================================
# TRANSACTION SERIES
# ===========================================

@router.get("/transaction-daily/{kind}/{start_date}/{end_date}", response_model=List[DailyTotalResponse])
async def get_transaction_daily(
    kind: str = Path(..., description="sales or purchase"),
    start_date: str = Path(..., description="First day (inclusive)"),
    end_date: str = Path(..., description="Last day (inclusive)"),
    unit_id: str = Query(..., description="Unit ID"),
    service: DashboardService = Depends(get_dashboard_service),
):
    """
    Invoice totals per day.

    One entry per calendar day of the range, days without invoices are 0.
    """
    series = await service.get_transaction_daily(unit_id, kind, start_date, end_date)
    return [DailyTotalResponse.model_validate(item) for item in series]


@router.get("/transaction-monthly/{kind}/{start_date}/{end_date}", response_model=List[MonthlyTotalResponse])
async def get_transaction_monthly(
    kind: str = Path(..., description="sales or purchase"),
    start_date: str = Path(...),
    end_date: str = Path(...),
    unit_id: str = Query(..., description="Unit ID"),
    service: DashboardService = Depends(get_dashboard_service),
):
    """
    Invoice totals per calendar month.

    Always twelve entries, January first. Invoices are selected by the
    years of the two bounds only.
    """
    series = await service.get_transaction_monthly(unit_id, kind, start_date, end_date)
    return [MonthlyTotalResponse.model_validate(item) for item in series]


# ===========================================
# SCALARS
# ===========================================

@router.get("/debt-receivable-total/{kind}/{start_date}/{end_date}", response_model=TotalResponse)
async def get_debt_receivable_total(
    kind: str = Path(..., description="debt or receive"),
    start_date: str = Path(...),
    end_date: str = Path(...),
    unit_id: str = Query(..., description="Unit ID"),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Open invoice balance after netting linked payments."""
    total = await service.get_debt_receivable_total(unit_id, kind, start_date, end_date)
    return TotalResponse(total=total)


@router.get("/income/{start_date}/{end_date}", response_model=TotalResponse)
async def get_income(
    start_date: str = Path(...),
    end_date: str = Path(...),
    unit_id: str = Query(..., description="Unit ID"),
    service: DashboardService = Depends(get_dashboard_service),
):
    total = await service.get_income(unit_id, start_date, end_date)
    return TotalResponse(total=total)


@router.get("/expense/{start_date}/{end_date}", response_model=TotalResponse)
async def get_expense(
    start_date: str = Path(...),
    end_date: str = Path(...),
    unit_id: str = Query(..., description="Unit ID"),
    service: DashboardService = Depends(get_dashboard_service),
):
    total = await service.get_expense(unit_id, start_date, end_date)
    return TotalResponse(total=total)


@router.get("/profit-loss/{start_date}/{end_date}", response_model=TotalResponse)
async def get_profit_loss(
    start_date: str = Path(...),
    end_date: str = Path(...),
    unit_id: str = Query(..., description="Unit ID"),
    service: DashboardService = Depends(get_dashboard_service),
):
    total = await service.get_profit_loss(unit_id, start_date, end_date)
    return TotalResponse(total=total)
