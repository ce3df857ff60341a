"""
Back Office Reporting - FastAPI Dependencies

Shared dependencies wiring a request's database session to the
reporting services.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.config import settings
from backoffice.database import get_async_session
from backoffice.services.aggregate_store import AggregateStore, SqlAggregateStore
from backoffice.services.dashboard_service import DashboardService
from backoffice.services.report_service import ReportService


async def get_aggregate_store(
    db: AsyncSession = Depends(get_async_session),
) -> AggregateStore:
    """Aggregate store bound to the request session and the report zone."""
    return SqlAggregateStore(db, settings.report_timezone)


async def get_dashboard_service(
    store: AggregateStore = Depends(get_aggregate_store),
) -> DashboardService:
    return DashboardService(store, settings.report_timezone, settings.month_locale)


async def get_report_service(
    store: AggregateStore = Depends(get_aggregate_store),
) -> ReportService:
    return ReportService(store, settings.report_timezone)
