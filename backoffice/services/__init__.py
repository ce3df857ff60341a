"""
Back Office Reporting - Services Package

Read-side aggregation services.
"""

from backoffice.services.aggregate_store import AggregateStore, SqlAggregateStore
from backoffice.services.dashboard_service import DashboardService
from backoffice.services.report_service import ReportService

__all__ = [
    "AggregateStore",
    "SqlAggregateStore",
    "DashboardService",
    "ReportService",
]
