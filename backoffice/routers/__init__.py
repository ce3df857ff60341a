"""
Back Office Reporting - Routers Package

FastAPI route handlers.

Routers:
- dashboard: Daily/monthly series and scalar ledger totals
- reports: Account-level financial statements
"""

from backoffice.routers import dashboard, reports

__all__ = ["dashboard", "reports"]
