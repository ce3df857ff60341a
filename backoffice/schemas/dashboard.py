"""
Back Office Reporting - Dashboard Schemas

Pydantic response schemas for the dashboard API.

- Daily series: {date, total}
- Monthly series: {month, shortMonth, total}, always twelve entries
- Scalars: {total}
"""

import datetime

from pydantic import BaseModel, ConfigDict, Field


# ===========================================
# TRANSACTION SERIES
# ===========================================

class DailyTotalResponse(BaseModel):
    """Total of one calendar day."""
    model_config = ConfigDict(from_attributes=True)

    date: datetime.date = Field(..., description="Calendar day in the report time zone")
    total: float = Field(0, description="Sum of invoice totals, 0 when none")


class MonthlyTotalResponse(BaseModel):
    """Total of one calendar month."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    month: str = Field(..., description="Full month name")
    short_month: str = Field(..., alias="shortMonth", description="Three-letter abbreviation")
    total: float = Field(0)


# ===========================================
# SCALARS
# ===========================================

class TotalResponse(BaseModel):
    """Single aggregated amount."""
    total: float = Field(0, description="0 when no data matched")
