"""
Reporting API routes.
"""
from typing import Optional, Tuple
from datetime import datetime
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database.connection import get_db
from ...schemas.time_tracking import ReportSummaryResponse
from ...auth.dependencies import require_admin, CurrentUser
from ...services.reports import ReportService
from .time_tracking import date_range

router = APIRouter(prefix="/reports", tags=["Reports"])


# PUBLIC_INTERFACE
@router.get("/summary", response_model=ReportSummaryResponse,
           summary="Get summary report",
           description="Totals of closed time entries grouped by user and by project (admin only).")
async def get_summary(
    current_user: CurrentUser = Depends(require_admin),
    bounds: Tuple[Optional[datetime], Optional[datetime]] = Depends(date_range),
    db: Session = Depends(get_db)
):
    """
    Get the summary report.

    Only closed entries count. ``totalHours`` is ``totalMinutes / 60``
    rounded to two decimals.
    """
    start_date, end_date = bounds
    return ReportSummaryResponse(**ReportService(db).summary(start_date, end_date))
