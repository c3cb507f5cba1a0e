"""Report endpoints - rollups over a selected date range."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from bizmanager.database import get_database
from bizmanager.models.report import (
    ClientRevenue,
    DateRange,
    MonthlyHours,
    MonthlyRevenue,
    ProjectHours,
    RangeKeyword,
    SummaryStats,
)
from bizmanager.routers.auth import get_current_user_id
from bizmanager.services.report_service import ReportService
from bizmanager.utils.date_range import resolve_range


router = APIRouter(prefix="/reports", tags=["reports"])


async def get_date_range(
    range_keyword: RangeKeyword = Query(RangeKeyword.THIS_MONTH, alias="range"),
    start: Optional[date] = Query(None, description="First day, custom ranges only"),
    end: Optional[date] = Query(None, description="Last day, custom ranges only"),
) -> DateRange:
    """
    Dependency resolving the requested range before any aggregation runs.

    Raises:
        HTTPException: If a custom range is incomplete or inverted (400)
    """
    try:
        return resolve_range(range_keyword, start=start, end=end)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/revenue", response_model=list[MonthlyRevenue])
async def revenue_report(
    date_range: DateRange = Depends(get_date_range),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Paid revenue per month, including months without income."""
    return await ReportService(db).revenue_by_month(date_range)


@router.get("/projects", response_model=list[ProjectHours])
async def projects_report(
    date_range: DateRange = Depends(get_date_range),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Hours and billable value per project for the current user."""
    return await ReportService(db).hours_by_project(user_id, date_range)


@router.get("/clients", response_model=list[ClientRevenue])
async def clients_report(
    date_range: DateRange = Depends(get_date_range),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Paid revenue per client."""
    return await ReportService(db).revenue_by_client(date_range)


@router.get("/time", response_model=list[MonthlyHours])
async def time_report(
    date_range: DateRange = Depends(get_date_range),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Billable and non-billable hours per month for the current user."""
    return await ReportService(db).hours_by_month(user_id, date_range)


@router.get("/summary", response_model=SummaryStats)
async def summary_report(
    date_range: DateRange = Depends(get_date_range),
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Headline numbers for the selected range."""
    return await ReportService(db).summary(user_id, date_range)
