"""Dashboard endpoints."""
from fastapi import APIRouter, Depends

from bizmanager.database import get_database
from bizmanager.models.report import DashboardStats
from bizmanager.routers.auth import get_current_user_id
from bizmanager.services.dashboard_service import DashboardService


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(
    user_id: str = Depends(get_current_user_id),
    db=Depends(get_database),
):
    """Landing page counters, computed fresh on every request."""
    return await DashboardService(db).get_stats(user_id)
