from fastapi import APIRouter

from edumanager.core.modules.stats.models import DashboardStats
from edumanager.web.deps import AppDep

router: APIRouter = APIRouter(tags=["stats"])


@router.get(
    "/stats",
    summary="Dashboard statistics",
    description="Total students, active courses, graduates (inactive students) and success rate.",
    operation_id="getDashboardStats",
)
async def get_dashboard_stats(app: AppDep) -> DashboardStats:
    return await app.get_dashboard_stats()
