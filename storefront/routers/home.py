# storefront/routers/home.py
from fastapi import APIRouter, Depends

from storefront.clients.base import FunctionsApi
from storefront.clients.deps import get_functions_api
from storefront.core.auth import require_admin
from storefront.schemas.stats import AdminDashboardStats, HomePage
from storefront.services.stats_service import StatsService

router = APIRouter(tags=["Home"])


def get_stats_service(api: FunctionsApi = Depends(get_functions_api)) -> StatsService:
    return StatsService(api)


@router.get("/", response_model=HomePage)
def home(service: StatsService = Depends(get_stats_service)):
    """
    Landing page data: up to 8 featured products and the product count.
    """
    return service.home_page()


@router.get(
    "/admin/dashboard",
    response_model=AdminDashboardStats,
    dependencies=[Depends(require_admin)],
    tags=["Admin Stats"],
)
def admin_dashboard(service: StatsService = Depends(get_stats_service)):
    """
    Counts, pending orders (Submitted + Processing), revenue of all
    non-cancelled orders and 3 featured products. Admin only.
    """
    return service.admin_dashboard()
