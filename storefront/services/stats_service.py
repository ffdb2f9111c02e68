# storefront/services/stats_service.py
from decimal import Decimal

from storefront.clients.base import FunctionsApi
from storefront.schemas.order import PENDING_STATUSES, OrderStatus
from storefront.schemas.stats import AdminDashboardStats, HomePage

HOME_FEATURED_COUNT = 8
DASHBOARD_FEATURED_COUNT = 3


class StatsService:
    """
    Read-only aggregates for the home page and the admin dashboard.

    Everything is computed from full listings through the API client; an
    unreachable gateway yields zeros and empty lists.
    """

    def __init__(self, api: FunctionsApi):
        self.api = api

    def home_page(self) -> HomePage:
        products = self.api.list_products()
        return HomePage(
            featured_products=products[:HOME_FEATURED_COUNT],
            product_count=len(products),
        )

    def admin_dashboard(self) -> AdminDashboardStats:
        customers = self.api.list_customers()
        products = self.api.list_products()
        orders = self.api.list_orders()

        pending_values = {s.value for s in PENDING_STATUSES}
        pending = sum(1 for o in orders if o.status in pending_values)
        revenue = sum(
            (o.total_amount for o in orders if o.status != OrderStatus.CANCELLED.value),
            Decimal("0"),
        )

        return AdminDashboardStats(
            customer_count=len(customers),
            product_count=len(products),
            order_count=len(orders),
            pending_orders=pending,
            total_revenue=revenue,
            featured_products=products[:DASHBOARD_FEATURED_COUNT],
        )
