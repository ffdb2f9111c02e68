# storefront/schemas/stats.py
from decimal import Decimal

from pydantic import Field

from storefront.schemas.entity import CamelModel, Money
from storefront.schemas.product import Product


class AdminDashboardStats(CamelModel):
    """
    Full payload for the admin dashboard.

    pending_orders counts Submitted + Processing; total_revenue sums every
    order that is not Cancelled.
    """

    customer_count: int = 0
    product_count: int = 0
    order_count: int = 0
    pending_orders: int = 0
    total_revenue: Money = Decimal("0")
    featured_products: list[Product] = Field(default_factory=list)


class HomePage(CamelModel):
    featured_products: list[Product] = Field(default_factory=list)
    product_count: int = 0
