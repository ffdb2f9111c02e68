# storefront/schemas/order.py
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from pydantic import ConfigDict, Field, computed_field

from storefront.schemas.entity import CamelModel, Money, TableEntityModel

ORDER_PARTITION = "ORDERS"


class OrderStatus(str, Enum):
    SUBMITTED = "Submitted"
    PROCESSING = "Processing"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


# from-status -> statuses it may move to
ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.SUBMITTED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

CANCELLABLE_STATUSES = frozenset({OrderStatus.SUBMITTED, OrderStatus.PROCESSING})
PENDING_STATUSES = CANCELLABLE_STATUSES


def parse_status(value: str | None) -> OrderStatus | None:
    try:
        return OrderStatus(value)
    except ValueError:
        return None


def can_transition(current: str, new: OrderStatus, as_admin: bool = False) -> bool:
    """
    Order status machine.

      Submitted  -> Processing | Cancelled
      Processing -> Delivered  | Cancelled
      Delivered, Cancelled: terminal

    Admins may cancel from any state.
    """
    if as_admin and new is OrderStatus.CANCELLED:
        return True
    from_status = parse_status(current)
    if from_status is None:
        return False
    return new in ORDER_TRANSITIONS[from_status]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderItem(CamelModel):
    product_id: str
    product_name: str = ""
    quantity: int = Field(gt=0)
    unit_price: Money = Field(default=Decimal("0"), ge=0)
    image_url: str | None = None

    @computed_field
    @property
    def total_price(self) -> Money:
        return self.unit_price * self.quantity


class Order(TableEntityModel):
    """
    Order entity.

    Items are persisted as a single JSON string property (orderItemsJson)
    by the order repository; on the wire they travel as `orderItems`.
    status is kept as a plain string so records written by older clients
    with unknown statuses still load.

    productId/productName/quantity/unitPrice are read-only views of the
    first item, kept for callers that predate multi-item orders.
    """

    customer_id: str = ""
    username: str = ""
    order_date: datetime = Field(default_factory=_utcnow)
    total_amount: Money = Decimal("0")
    status: str = OrderStatus.SUBMITTED.value
    shipping_address: str = ""
    customer_email: str = ""
    order_items: list[OrderItem] = Field(default_factory=list)

    @property
    def order_id(self) -> str | None:
        return self.row_key

    @property
    def items_total(self) -> Decimal:
        return sum((item.total_price for item in self.order_items), Decimal("0"))

    # ----- legacy single-product views -----

    @property
    def first_item(self) -> OrderItem | None:
        return self.order_items[0] if self.order_items else None

    @property
    def product_id(self) -> str:
        return self.first_item.product_id if self.first_item else ""

    @property
    def product_name(self) -> str:
        return self.first_item.product_name if self.first_item else ""

    @property
    def quantity(self) -> int:
        return self.first_item.quantity if self.first_item else 0

    @property
    def unit_price(self) -> Decimal:
        return self.first_item.unit_price if self.first_item else Decimal("0")


class OrderUpdate(CamelModel):
    """
    Gateway PUT payload. Only the fields sent are changed; leaving out
    orderItems keeps the stored items untouched.
    """

    partition_key: str | None = None
    etag: str | None = Field(default=None, alias="eTag")
    customer_id: str | None = None
    username: str | None = None
    order_date: datetime | None = None
    total_amount: Money | None = None
    status: str | None = None
    shipping_address: str | None = None
    customer_email: str | None = None
    order_items: list[OrderItem] | None = None


class OrderStatusUpdate(CamelModel):
    model_config = ConfigDict(extra="forbid")

    status: OrderStatus


class AdminOrderEdit(CamelModel):
    """
    Admin edit form: only status and order date are editable.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus | None = None
    order_date: datetime | None = None
