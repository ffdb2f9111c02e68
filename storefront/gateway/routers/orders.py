# storefront/gateway/routers/orders.py
from fastapi import APIRouter, Depends, Query, status

from storefront.gateway.deps import get_order_store
from storefront.gateway.services import OrderGatewayService
from storefront.schemas.envelope import ApiResponse
from storefront.schemas.order import Order, OrderStatusUpdate, OrderUpdate
from storefront.storage.table_store import TableStore

router = APIRouter(prefix="/orders", tags=["Gateway: Orders"])

service = OrderGatewayService()


@router.get("", response_model=ApiResponse[list[Order]])
def list_orders(
    customer_id: str | None = Query(default=None, alias="customerId"),
    username: str | None = Query(default=None),
    store: TableStore = Depends(get_order_store),
):
    """
    List orders, optionally filtered by customerId and/or username.
    """
    orders = service.list_filtered(store, customer_id=customer_id, username=username)
    return ApiResponse(success=True, data=orders, message=f"Retrieved {len(orders)} orders")


@router.post(
    "",
    response_model=ApiResponse[Order],
    status_code=status.HTTP_201_CREATED,
)
def create_order(payload: Order, store: TableStore = Depends(get_order_store)):
    return ApiResponse(success=True, data=service.create(store, payload), message="Order created")


@router.get("/{order_id}", response_model=ApiResponse[Order])
def get_order(order_id: str, store: TableStore = Depends(get_order_store)):
    return ApiResponse(success=True, data=service.get(store, order_id))


@router.put("/{order_id}", response_model=ApiResponse[Order])
def update_order(
    order_id: str,
    payload: OrderUpdate,
    store: TableStore = Depends(get_order_store),
):
    """
    Merge the sent fields into the stored order.

    - Leaving out orderItems keeps the stored items as they are.
    """
    return ApiResponse(
        success=True,
        data=service.update(store, order_id, payload),
        message="Order updated",
    )


@router.patch("/{order_id}/status", response_model=ApiResponse[Order])
def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    store: TableStore = Depends(get_order_store),
):
    """
    Status-only update. No other stored property is rewritten.
    """
    return ApiResponse(
        success=True,
        data=service.set_status(store, order_id, payload.status),
        message=f"Order status set to {payload.status.value}",
    )


@router.delete("/{order_id}", response_model=ApiResponse[None])
def delete_order(order_id: str, store: TableStore = Depends(get_order_store)):
    service.delete(store, order_id)
    return ApiResponse(success=True, message="Order deleted")
