# storefront/routers/orders.py
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from storefront.clients.base import FileContent, FunctionsApi
from storefront.clients.deps import get_functions_api
from storefront.core.auth import Identity, require_admin, require_customer
from storefront.schemas.order import AdminOrderEdit, Order, OrderStatusUpdate
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


def get_order_service(api: FunctionsApi = Depends(get_functions_api)) -> OrderService:
    return OrderService(api)


# -------- Customer endpoints --------


@router.get("/me", response_model=list[Order])
def list_my_orders(
    identity: Identity = Depends(require_customer),
    service: OrderService = Depends(get_order_service),
):
    """
    Orders of the current customer, newest first.
    """
    return service.list_my_orders(identity)


@router.get("/me/{order_id}", response_model=Order)
def get_my_order(
    order_id: str,
    identity: Identity = Depends(require_customer),
    service: OrderService = Depends(get_order_service),
):
    return service.get_my_order(identity, order_id)


@router.post("/me/{order_id}/cancel", response_model=Order)
def cancel_my_order(
    order_id: str,
    identity: Identity = Depends(require_customer),
    service: OrderService = Depends(get_order_service),
):
    """
    Cancel an own order while it is Submitted or Processing.
    """
    return service.cancel_my_order(identity, order_id)


@router.post("/me/{order_id}/proof-of-payment")
def upload_proof_of_payment(
    order_id: str,
    file: UploadFile = File(...),
    identity: Identity = Depends(require_customer),
    service: OrderService = Depends(get_order_service),
):
    """
    Attach a proof of payment (any file type, max 5MB) to an own order.
    Returns the stored file URL.
    """
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing file name",
        )
    content = FileContent(
        file_name=file.filename,
        content_type=file.content_type or "application/octet-stream",
        data=file.file.read(),
    )
    url = service.upload_proof_of_payment(identity, order_id, content)
    return {"orderId": order_id, "url": url}


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[Order],
    dependencies=[Depends(require_admin)],
)
def list_all_orders(service: OrderService = Depends(get_order_service)):
    return service.list_all_orders()


@router.get(
    "/{order_id}",
    response_model=Order,
    dependencies=[Depends(require_admin)],
)
def get_order_admin(order_id: str, service: OrderService = Depends(get_order_service)):
    return service.get_order_admin(order_id)


@router.patch(
    "/{order_id}/status",
    response_model=Order,
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    service: OrderService = Depends(get_order_service),
):
    """
    Admin status change.

    Allowed:
      - Submitted -> Processing
      - Processing -> Delivered
      - any -> Cancelled
    Any other transition raises 400.
    """
    return service.update_status(order_id, payload.status)


@router.patch(
    "/{order_id}",
    response_model=Order,
    dependencies=[Depends(require_admin)],
)
def edit_order(
    order_id: str,
    payload: AdminOrderEdit,
    service: OrderService = Depends(get_order_service),
):
    """
    Edit status and/or order date; all other fields are preserved.
    """
    return service.edit_order(order_id, payload)


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_order(order_id: str, service: OrderService = Depends(get_order_service)):
    service.delete_order(order_id)
    return None
