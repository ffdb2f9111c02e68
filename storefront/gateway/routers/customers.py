# storefront/gateway/routers/customers.py
from fastapi import APIRouter, Depends, status

from storefront.gateway.deps import get_customer_store
from storefront.gateway.services import CustomerGatewayService
from storefront.schemas.customer import Customer, CustomerUpdate
from storefront.schemas.envelope import ApiResponse
from storefront.storage.table_store import TableStore

router = APIRouter(prefix="/customers", tags=["Gateway: Customers"])

service = CustomerGatewayService()


@router.get("", response_model=ApiResponse[list[Customer]])
def list_customers(store: TableStore = Depends(get_customer_store)):
    customers = service.list(store)
    return ApiResponse(success=True, data=customers, message=f"Retrieved {len(customers)} customers")


@router.post(
    "",
    response_model=ApiResponse[Customer],
    status_code=status.HTTP_201_CREATED,
)
def create_customer(payload: Customer, store: TableStore = Depends(get_customer_store)):
    """
    Create a customer.

    - partitionKey defaults to "CUSTOMER", rowKey to a new uuid.
    - Caller-supplied keys are used as given.
    """
    return ApiResponse(success=True, data=service.create(store, payload), message="Customer created")


@router.get("/by-username/{username}", response_model=ApiResponse[Customer])
def get_customer_by_username(username: str, store: TableStore = Depends(get_customer_store)):
    return ApiResponse(success=True, data=service.get_by_username(store, username))


@router.get("/{customer_id}", response_model=ApiResponse[Customer])
def get_customer(customer_id: str, store: TableStore = Depends(get_customer_store)):
    return ApiResponse(success=True, data=service.get(store, customer_id))


@router.put("/{customer_id}", response_model=ApiResponse[Customer])
def update_customer(
    customer_id: str,
    payload: CustomerUpdate,
    store: TableStore = Depends(get_customer_store),
):
    """
    Merge the sent fields into the stored customer.

    - eTag in the body is checked (409 when stale).
    """
    return ApiResponse(
        success=True,
        data=service.update(store, customer_id, payload),
        message="Customer updated",
    )


@router.delete("/{customer_id}", response_model=ApiResponse[None])
def delete_customer(customer_id: str, store: TableStore = Depends(get_customer_store)):
    service.delete(store, customer_id)
    return ApiResponse(success=True, message="Customer deleted")
