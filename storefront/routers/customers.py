# storefront/routers/customers.py
from fastapi import APIRouter, Depends, status

from storefront.clients.base import FunctionsApi
from storefront.clients.deps import get_functions_api
from storefront.core.auth import Identity, require_admin, require_customer
from storefront.schemas.customer import (
    Customer,
    CustomerCreate,
    CustomerProfileUpdate,
    CustomerUpdate,
)
from storefront.services.customer_service import CustomerService

router = APIRouter(prefix="/customers", tags=["Customers"])


def get_customer_service(api: FunctionsApi = Depends(get_functions_api)) -> CustomerService:
    return CustomerService(api)


# -------- Own profile --------


@router.get("/me", response_model=Customer)
def get_my_profile(
    identity: Identity = Depends(require_customer),
    service: CustomerService = Depends(get_customer_service),
):
    return service.get_my_profile(identity)


@router.patch("/me", response_model=Customer)
def update_my_profile(
    payload: CustomerProfileUpdate,
    identity: Identity = Depends(require_customer),
    service: CustomerService = Depends(get_customer_service),
):
    """
    Update name, surname, email or shipping address.
    """
    return service.update_my_profile(identity, payload)


# -------- Admin --------


@router.get(
    "",
    response_model=list[Customer],
    dependencies=[Depends(require_admin)],
)
def list_customers(service: CustomerService = Depends(get_customer_service)):
    return service.list_customers()


@router.post(
    "",
    response_model=Customer,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_customer(
    payload: CustomerCreate,
    service: CustomerService = Depends(get_customer_service),
):
    return service.create_customer(payload)


@router.get(
    "/{customer_id}",
    response_model=Customer,
    dependencies=[Depends(require_admin)],
)
def get_customer(customer_id: str, service: CustomerService = Depends(get_customer_service)):
    return service.get_customer(customer_id)


@router.put(
    "/{customer_id}",
    response_model=Customer,
    dependencies=[Depends(require_admin)],
)
def update_customer(
    customer_id: str,
    payload: CustomerUpdate,
    service: CustomerService = Depends(get_customer_service),
):
    return service.update_customer(customer_id, payload)


@router.delete(
    "/{customer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_customer(customer_id: str, service: CustomerService = Depends(get_customer_service)):
    service.delete_customer(customer_id)
    return None
