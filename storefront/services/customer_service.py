# storefront/services/customer_service.py
import logging

from fastapi import HTTPException, status

from storefront.clients.base import FunctionsApi
from storefront.core.auth import Identity
from storefront.schemas.customer import (
    CUSTOMER_PARTITION,
    Customer,
    CustomerCreate,
    CustomerProfileUpdate,
    CustomerUpdate,
)

logger = logging.getLogger(__name__)


class CustomerService:
    """
    Customer records as seen by the storefront.

    - customers read and edit their own profile (username is fixed)
    - admins list / create / update / delete any customer
    """

    def __init__(self, api: FunctionsApi):
        self.api = api

    def _get_or_404(self, customer_id: str) -> Customer:
        customer = self.api.get_customer(customer_id)
        if customer is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Customer not found",
            )
        return customer

    def _save(self, customer_id: str, changes: CustomerUpdate) -> Customer:
        if self.api.update_customer(customer_id, changes):
            return self._get_or_404(customer_id)

        latest = self.api.get_customer(customer_id)
        if latest is not None and latest.etag != changes.etag:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="The customer was changed by someone else. Reload and try again.",
            )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not update the customer. Please try again.",
        )

    # ----- own profile -----

    def get_my_profile(self, identity: Identity) -> Customer:
        customer = self.api.get_customer(identity.customer_id)
        if customer is None:
            customer = self.api.get_customer_by_username(identity.username)
        if customer is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Customer profile not found",
            )
        return customer

    def update_my_profile(self, identity: Identity, payload: CustomerProfileUpdate) -> Customer:
        current = self.get_my_profile(identity)
        data = payload.model_dump(exclude_unset=True)
        if not data:
            return current
        if "email" in data:
            data["email"] = str(data["email"])
        changes = CustomerUpdate(etag=current.etag, **data)
        return self._save(current.row_key, changes)

    # ----- admin -----

    def list_customers(self) -> list[Customer]:
        return self.api.list_customers()

    def get_customer(self, customer_id: str) -> Customer:
        return self._get_or_404(customer_id)

    def create_customer(self, payload: CustomerCreate) -> Customer:
        if self.api.get_customer_by_username(payload.username) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Username already exists.",
            )
        created = self.api.create_customer(
            Customer(
                partition_key=CUSTOMER_PARTITION,
                name=payload.name,
                surname=payload.surname,
                username=payload.username,
                email=str(payload.email),
                shipping_address=payload.shipping_address,
            )
        )
        if created is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Could not create the customer. Please try again.",
            )
        logger.info("Customer %s created by admin", created.row_key)
        return created

    def update_customer(self, customer_id: str, changes: CustomerUpdate) -> Customer:
        current = self._get_or_404(customer_id)
        if changes.username and changes.username != current.username:
            holder = self.api.get_customer_by_username(changes.username)
            if holder is not None and holder.row_key != customer_id:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Username already exists.",
                )
        if changes.etag is None:
            changes = changes.model_copy(update={"etag": current.etag})
        return self._save(customer_id, changes)

    def delete_customer(self, customer_id: str) -> None:
        self._get_or_404(customer_id)
        if not self.api.delete_customer(customer_id):
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Could not delete the customer. Please try again.",
            )
        logger.info("Customer %s deleted by admin", customer_id)
