# storefront/clients/base.py
"""
FunctionsApi: the storefront's view of the entity gateway.

Subclasses implement the transport primitives (underscore methods), each
returning an ApiResult (Ok / Err). The public methods defined here turn
those results into the values the storefront works with:

  - reads   -> list / entity, or [] / None on any failure
  - creates -> the created entity, or None on failure
  - updates, deletes -> True / False

Failures are logged here and never raised to the caller.
"""
import base64
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import ValidationError

from storefront.core.errors import ErrorKind
from storefront.core.result import ApiResult, Err, Ok, succeeded, unwrap_list, unwrap_one
from storefront.schemas.customer import Customer, CustomerUpdate
from storefront.schemas.order import Order, OrderStatus, OrderUpdate
from storefront.schemas.product import Product, ProductUpdate
from storefront.schemas.upload import (
    PAYMENT_PROOFS_CONTAINER,
    PRODUCT_IMAGES_CONTAINER,
    FileUploadRequest,
)

logger = logging.getLogger(__name__)


class EntityKind(str, Enum):
    CUSTOMERS = "customers"
    PRODUCTS = "products"
    ORDERS = "orders"


ENTITY_MODELS: dict[EntityKind, type] = {
    EntityKind.CUSTOMERS: Customer,
    EntityKind.PRODUCTS: Product,
    EntityKind.ORDERS: Order,
}


@dataclass(frozen=True)
class FileContent:
    """An uploaded file held in memory."""

    file_name: str
    content_type: str
    data: bytes


class FunctionsApi(ABC):
    # ----- transport primitives -----

    @abstractmethod
    def _list(self, kind: EntityKind, params: dict[str, str] | None = None) -> ApiResult[list]: ...

    @abstractmethod
    def _get(self, kind: EntityKind, row_key: str) -> ApiResult[Any]: ...

    @abstractmethod
    def _get_customer_by_username(self, username: str) -> ApiResult[Customer]: ...

    @abstractmethod
    def _create(self, kind: EntityKind, entity: Any) -> ApiResult[Any]: ...

    @abstractmethod
    def _update(self, kind: EntityKind, row_key: str, changes: Any) -> ApiResult[Any]: ...

    @abstractmethod
    def _set_order_status(self, order_id: str, status: OrderStatus) -> ApiResult[Order]: ...

    @abstractmethod
    def _delete(self, kind: EntityKind, row_key: str) -> ApiResult[None]: ...

    @abstractmethod
    def _upload(self, request: FileUploadRequest) -> ApiResult[str]: ...

    # ----- helpers -----

    @staticmethod
    def _logged(result: ApiResult, action: str) -> ApiResult:
        if isinstance(result, Err):
            if result.kind == ErrorKind.NOT_FOUND:
                logger.debug("%s: not found (%s)", action, result.message)
            else:
                logger.warning("%s failed [%s]: %s", action, result.kind.value, result.message)
        return result

    def _read_list(self, kind: EntityKind, params: dict[str, str] | None = None) -> list:
        return unwrap_list(self._logged(self._list(kind, params), f"list {kind.value}"))

    def _read_one(self, kind: EntityKind, row_key: str):
        if not row_key:
            return None
        return unwrap_one(self._logged(self._get(kind, row_key), f"get {kind.value}/{row_key}"))

    def _write_new(self, kind: EntityKind, entity: Any):
        return unwrap_one(self._logged(self._create(kind, entity), f"create {kind.value}"))

    def _write_changes(self, kind: EntityKind, row_key: str, changes: Any) -> bool:
        return succeeded(
            self._logged(self._update(kind, row_key, changes), f"update {kind.value}/{row_key}")
        )

    def _remove(self, kind: EntityKind, row_key: str) -> bool:
        return succeeded(self._logged(self._delete(kind, row_key), f"delete {kind.value}/{row_key}"))

    # ----- customers -----

    def list_customers(self) -> list[Customer]:
        return self._read_list(EntityKind.CUSTOMERS)

    def get_customer(self, customer_id: str) -> Customer | None:
        return self._read_one(EntityKind.CUSTOMERS, customer_id)

    def get_customer_by_username(self, username: str) -> Customer | None:
        if not username:
            return None
        result = self._get_customer_by_username(username)
        return unwrap_one(self._logged(result, f"get customer by username {username}"))

    def create_customer(self, customer: Customer) -> Customer | None:
        return self._write_new(EntityKind.CUSTOMERS, customer)

    def update_customer(self, customer_id: str, changes: CustomerUpdate) -> bool:
        return self._write_changes(EntityKind.CUSTOMERS, customer_id, changes)

    def delete_customer(self, customer_id: str) -> bool:
        return self._remove(EntityKind.CUSTOMERS, customer_id)

    # ----- products -----

    def list_products(self) -> list[Product]:
        return self._read_list(EntityKind.PRODUCTS)

    def get_product(self, product_id: str) -> Product | None:
        return self._read_one(EntityKind.PRODUCTS, product_id)

    def create_product(self, product: Product, image: FileContent | None = None) -> Product | None:
        """
        Create a product, uploading `image` first when given.
        A failed image upload fails the whole create.
        """
        if image is not None:
            url = self.upload_file(image, PRODUCT_IMAGES_CONTAINER)
            if url is None:
                return None
            product = product.model_copy(update={"product_image_url": url})
        return self._write_new(EntityKind.PRODUCTS, product)

    def update_product(
        self,
        product_id: str,
        changes: ProductUpdate,
        image: FileContent | None = None,
    ) -> bool:
        if image is not None:
            url = self.upload_file(image, PRODUCT_IMAGES_CONTAINER)
            if url is None:
                return False
            changes = changes.model_copy(update={"product_image_url": url})
        return self._write_changes(EntityKind.PRODUCTS, product_id, changes)

    def delete_product(self, product_id: str) -> bool:
        return self._remove(EntityKind.PRODUCTS, product_id)

    # ----- orders -----

    def list_orders(self) -> list[Order]:
        return self._read_list(EntityKind.ORDERS)

    def get_order(self, order_id: str) -> Order | None:
        return self._read_one(EntityKind.ORDERS, order_id)

    def list_orders_for_customer(
        self,
        customer_id: str | None = None,
        username: str | None = None,
    ) -> list[Order]:
        params: dict[str, str] = {}
        if customer_id:
            params["customerId"] = customer_id
        if username:
            params["username"] = username
        if not params:
            return []
        return self._read_list(EntityKind.ORDERS, params)

    def create_order(self, order: Order) -> Order | None:
        return self._write_new(EntityKind.ORDERS, order)

    def update_order(self, order_id: str, changes: OrderUpdate) -> bool:
        return self._write_changes(EntityKind.ORDERS, order_id, changes)

    def update_order_status(self, order_id: str, status: OrderStatus) -> bool:
        result = self._set_order_status(order_id, status)
        return succeeded(self._logged(result, f"set status of order {order_id}"))

    def delete_order(self, order_id: str) -> bool:
        return self._remove(EntityKind.ORDERS, order_id)

    # ----- uploads -----

    def upload_file(self, file: FileContent, container_name: str) -> str | None:
        """Upload a file to a blob container; returns its URL or None."""
        request = FileUploadRequest(
            file_name=file.file_name,
            container_name=container_name,
            content_type=file.content_type or "application/octet-stream",
            file_data=base64.b64encode(file.data).decode("ascii"),
        )
        return unwrap_one(self._logged(self._upload(request), f"upload {file.file_name}"))

    def upload_proof_of_payment(self, order_id: str, file: FileContent) -> str | None:
        named = FileContent(
            file_name=f"order-{order_id}_{file.file_name}",
            content_type=file.content_type,
            data=file.data,
        )
        return self.upload_file(named, PAYMENT_PROOFS_CONTAINER)


def parse_entity(kind: EntityKind, data: Any) -> ApiResult[Any]:
    """Validate gateway JSON into the entity model for `kind`."""
    model = ENTITY_MODELS[kind]
    try:
        if isinstance(data, list):
            return Ok([model.model_validate(item) for item in data])
        return Ok(model.model_validate(data))
    except ValidationError as exc:
        return Err(ErrorKind.TRANSPORT, f"Unreadable {kind.value} payload: {exc.error_count()} errors")
