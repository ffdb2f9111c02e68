# storefront/gateway/services.py
"""
Entity gateway business logic.

Each service is a thin layer over an EntityRepository: it turns "missing"
into NotFoundError, applies create defaults and partial-update merges, and
leaves HTTP concerns to the routers. Services are shared by the gateway
routers and by the in-process API client (LocalFunctionsApi).
"""
from __future__ import annotations

import base64
import binascii
import logging
import re
import uuid
from decimal import Decimal
from pathlib import PurePath
from typing import Any, Generic, TypeVar

from storefront.core.errors import DuplicateEntityError, NotFoundError, ValidationFailure
from storefront.repositories.entity_repo import (
    CustomerRepository,
    EntityRepository,
    OrderRepository,
    ProductRepository,
)
from storefront.schemas.customer import Customer
from storefront.schemas.entity import CamelModel, TableEntityModel
from storefront.schemas.order import Order, OrderStatus, can_transition, parse_status
from storefront.schemas.product import Product
from storefront.schemas.upload import FileUploadRequest
from storefront.storage.blob_store import BlobStore
from storefront.storage.table_store import TableStore

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=TableEntityModel)

# Same naming rules as Azure blob containers.
CONTAINER_NAME_RE = re.compile(r"^[a-z0-9](?:[a-z0-9]|-(?=[a-z0-9])){2,62}$")

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB


class EntityGatewayService(Generic[M]):
    """
    list / get / create / update (merge) / delete for one entity type.
    """

    def __init__(self, repo: EntityRepository[M]):
        self.repo = repo

    @property
    def label(self) -> str:
        return self.repo.model.__name__

    def list(self, store: TableStore) -> list[M]:
        return self.repo.list(store)

    def get(self, store: TableStore, row_key: str) -> M:
        entity = self.repo.get(store, row_key)
        if entity is None:
            raise NotFoundError(f"{self.label} not found")
        return entity

    def create(self, store: TableStore, entity: M) -> M:
        created = self.repo.create(store, entity)
        logger.info("Created %s %s/%s", self.label, created.partition_key, created.row_key)
        return created

    def update(self, store: TableStore, row_key: str, payload: CamelModel) -> M:
        """
        Merge the fields present in `payload` into the stored entity.

        payload.eTag, when sent, must match the stored token; without it the
        write is unconditional against the version just read.
        """
        return self.apply_changes(store, row_key, self.changes_of(payload), payload)

    @staticmethod
    def changes_of(payload: CamelModel) -> dict[str, Any]:
        return payload.model_dump(exclude_unset=True, exclude={"etag", "partition_key"})

    def apply_changes(
        self,
        store: TableStore,
        row_key: str,
        changes: dict[str, Any],
        payload: CamelModel,
    ) -> M:
        return self.repo.update_fields(
            store,
            row_key,
            changes,
            partition_key=getattr(payload, "partition_key", None),
            expected_etag=getattr(payload, "etag", None),
        )

    def delete(self, store: TableStore, row_key: str) -> None:
        if not self.repo.delete(store, row_key):
            raise NotFoundError(f"{self.label} not found")
        logger.info("Deleted %s %s", self.label, row_key)


class CustomerGatewayService(EntityGatewayService[Customer]):
    repo: CustomerRepository

    def __init__(self, repo: CustomerRepository | None = None):
        super().__init__(repo or CustomerRepository())

    def get_by_username(self, store: TableStore, username: str) -> Customer:
        customer = self.repo.get_by_username(store, username)
        if customer is None:
            raise NotFoundError("Customer not found")
        return customer

    def create(self, store: TableStore, entity: Customer) -> Customer:
        if entity.username and self.repo.get_by_username(store, entity.username):
            raise DuplicateEntityError(f"Username '{entity.username}' is already taken")
        return super().create(store, entity)

    def update(self, store: TableStore, row_key: str, payload: CamelModel) -> Customer:
        username = getattr(payload, "username", None)
        if username:
            holder = self.repo.get_by_username(store, username)
            if holder is not None and holder.row_key != row_key:
                raise DuplicateEntityError(f"Username '{username}' is already taken")
        return super().update(store, row_key, payload)


class ProductGatewayService(EntityGatewayService[Product]):
    def __init__(self, repo: ProductRepository | None = None):
        super().__init__(repo or ProductRepository())


class OrderGatewayService(EntityGatewayService[Order]):
    repo: OrderRepository

    def __init__(self, repo: OrderRepository | None = None):
        super().__init__(repo or OrderRepository())

    def list_filtered(
        self,
        store: TableStore,
        customer_id: str | None = None,
        username: str | None = None,
    ) -> list[Order]:
        return self.repo.list_for_customer(store, customer_id=customer_id, username=username)

    def create(self, store: TableStore, entity: Order) -> Order:
        if not entity.order_items:
            raise ValidationFailure("An order needs at least one item")
        entity = entity.model_copy(update={"total_amount": entity.items_total})
        return super().create(store, entity)

    def update(self, store: TableStore, row_key: str, payload: CamelModel) -> Order:
        """
        Merge update for orders.

        totalAmount always follows the items: it is recomputed when
        orderItems is sent and ignored otherwise. A status change must be
        a move the status machine allows.
        """
        changes = self.changes_of(payload)
        changes.pop("total_amount", None)

        if "order_items" in changes:
            items = getattr(payload, "order_items", None)
            if not items:
                raise ValidationFailure("An order needs at least one item")
            changes["total_amount"] = sum((item.total_price for item in items), Decimal("0"))

        if "status" in changes:
            new_status = parse_status(changes["status"])
            if new_status is None:
                raise ValidationFailure(f"Unknown order status '{changes['status']}'")
            current = self.get(store, row_key)
            self._check_transition(current, new_status)
            changes["status"] = new_status.value

        return self.apply_changes(store, row_key, changes, payload)

    def set_status(self, store: TableStore, row_key: str, status: OrderStatus) -> Order:
        current = self.get(store, row_key)
        if current.status == status.value:
            return current
        self._check_transition(current, status)
        return self.repo.set_status(store, row_key, status.value, expected_etag=current.etag)

    @staticmethod
    def _check_transition(current: Order, new_status: OrderStatus) -> None:
        if current.status == new_status.value:
            return
        if not can_transition(current.status, new_status, as_admin=True):
            raise ValidationFailure(
                f"Cannot change status from '{current.status}' to '{new_status.value}'"
            )


class UploadService:
    """
    Stores base64 file uploads in the blob store.

    Blob name: "<uuid4>_<fileName>" (path components are stripped from
    the client-supplied file name).
    """

    def __init__(self, blobs: BlobStore):
        self.blobs = blobs

    @staticmethod
    def _decode(file_data: str) -> bytes:
        try:
            data = base64.b64decode(file_data, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationFailure("fileData is not valid base64")
        if not data:
            raise ValidationFailure("fileData is empty")
        if len(data) > MAX_UPLOAD_BYTES:
            raise ValidationFailure("File too large (max 10MB)")
        return data

    @staticmethod
    def blob_name_for(file_name: str) -> str:
        base = PurePath(file_name.replace("\\", "/")).name.strip()
        if not base or base in (".", ".."):
            raise ValidationFailure("fileName is invalid")
        return f"{uuid.uuid4()}_{base}"

    def upload(self, request: FileUploadRequest) -> str:
        container = request.container_name.strip().lower()
        if not CONTAINER_NAME_RE.match(container):
            raise ValidationFailure(f"Invalid container name '{request.container_name}'")

        data = self._decode(request.file_data)
        blob_name = self.blob_name_for(request.file_name)
        return self.blobs.upload(container, blob_name, data, request.content_type)
