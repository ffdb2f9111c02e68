# storefront/repositories/entity_repo.py
from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Generic, TypeVar

from pydantic import ValidationError

from storefront.core.errors import NotFoundError, ValidationFailure
from storefront.schemas.customer import CUSTOMER_PARTITION, Customer
from storefront.schemas.entity import KEY_FIELDS, TableEntityModel
from storefront.schemas.order import ORDER_PARTITION, Order, OrderItem
from storefront.schemas.product import PRODUCT_PARTITION, Product
from storefront.storage.table_store import ANY_ETAG, EntityRecord, TableStore

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=TableEntityModel)

CUSTOMERS_TABLE = "Customers"
PRODUCTS_TABLE = "Products"
ORDERS_TABLE = "Orders"


class EntityRepository(Generic[M]):
    """
    Data access layer for one entity type stored in a TableStore.

    Responsibilities:
      - Map DTOs <-> EntityRecords (camelCase property names)
      - Fill default partition and generated row key on create
      - No FastAPI, no HTTP, no business logic

    The store is passed per call, the same way a Session would be.
    """

    table_name: str
    default_partition: str
    model: type[M]

    # ----- mapping -----

    def to_properties(self, entity: M) -> dict[str, Any]:
        return entity.model_dump(mode="json", by_alias=True, exclude=set(KEY_FIELDS))

    def from_properties(self, properties: dict[str, Any]) -> dict[str, Any]:
        return dict(properties)

    def to_record(self, entity: M) -> EntityRecord:
        return EntityRecord(
            partition_key=entity.partition_key or "",
            row_key=entity.row_key or "",
            etag=entity.etag or "",
            timestamp=entity.timestamp,
            properties=self.to_properties(entity),
        )

    def from_record(self, record: EntityRecord) -> M:
        data = self.from_properties(record.properties)
        data.update(
            partitionKey=record.partition_key,
            rowKey=record.row_key,
            eTag=record.etag,
            timestamp=record.timestamp,
        )
        return self.model.model_validate(data)

    # ----- CRUD -----

    def with_default_keys(self, entity: M) -> M:
        """Fill in the default partition and a fresh uuid row key when absent."""
        updates: dict[str, str] = {}
        if not entity.partition_key:
            updates["partition_key"] = self.default_partition
        if not entity.row_key:
            updates["row_key"] = str(uuid.uuid4())
        return entity.model_copy(update=updates) if updates else entity

    def get(self, store: TableStore, row_key: str, partition_key: str | None = None) -> M | None:
        record = store.get(partition_key or self.default_partition, row_key)
        return self.from_record(record) if record else None

    def list(self, store: TableStore, partition_key: str | None = None) -> list[M]:
        return [self.from_record(r) for r in store.list(partition_key)]

    def create(self, store: TableStore, entity: M) -> M:
        entity = self.with_default_keys(entity)
        return self.from_record(store.put(self.to_record(entity)))

    def replace(self, store: TableStore, entity: M, expected_etag: str | None = None) -> M:
        """
        Conditionally replace the stored record.

        expected_etag defaults to the entity's own eTag; "*" skips the check.
        """
        etag = expected_etag or entity.etag or ANY_ETAG
        return self.from_record(store.update(self.to_record(entity), etag))

    def delete(self, store: TableStore, row_key: str, partition_key: str | None = None) -> bool:
        return store.delete(partition_key or self.default_partition, row_key)

    # ----- merge -----

    def merge(self, current: M, changes: dict[str, Any]) -> M:
        """
        Apply a partial update (snake_case field names) to a stored entity.
        Keys and eTag of `current` are kept.
        """
        data = current.model_dump()
        data.update(changes)
        try:
            return self.model.model_validate(data)
        except ValidationError as exc:
            raise ValidationFailure(str(exc)) from exc

    def property_names(self, field_name: str) -> list[str]:
        """Stored property name(s) backing a model field."""
        field = self.model.model_fields[field_name]
        return [field.alias or field_name]

    def update_fields(
        self,
        store: TableStore,
        row_key: str,
        changes: dict[str, Any],
        partition_key: str | None = None,
        expected_etag: str | None = None,
    ) -> M:
        """
        Merge `changes` into the stored record and write it back.

        Only the properties backing the changed fields are rewritten; every
        other stored property keeps its exact stored value. Without an
        expected eTag the token just read is used.

        Raises:
            NotFoundError: no such record.
            VersionConflictError: expected eTag is stale.
            ValidationFailure: merged entity is invalid.
        """
        partition_key = partition_key or self.default_partition
        record = store.get(partition_key, row_key)
        if record is None:
            raise NotFoundError(f"{self.model.__name__} {row_key} not found")

        merged = self.merge(self.from_record(record), changes)
        rendered = self.to_properties(merged)

        properties = dict(record.properties)
        for field_name in changes:
            for name in self.property_names(field_name):
                properties[name] = rendered[name]

        updated = record.model_copy(update={"properties": properties})
        return self.from_record(store.update(updated, expected_etag or record.etag))


class CustomerRepository(EntityRepository[Customer]):
    table_name = CUSTOMERS_TABLE
    default_partition = CUSTOMER_PARTITION
    model = Customer

    def get_by_username(self, store: TableStore, username: str) -> Customer | None:
        for customer in self.list(store):
            if customer.username == username:
                return customer
        return None


class ProductRepository(EntityRepository[Product]):
    table_name = PRODUCTS_TABLE
    default_partition = PRODUCT_PARTITION
    model = Product


class OrderRepository(EntityRepository[Order]):
    """
    Orders keep their line items in one string property, orderItemsJson.
    """

    table_name = ORDERS_TABLE
    default_partition = ORDER_PARTITION
    model = Order

    ITEMS_PROPERTY = "orderItemsJson"

    def to_properties(self, entity: Order) -> dict[str, Any]:
        props = super().to_properties(entity)
        items = props.pop("orderItems", [])
        props[self.ITEMS_PROPERTY] = json.dumps(items)
        return props

    def from_properties(self, properties: dict[str, Any]) -> dict[str, Any]:
        data = dict(properties)
        raw = data.pop(self.ITEMS_PROPERTY, None)
        data["orderItems"] = self.parse_items(raw)
        return data

    @staticmethod
    def parse_items(raw: str | None) -> list[OrderItem]:
        if not raw:
            return []
        try:
            return [OrderItem.model_validate(item) for item in json.loads(raw)]
        except (ValueError, TypeError, ValidationError):
            logger.warning("Unreadable orderItemsJson, treating order as empty: %r", raw[:200])
            return []

    def list_for_customer(
        self,
        store: TableStore,
        customer_id: str | None = None,
        username: str | None = None,
    ) -> list[Order]:
        orders = self.list(store)
        if customer_id:
            orders = [o for o in orders if o.customer_id == customer_id]
        if username:
            orders = [o for o in orders if o.username == username]
        return orders

    def property_names(self, field_name: str) -> list[str]:
        if field_name == "order_items":
            return [self.ITEMS_PROPERTY]
        return super().property_names(field_name)

    def set_status(
        self,
        store: TableStore,
        row_key: str,
        status: str,
        expected_etag: str | None = None,
    ) -> Order:
        """
        Rewrite only the status property; orderItemsJson and every other
        stored property are written back unchanged.
        """
        return self.update_fields(store, row_key, {"status": status}, expected_etag=expected_etag)
