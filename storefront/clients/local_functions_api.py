# storefront/clients/local_functions_api.py
"""
In-process FunctionsApi: runs the gateway services directly.

Store selection:
  - engine given   -> SqlTableStore on a short-lived Session per call
  - otherwise      -> JsonFileTableStore under data_dir (local fallback store),
                      optionally seeded with sample products on first run
"""
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from decimal import Decimal
from pathlib import Path
from typing import Any

from sqlalchemy.engine import Engine
from sqlmodel import Session

from storefront.clients.base import EntityKind, FunctionsApi
from storefront.core.errors import ErrorKind, StoreError
from storefront.core.result import ApiResult, Err, Ok
from storefront.gateway.services import (
    CustomerGatewayService,
    EntityGatewayService,
    OrderGatewayService,
    ProductGatewayService,
    UploadService,
)
from storefront.repositories.entity_repo import (
    CUSTOMERS_TABLE,
    ORDERS_TABLE,
    PRODUCTS_TABLE,
)
from storefront.schemas.order import OrderStatus
from storefront.schemas.product import Product
from storefront.schemas.upload import FileUploadRequest
from storefront.storage.blob_store import BlobStore
from storefront.storage.json_store import JsonFileTableStore
from storefront.storage.table_store import SqlTableStore, TableStore

logger = logging.getLogger(__name__)

TABLES: dict[EntityKind, str] = {
    EntityKind.CUSTOMERS: CUSTOMERS_TABLE,
    EntityKind.PRODUCTS: PRODUCTS_TABLE,
    EntityKind.ORDERS: ORDERS_TABLE,
}


SAMPLE_PRODUCTS = (
    Product(
        product_name="Wireless Headphones",
        description="High-quality wireless headphones with noise cancellation",
        price=Decimal("99.99"),
        stock_available=25,
    ),
    Product(
        product_name="Smartphone",
        description="Latest smartphone with advanced features",
        price=Decimal("699.99"),
        stock_available=15,
    ),
)


class LocalFunctionsApi(FunctionsApi):
    def __init__(
        self,
        blobs: BlobStore,
        data_dir: str | Path | None = None,
        engine: Engine | None = None,
        seed_sample_products: bool = False,
    ):
        if engine is None and data_dir is None:
            raise ValueError("LocalFunctionsApi needs a data_dir or an engine")
        self.blobs = blobs
        self.data_dir = data_dir
        self.engine = engine
        self.customers = CustomerGatewayService()
        self.products = ProductGatewayService()
        self.orders = OrderGatewayService()
        self.uploads = UploadService(blobs)
        if seed_sample_products and engine is None:
            self._seed_products()

    def _seed_products(self) -> None:
        """Write the sample catalogue when the JSON store has no products file yet."""
        store = JsonFileTableStore(self.data_dir, PRODUCTS_TABLE)
        if store.path.exists():
            return
        for product in SAMPLE_PRODUCTS:
            self.products.create(store, product.model_copy())
        logger.info("Seeded %d sample products into %s", len(SAMPLE_PRODUCTS), store.path)

    # ----- plumbing -----

    @contextmanager
    def _store(self, kind: EntityKind) -> Iterator[TableStore]:
        table_name = TABLES[kind]
        if self.engine is None:
            yield JsonFileTableStore(self.data_dir, table_name)
            return
        with Session(self.engine) as session:
            yield SqlTableStore(session, table_name)

    def _service(self, kind: EntityKind) -> EntityGatewayService:
        return {
            EntityKind.CUSTOMERS: self.customers,
            EntityKind.PRODUCTS: self.products,
            EntityKind.ORDERS: self.orders,
        }[kind]

    @staticmethod
    def _run(action: str, fn: Callable[[], Any]) -> ApiResult[Any]:
        try:
            return Ok(fn())
        except StoreError as exc:
            return Err(exc.kind, exc.message)
        except Exception:
            logger.exception("Local gateway call '%s' failed", action)
            return Err(ErrorKind.TRANSPORT, f"{action} failed")

    def _with_store(
        self,
        kind: EntityKind,
        action: str,
        op: Callable[[TableStore], Any],
    ) -> ApiResult[Any]:
        def call():
            with self._store(kind) as store:
                return op(store)

        return self._run(action, call)

    # ----- primitives -----

    def _list(self, kind: EntityKind, params: dict[str, str] | None = None) -> ApiResult[list]:
        if kind is EntityKind.ORDERS and params:
            return self._with_store(
                kind,
                "list orders",
                lambda store: self.orders.list_filtered(
                    store,
                    customer_id=params.get("customerId"),
                    username=params.get("username"),
                ),
            )
        return self._with_store(kind, f"list {kind.value}", self._service(kind).list)

    def _get(self, kind: EntityKind, row_key: str) -> ApiResult[Any]:
        return self._with_store(
            kind, f"get {kind.value}", lambda store: self._service(kind).get(store, row_key)
        )

    def _get_customer_by_username(self, username: str) -> ApiResult[Any]:
        return self._with_store(
            EntityKind.CUSTOMERS,
            "get customer by username",
            lambda store: self.customers.get_by_username(store, username),
        )

    def _create(self, kind: EntityKind, entity: Any) -> ApiResult[Any]:
        return self._with_store(
            kind, f"create {kind.value}", lambda store: self._service(kind).create(store, entity)
        )

    def _update(self, kind: EntityKind, row_key: str, changes: Any) -> ApiResult[Any]:
        return self._with_store(
            kind,
            f"update {kind.value}",
            lambda store: self._service(kind).update(store, row_key, changes),
        )

    def _set_order_status(self, order_id: str, status: OrderStatus) -> ApiResult[Any]:
        return self._with_store(
            EntityKind.ORDERS,
            "set order status",
            lambda store: self.orders.set_status(store, order_id, status),
        )

    def _delete(self, kind: EntityKind, row_key: str) -> ApiResult[None]:
        return self._with_store(
            kind, f"delete {kind.value}", lambda store: self._service(kind).delete(store, row_key)
        )

    def _upload(self, request: FileUploadRequest) -> ApiResult[str]:
        return self._run("upload", lambda: self.uploads.upload(request))
