# storefront/gateway/deps.py
"""
FastAPI dependencies that hand the gateway routers a TableStore per
entity table and the configured BlobStore.

TABLE_STORE_BACKEND:
  - "sql":  SqlTableStore on the request's Session (default)
  - "json": JsonFileTableStore under DATA_DIR
"""
from fastapi import Depends
from sqlmodel import Session

from storefront.core.config import get_settings
from storefront.database import get_session
from storefront.repositories.entity_repo import (
    CUSTOMERS_TABLE,
    ORDERS_TABLE,
    PRODUCTS_TABLE,
)
from storefront.storage.blob_store import BlobStore, get_blob_store
from storefront.storage.json_store import JsonFileTableStore
from storefront.storage.table_store import SqlTableStore, TableStore


def make_table_store(session: Session, table_name: str) -> TableStore:
    settings = get_settings()
    if settings.TABLE_STORE_BACKEND == "json":
        return JsonFileTableStore(settings.DATA_DIR, table_name)
    return SqlTableStore(session, table_name)


def get_customer_store(session: Session = Depends(get_session)) -> TableStore:
    return make_table_store(session, CUSTOMERS_TABLE)


def get_product_store(session: Session = Depends(get_session)) -> TableStore:
    return make_table_store(session, PRODUCTS_TABLE)


def get_order_store(session: Session = Depends(get_session)) -> TableStore:
    return make_table_store(session, ORDERS_TABLE)


def get_blobs() -> BlobStore:
    return get_blob_store()
