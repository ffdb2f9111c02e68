# tests/conftest.py
import os
import tempfile

# Settings are read at import time; point them at throwaway locations first.
_TEST_DATA_DIR = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DATA_DIR", _TEST_DATA_DIR)
os.environ.setdefault("TABLE_STORE_BACKEND", "sql")
os.environ.setdefault("API_BACKEND", "local")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from storefront.clients.deps import get_functions_api
from storefront.clients.local_functions_api import LocalFunctionsApi
from storefront.core.auth import ROLE_ADMIN, ROLE_CUSTOMER
from storefront.core.security import create_access_token
from storefront.database import build_engine, create_db_and_tables, get_session
from storefront.gateway.app import create_gateway_app
from storefront.gateway.deps import get_blobs
from storefront.main import app
from storefront.schemas.customer import Customer
from storefront.schemas.product import Product
from storefront.storage.blob_store import LocalBlobStore
from storefront.storage.json_store import reset_mirrors


@pytest.fixture(autouse=True)
def _fresh_json_mirrors():
    reset_mirrors()
    yield
    reset_mirrors()


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def blobs(tmp_path):
    return LocalBlobStore(tmp_path / "blobs", "http://testserver")


@pytest.fixture
def api(engine, blobs):
    """In-process API client over the SQL table store."""
    return LocalFunctionsApi(blobs, engine=engine)


@pytest.fixture
def json_api(tmp_path, blobs):
    """In-process API client over the JSON file fallback store."""
    return LocalFunctionsApi(blobs, data_dir=tmp_path / "tables")


def _session_override(engine):
    def override():
        with Session(engine) as session:
            yield session

    return override


@pytest.fixture
def client(engine, api):
    """Storefront app with the database and API client swapped for test doubles."""
    app.dependency_overrides[get_session] = _session_override(engine)
    app.dependency_overrides[get_functions_api] = lambda: api
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def gateway(engine, blobs):
    gateway_app = create_gateway_app()
    gateway_app.dependency_overrides[get_session] = _session_override(engine)
    gateway_app.dependency_overrides[get_blobs] = lambda: blobs
    return gateway_app


@pytest.fixture
def gateway_client(gateway):
    with TestClient(gateway) as c:
        yield c


# ----- data helpers -----


@pytest.fixture
def customer(api) -> Customer:
    created = api.create_customer(
        Customer(
            name="Alice",
            surname="Smith",
            username="alice",
            email="alice@example.com",
            shipping_address="1 Main Road",
        )
    )
    assert created is not None
    return created


@pytest.fixture
def customer_headers(customer) -> dict[str, str]:
    token = create_access_token(customer.username, ROLE_CUSTOMER, customer.row_key)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> dict[str, str]:
    token = create_access_token("admin", ROLE_ADMIN, "admin")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_product(api):
    def _make(name: str = "Widget", price: str = "10", stock: int = 10) -> Product:
        created = api.create_product(
            Product(product_name=name, description=f"{name} description", price=price, stock_available=stock)
        )
        assert created is not None
        return created

    return _make
