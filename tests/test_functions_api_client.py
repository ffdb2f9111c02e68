# tests/test_functions_api_client.py
import httpx
import pytest
from fastapi.testclient import TestClient

from storefront.clients.base import FileContent
from storefront.clients.functions_api_client import FunctionsApiClient
from storefront.schemas.customer import Customer, CustomerUpdate
from storefront.schemas.order import Order, OrderItem, OrderStatus
from storefront.schemas.product import Product, ProductUpdate


@pytest.fixture
def remote(gateway):
    with TestClient(gateway) as http:
        yield FunctionsApiClient(client=http)


def _unreachable_client() -> FunctionsApiClient:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    http = httpx.Client(base_url="http://gateway.invalid/api/", transport=httpx.MockTransport(handler))
    return FunctionsApiClient(client=http)


def test_requires_base_url_or_client():
    with pytest.raises(ValueError):
        FunctionsApiClient()


def test_customer_crud_over_http(remote):
    created = remote.create_customer(Customer(name="Dana", username="dana", email="d@x.com"))
    assert created is not None
    assert created.partition_key == "CUSTOMER"

    assert remote.get_customer(created.row_key).username == "dana"
    assert remote.get_customer_by_username("dana").row_key == created.row_key
    assert [c.username for c in remote.list_customers()] == ["dana"]

    assert remote.update_customer(created.row_key, CustomerUpdate(surname="Jones")) is True
    refreshed = remote.get_customer(created.row_key)
    assert refreshed.surname == "Jones"
    assert refreshed.email == "d@x.com"

    assert remote.delete_customer(created.row_key) is True
    assert remote.get_customer(created.row_key) is None


def test_duplicate_username_create_returns_none(remote):
    assert remote.create_customer(Customer(username="dana")) is not None
    assert remote.create_customer(Customer(username="dana")) is None


def test_stale_etag_update_returns_false(remote):
    product = remote.create_product(Product(product_name="Mug", price="4.50", stock_available=3))
    assert remote.update_product(product.row_key, ProductUpdate(etag=product.etag, stock_available=2))
    assert remote.update_product(product.row_key, ProductUpdate(etag=product.etag, stock_available=1)) is False
    assert remote.get_product(product.row_key).stock_available == 2


def test_update_missing_returns_false(remote):
    assert remote.update_customer("ghost", CustomerUpdate(name="X")) is False
    assert remote.delete_product("ghost") is False


def test_product_image_upload(remote):
    image = FileContent(file_name="mug.png", content_type="image/png", data=b"png-bytes")
    product = remote.create_product(Product(product_name="Mug", price="4.50"), image=image)
    assert product is not None
    assert "/blobs/product-images/" in product.product_image_url
    assert product.product_image_url.endswith("_mug.png")


def test_order_flow_over_http(remote):
    order = remote.create_order(
        Order(
            customer_id="c-9",
            username="dana",
            total_amount="20",
            order_items=[OrderItem(product_id="p-1", product_name="Mug", quantity=2, unit_price="10")],
        )
    )
    assert order is not None
    assert order.quantity == 2

    assert [o.row_key for o in remote.list_orders_for_customer(customer_id="c-9")] == [order.row_key]
    assert remote.list_orders_for_customer(customer_id="someone-else") == []

    assert remote.update_order_status(order.row_key, OrderStatus.PROCESSING) is True
    updated = remote.get_order(order.row_key)
    assert updated.status == "Processing"
    assert updated.order_items == order.order_items


def test_proof_of_payment_is_named_after_order(remote):
    proof = FileContent(file_name="receipt.pdf", content_type="application/pdf", data=b"%PDF")
    url = remote.upload_proof_of_payment("o-1", proof)
    assert url is not None
    assert "/blobs/payment-proofs/" in url
    assert url.endswith("_order-o-1_receipt.pdf")


def test_unreachable_gateway_degrades():
    api = _unreachable_client()

    assert api.list_products() == []
    assert api.list_orders_for_customer(username="dana") == []
    assert api.get_product("p-1") is None
    assert api.get_customer_by_username("dana") is None
    assert api.create_customer(Customer(username="dana")) is None
    assert api.update_customer("c-1", CustomerUpdate(name="X")) is False
    assert api.update_order_status("o-1", OrderStatus.CANCELLED) is False
    assert api.delete_order("o-1") is False
    assert api.upload_file(FileContent("a.txt", "text/plain", b"a"), "docs") is None


def test_non_envelope_response_is_a_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"rowKey": "p-1", "productName": "Mug"})

    http = httpx.Client(base_url="http://gateway.invalid/api/", transport=httpx.MockTransport(handler))
    api = FunctionsApiClient(client=http)

    assert api.get_product("p-1") is None
    assert api.list_products() == []


def test_non_json_response_is_a_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>Bad gateway</html>")

    http = httpx.Client(base_url="http://gateway.invalid/api/", transport=httpx.MockTransport(handler))
    api = FunctionsApiClient(client=http)

    assert api.get_product("p-1") is None
    assert api.delete_product("p-1") is False
