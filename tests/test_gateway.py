# tests/test_gateway.py
import base64
import uuid

from sqlmodel import Session

from storefront.repositories.entity_repo import ORDERS_TABLE
from storefront.storage.table_store import SqlTableStore


def _order_body(**overrides):
    body = {
        "customerId": "c-1",
        "username": "alice",
        "shippingAddress": "1 Main Road",
        "customerEmail": "alice@example.com",
        "totalAmount": 50,
        "orderItems": [
            {"productId": "p-1", "productName": "Lamp", "quantity": 5, "unitPrice": 10},
        ],
    }
    body.update(overrides)
    return body


def _raw_order(engine, order_id: str):
    with Session(engine) as session:
        return SqlTableStore(session, ORDERS_TABLE).get("ORDERS", order_id)


def test_health(gateway_client):
    r = gateway_client.get("/health")
    assert r.status_code == 200
    assert r.json()["success"] is True


def test_create_customer_fills_default_keys(gateway_client):
    r = gateway_client.post(
        "/customers",
        json={"name": "Alice", "surname": "Smith", "username": "alice", "email": "a@x.com"},
    )
    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    data = body["data"]
    assert data["partitionKey"] == "CUSTOMER"
    uuid.UUID(data["rowKey"])
    assert data["eTag"]


def test_create_keeps_caller_supplied_keys(gateway_client):
    r = gateway_client.post(
        "/products",
        json={"partitionKey": "SPECIAL", "rowKey": "fixed-id", "productName": "Lamp", "price": 3},
    )
    assert r.status_code == 201
    assert r.json()["data"]["partitionKey"] == "SPECIAL"
    assert r.json()["data"]["rowKey"] == "fixed-id"


def test_get_missing_entity_is_404_envelope(gateway_client):
    r = gateway_client.get("/products/does-not-exist")
    assert r.status_code == 404
    body = r.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["message"]


def test_invalid_body_is_400_envelope(gateway_client):
    r = gateway_client.post("/products", json={"productName": "Lamp", "price": -1})
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_customer_by_username(gateway_client):
    gateway_client.post("/customers", json={"username": "bob", "name": "Bob"})
    r = gateway_client.get("/customers/by-username/bob")
    assert r.status_code == 200
    assert r.json()["data"]["name"] == "Bob"

    assert gateway_client.get("/customers/by-username/nobody").status_code == 404


def test_duplicate_username_is_conflict(gateway_client):
    gateway_client.post("/customers", json={"username": "bob"})
    r = gateway_client.post("/customers", json={"username": "bob"})
    assert r.status_code == 409
    assert r.json()["success"] is False


def test_put_username_taken_by_another_customer_is_409(gateway_client):
    gateway_client.post("/customers", json={"username": "alice"})
    bob = gateway_client.post("/customers", json={"username": "bob"}).json()["data"]

    r = gateway_client.put(f"/customers/{bob['rowKey']}", json={"username": "alice"})
    assert r.status_code == 409
    assert r.json()["success"] is False
    assert gateway_client.get(f"/customers/{bob['rowKey']}").json()["data"]["username"] == "bob"

    # keeping your own username is fine
    r = gateway_client.put(f"/customers/{bob['rowKey']}", json={"username": "bob", "name": "Bob"})
    assert r.status_code == 200


def test_put_merges_and_read_after_write(gateway_client):
    created = gateway_client.post(
        "/products",
        json={"productName": "Lamp", "description": "Bright", "price": 12.5, "stockAvailable": 4},
    ).json()["data"]

    r = gateway_client.put(f"/products/{created['rowKey']}", json={"stockAvailable": 9})
    assert r.status_code == 200

    fetched = gateway_client.get(f"/products/{created['rowKey']}").json()["data"]
    assert fetched["stockAvailable"] == 9
    assert fetched["description"] == "Bright"
    assert fetched["price"] == 12.5
    assert fetched["eTag"] != created["eTag"]


def test_put_with_stale_etag_is_409(gateway_client):
    created = gateway_client.post("/products", json={"productName": "Lamp"}).json()["data"]
    row_key, first_etag = created["rowKey"], created["eTag"]

    ok = gateway_client.put(f"/products/{row_key}", json={"eTag": first_etag, "price": 5})
    assert ok.status_code == 200

    stale = gateway_client.put(f"/products/{row_key}", json={"eTag": first_etag, "price": 6})
    assert stale.status_code == 409
    assert stale.json()["success"] is False

    assert gateway_client.get(f"/products/{row_key}").json()["data"]["price"] == 5


def test_put_missing_entity_is_404(gateway_client):
    r = gateway_client.put("/customers/ghost", json={"name": "X"})
    assert r.status_code == 404


def test_delete(gateway_client):
    created = gateway_client.post("/customers", json={"username": "carol"}).json()["data"]
    r = gateway_client.delete(f"/customers/{created['rowKey']}")
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert gateway_client.delete(f"/customers/{created['rowKey']}").status_code == 404


def test_order_items_stored_as_json_string(gateway_client, engine):
    order = gateway_client.post("/orders", json=_order_body()).json()["data"]
    assert order["status"] == "Submitted"
    assert order["orderItems"][0]["totalPrice"] == 50

    record = _raw_order(engine, order["rowKey"])
    assert isinstance(record.properties["orderItemsJson"], str)
    assert "orderItems" not in record.properties


def test_order_without_items_is_rejected(gateway_client):
    r = gateway_client.post("/orders", json=_order_body(orderItems=[]))
    assert r.status_code == 400


def test_status_patch_leaves_items_blob_untouched(gateway_client, engine):
    order = gateway_client.post("/orders", json=_order_body()).json()["data"]
    before = _raw_order(engine, order["rowKey"])

    r = gateway_client.patch(f"/orders/{order['rowKey']}/status", json={"status": "Processing"})
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "Processing"

    after = _raw_order(engine, order["rowKey"])
    assert after.properties["orderItemsJson"] == before.properties["orderItemsJson"]
    assert after.properties["status"] == "Processing"
    assert after.etag != before.etag


def test_status_patch_rejects_unknown_status(gateway_client):
    order = gateway_client.post("/orders", json=_order_body()).json()["data"]
    r = gateway_client.patch(f"/orders/{order['rowKey']}/status", json={"status": "Lost"})
    assert r.status_code == 400


def test_put_without_items_keeps_items_blob(gateway_client, engine):
    order = gateway_client.post("/orders", json=_order_body()).json()["data"]
    before = _raw_order(engine, order["rowKey"])

    r = gateway_client.put(f"/orders/{order['rowKey']}", json={"shippingAddress": "2 Side St"})
    assert r.status_code == 200

    after = _raw_order(engine, order["rowKey"])
    assert after.properties["orderItemsJson"] == before.properties["orderItemsJson"]
    assert after.properties["shippingAddress"] == "2 Side St"


def test_create_order_total_follows_items(gateway_client):
    body = _order_body()
    del body["totalAmount"]
    r = gateway_client.post("/orders", json=body)
    assert r.status_code == 201
    assert r.json()["data"]["totalAmount"] == 50

    r = gateway_client.post("/orders", json=_order_body(totalAmount=1))
    assert r.json()["data"]["totalAmount"] == 50


def test_put_new_items_recomputes_total(gateway_client):
    order = gateway_client.post("/orders", json=_order_body()).json()["data"]
    items = [
        {"productId": "p-1", "productName": "Lamp", "quantity": 1, "unitPrice": 10},
        {"productId": "p-2", "productName": "Desk", "quantity": 2, "unitPrice": 7.5},
    ]

    r = gateway_client.put(f"/orders/{order['rowKey']}", json={"orderItems": items})
    assert r.status_code == 200
    assert r.json()["data"]["totalAmount"] == 25

    # a sent total without items is ignored
    r = gateway_client.put(f"/orders/{order['rowKey']}", json={"totalAmount": 1})
    assert r.status_code == 200
    assert r.json()["data"]["totalAmount"] == 25


def test_put_empty_items_is_rejected(gateway_client, engine):
    order = gateway_client.post("/orders", json=_order_body()).json()["data"]
    before = _raw_order(engine, order["rowKey"])

    r = gateway_client.put(f"/orders/{order['rowKey']}", json={"orderItems": []})
    assert r.status_code == 400
    assert _raw_order(engine, order["rowKey"]).properties == before.properties


def test_status_patch_follows_status_machine(gateway_client):
    order = gateway_client.post("/orders", json=_order_body()).json()["data"]
    url = f"/orders/{order['rowKey']}/status"

    assert gateway_client.patch(url, json={"status": "Delivered"}).status_code == 400
    assert gateway_client.patch(url, json={"status": "Processing"}).status_code == 200
    assert gateway_client.patch(url, json={"status": "Processing"}).status_code == 200
    assert gateway_client.patch(url, json={"status": "Delivered"}).status_code == 200
    assert gateway_client.patch(url, json={"status": "Submitted"}).status_code == 400

    # cancellation is allowed from any state
    r = gateway_client.patch(url, json={"status": "Cancelled"})
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "Cancelled"


def test_put_status_follows_status_machine(gateway_client):
    order = gateway_client.post("/orders", json=_order_body()).json()["data"]
    url = f"/orders/{order['rowKey']}"

    assert gateway_client.put(url, json={"status": "Lost"}).status_code == 400
    assert gateway_client.put(url, json={"status": "Delivered"}).status_code == 400
    assert gateway_client.get(url).json()["data"]["status"] == "Submitted"

    r = gateway_client.put(url, json={"status": "Processing", "shippingAddress": "2 Side St"})
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "Processing"


def test_list_orders_filters(gateway_client):
    gateway_client.post("/orders", json=_order_body(customerId="c-1", username="alice"))
    gateway_client.post("/orders", json=_order_body(customerId="c-2", username="bob"))

    all_orders = gateway_client.get("/orders").json()["data"]
    assert len(all_orders) == 2

    mine = gateway_client.get("/orders", params={"customerId": "c-2"}).json()["data"]
    assert [o["username"] for o in mine] == ["bob"]

    by_name = gateway_client.get("/orders", params={"username": "alice"}).json()["data"]
    assert [o["customerId"] for o in by_name] == ["c-1"]


def test_upload_stores_blob_and_returns_url(gateway_client, tmp_path):
    payload = {
        "fileName": "photo.png",
        "containerName": "product-images",
        "contentType": "image/png",
        "fileData": base64.b64encode(b"\x89PNG fake").decode(),
    }
    r = gateway_client.post("/upload", json=payload)
    assert r.status_code == 200
    url = r.json()["data"]
    assert url.startswith("http://testserver/blobs/product-images/")
    assert url.endswith("_photo.png")

    stored = list((tmp_path / "blobs" / "product-images").iterdir())
    assert len(stored) == 1
    assert stored[0].read_bytes() == b"\x89PNG fake"


def test_upload_rejects_bad_base64(gateway_client):
    payload = {
        "fileName": "x.txt",
        "containerName": "docs",
        "fileData": "not base64!!",
    }
    r = gateway_client.post("/upload", json=payload)
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_upload_rejects_bad_container_name(gateway_client):
    payload = {
        "fileName": "x.txt",
        "containerName": "../etc",
        "fileData": base64.b64encode(b"hi").decode(),
    }
    assert gateway_client.post("/upload", json=payload).status_code == 400
