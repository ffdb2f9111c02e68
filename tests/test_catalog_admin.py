# tests/test_catalog_admin.py
from storefront.schemas.order import Order, OrderItem, OrderStatus


def _create_product(client, headers, **form):
    data = {"productName": "Lamp", "description": "Bright", "price": "12.50", "stockAvailable": "4"}
    data.update(form)
    return client.post("/store/products", data=data, headers=headers)


# ----- products -----


def test_public_product_browsing(client, make_product):
    lamp = make_product("Lamp", price="10", stock=3)

    listed = client.get("/store/products")
    assert listed.status_code == 200
    assert [p["productName"] for p in listed.json()] == ["Lamp"]

    r = client.get(f"/store/products/{lamp.row_key}")
    assert r.status_code == 200
    assert r.json()["price"] == 10.0
    assert r.json()["stockAvailable"] == 3

    assert client.get("/store/products/missing").status_code == 404


def test_admin_creates_product_with_image(client, admin_headers):
    r = client.post(
        "/store/products",
        data={"productName": "Lamp", "price": "12.50", "stockAvailable": "4"},
        files={"image": ("lamp.png", b"\x89PNG image", "image/png")},
        headers=admin_headers,
    )
    assert r.status_code == 201
    product = r.json()
    assert product["partitionKey"] == "PRODUCTS"
    assert product["price"] == 12.5
    assert "/blobs/product-images/" in product["productImageUrl"]
    assert product["productImageUrl"].endswith("_lamp.png")


def test_unsupported_image_type_is_rejected(client, admin_headers):
    r = client.post(
        "/store/products",
        data={"productName": "Lamp", "price": "1", "stockAvailable": "1"},
        files={"image": ("lamp.txt", b"hello", "text/plain")},
        headers=admin_headers,
    )
    assert r.status_code == 400
    assert client.get("/store/products").json() == []


def test_admin_updates_only_sent_fields(client, admin_headers):
    product = _create_product(client, admin_headers).json()

    r = client.put(
        f"/store/products/{product['rowKey']}",
        data={"stockAvailable": "9"},
        headers=admin_headers,
    )
    assert r.status_code == 200
    updated = r.json()
    assert updated["stockAvailable"] == 9
    assert updated["productName"] == "Lamp"
    assert updated["description"] == "Bright"


def test_update_with_stale_etag_is_conflict(client, admin_headers):
    product = _create_product(client, admin_headers).json()
    url = f"/store/products/{product['rowKey']}"

    assert client.put(url, data={"price": "5", "eTag": product["eTag"]}, headers=admin_headers).status_code == 200
    assert client.put(url, data={"price": "6", "eTag": product["eTag"]}, headers=admin_headers).status_code == 409
    assert client.get(url).json()["price"] == 5.0


def test_update_fails_with_503_when_save_is_unavailable(client, api, admin_headers, monkeypatch):
    product = _create_product(client, admin_headers).json()
    url = f"/store/products/{product['rowKey']}"
    monkeypatch.setattr(api, "upload_file", lambda file, container: None)

    r = client.put(
        url,
        data={"price": "5", "eTag": product["eTag"]},
        files={"image": ("lamp.png", b"\x89PNG image", "image/png")},
        headers=admin_headers,
    )
    assert r.status_code == 503
    assert client.get(url).json()["price"] == 12.5


def test_admin_deletes_product(client, admin_headers):
    product = _create_product(client, admin_headers).json()
    url = f"/store/products/{product['rowKey']}"

    assert client.delete(url, headers=admin_headers).status_code == 204
    assert client.get(url).status_code == 404
    assert client.delete(url, headers=admin_headers).status_code == 404


def test_product_admin_requires_admin(client, customer_headers):
    assert _create_product(client, {}).status_code == 401
    assert _create_product(client, customer_headers).status_code == 403


# ----- customers -----


def test_customer_profile(client, customer, customer_headers):
    r = client.get("/store/customers/me", headers=customer_headers)
    assert r.status_code == 200
    assert r.json()["username"] == "alice"

    r = client.patch(
        "/store/customers/me",
        json={"shippingAddress": "9 New Street"},
        headers=customer_headers,
    )
    assert r.status_code == 200
    assert r.json()["shippingAddress"] == "9 New Street"
    assert r.json()["email"] == "alice@example.com"


def test_profile_username_is_not_editable(client, customer, customer_headers):
    r = client.patch("/store/customers/me", json={"username": "eve"}, headers=customer_headers)
    assert r.status_code == 422


def test_admin_customer_management(client, admin_headers):
    body = {
        "name": "Bob",
        "surname": "Jones",
        "username": "bob",
        "email": "bob@example.com",
        "shippingAddress": "2 Side St",
    }
    r = client.post("/store/customers", json=body, headers=admin_headers)
    assert r.status_code == 201
    bob = r.json()

    assert client.post("/store/customers", json=body, headers=admin_headers).status_code == 409

    url = f"/store/customers/{bob['rowKey']}"
    r = client.put(url, json={"surname": "Brown"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["surname"] == "Brown"
    assert r.json()["name"] == "Bob"

    listed = client.get("/store/customers", headers=admin_headers).json()
    assert [c["username"] for c in listed] == ["bob"]

    assert client.delete(url, headers=admin_headers).status_code == 204
    assert client.get(url, headers=admin_headers).status_code == 404


def test_admin_cannot_take_another_customers_username(client, api, customer, admin_headers):
    body = {
        "name": "Bob",
        "surname": "Jones",
        "username": "bob",
        "email": "bob@example.com",
        "shippingAddress": "2 Side St",
    }
    bob = client.post("/store/customers", json=body, headers=admin_headers).json()
    url = f"/store/customers/{bob['rowKey']}"

    r = client.put(url, json={"username": "alice"}, headers=admin_headers)
    assert r.status_code == 409
    assert r.json()["detail"] == "Username already exists."

    usernames = sorted(c.username for c in api.list_customers())
    assert usernames == ["alice", "bob"]

    r = client.put(url, json={"username": "bobby"}, headers=admin_headers)
    assert r.status_code == 200
    assert api.get_customer_by_username("bobby").row_key == bob["rowKey"]


# ----- home and dashboard -----


def test_home_page_features_eight_products(client, make_product):
    for i in range(10):
        make_product(f"Product {i}")

    r = client.get("/store/")
    assert r.status_code == 200
    body = r.json()
    assert body["productCount"] == 10
    assert len(body["featuredProducts"]) == 8


def test_admin_dashboard(client, api, customer, admin_headers, make_product):
    for i in range(4):
        make_product(f"Product {i}")

    def place(total: str) -> Order:
        return api.create_order(
            Order(
                customer_id=customer.row_key,
                username=customer.username,
                total_amount=total,
                order_items=[OrderItem(product_id="p", quantity=1, unit_price=total)],
            )
        )

    place("10")
    processing = place("20")
    cancelled = place("40")
    delivered = place("5")
    api.update_order_status(processing.row_key, OrderStatus.PROCESSING)
    api.update_order_status(cancelled.row_key, OrderStatus.CANCELLED)
    api.update_order_status(delivered.row_key, OrderStatus.PROCESSING)
    api.update_order_status(delivered.row_key, OrderStatus.DELIVERED)

    r = client.get("/store/admin/dashboard", headers=admin_headers)
    assert r.status_code == 200
    stats = r.json()
    assert stats["customerCount"] == 1
    assert stats["productCount"] == 4
    assert stats["orderCount"] == 4
    assert stats["pendingOrders"] == 2
    assert stats["totalRevenue"] == 35.0
    assert len(stats["featuredProducts"]) == 3


def test_dashboard_requires_admin(client, customer_headers):
    assert client.get("/store/admin/dashboard", headers=customer_headers).status_code == 403
