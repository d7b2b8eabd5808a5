import uuid

from sqlmodel import select

from storefront.models.cart import CartItem
from storefront.models.order import Order, OrderItem


def fill_cart(client, *lines):
    for product, quantity in lines:
        client.post(
            "/api/cart", json={"product_id": str(product.id), "quantity": quantity}
        )


def test_checkout_snapshots_cart_and_clears_it(login, customer, make_product, session):
    croissant = make_product("Croissant", 30000)
    latte = make_product("Latte", 45000)
    client = login(customer)
    fill_cart(client, (croissant, 3), (latte, 2))

    res = client.post("/api/orders/checkout", json={"payment_method": "vnpay"})
    assert res.status_code == 201
    order = res.json()["data"]
    assert order["status"] == "pending"
    assert order["payment_method"] == "vnpay"
    assert order["total_amount"] == 3 * 30000 + 2 * 45000
    assert sum(i["line_total"] for i in order["items"]) == order["total_amount"]
    assert {i["product_name"]: i["quantity"] for i in order["items"]} == {
        "Croissant": 3,
        "Latte": 2,
    }

    cart = client.get("/api/cart").json()["data"]
    assert cart["items"] == []
    assert session.exec(select(CartItem)).all() == []


def test_checkout_with_empty_cart_is_400(login, customer, session):
    res = login(customer).post("/api/orders/checkout", json={"payment_method": "vnpay"})
    assert res.status_code == 400
    assert res.json()["message"] == "Cart is empty"
    assert session.exec(select(Order)).all() == []


def test_checkout_requires_payment_method(login, customer, make_product):
    product = make_product("Croissant", 30000)
    client = login(customer)
    fill_cart(client, (product, 1))

    res = client.post("/api/orders/checkout", json={"payment_method": "   "})
    assert res.status_code == 422
    assert len(client.get("/api/cart").json()["data"]["items"]) == 1


def test_order_items_survive_product_changes(
    login, admin, customer, make_product, storage, session
):
    product = make_product("Opera Cake", 150000)
    client = login(customer)
    fill_cart(client, (product, 1))
    order_id = client.post(
        "/api/orders/checkout", json={"payment_method": "cod"}
    ).json()["data"]["id"]

    product.price = 999000
    product.name = "Renamed"
    session.add(product)
    session.commit()
    login(admin).delete(f"/api/products/{product.id}")

    res = login(customer).get(f"/api/orders/me/{order_id}")
    assert res.status_code == 200
    order = res.json()["data"]
    assert order["total_amount"] == 150000
    assert order["items"][0]["product_name"] == "Opera Cake"
    assert order["items"][0]["product_price"] == 150000
    assert len(session.exec(select(OrderItem)).all()) == 1


def test_list_my_orders_only_returns_own(login, customer, other_customer, make_product):
    product = make_product("Pie", 40000)
    mine = login(customer)
    fill_cart(mine, (product, 1))
    mine.post("/api/orders/checkout", json={"payment_method": "cod"})

    theirs = login(other_customer)
    fill_cart(theirs, (product, 2))
    theirs.post("/api/orders/checkout", json={"payment_method": "cod"})

    orders = login(customer).get("/api/orders/me").json()["data"]
    assert len(orders) == 1
    assert orders[0]["total_amount"] == 40000


def test_cannot_read_someone_elses_order(login, customer, other_customer, make_product):
    product = make_product("Pie", 40000)
    client = login(customer)
    fill_cart(client, (product, 1))
    order_id = client.post(
        "/api/orders/checkout", json={"payment_method": "cod"}
    ).json()["data"]["id"]

    res = login(other_customer).get(f"/api/orders/me/{order_id}")
    assert res.status_code == 404


def test_admin_lists_and_updates_orders(login, admin, customer, make_product):
    product = make_product("Pie", 40000)
    client = login(customer)
    fill_cart(client, (product, 1))
    order_id = client.post(
        "/api/orders/checkout", json={"payment_method": "cod"}
    ).json()["data"]["id"]

    assert login(customer).get("/api/orders").status_code == 403

    admin_client = login(admin)
    orders = admin_client.get("/api/orders").json()["data"]
    assert [o["id"] for o in orders] == [order_id]

    res = admin_client.put(
        f"/api/orders/{order_id}/status",
        json={"status": "cancelled"},
    )
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "cancelled"

    res = admin_client.put(
        f"/api/orders/{order_id}/status", json={"status": "shipped"}
    )
    assert res.status_code == 422


def test_admin_get_unknown_order_is_404(login, admin):
    res = login(admin).get(f"/api/orders/{uuid.uuid4()}")
    assert res.status_code == 404
