import uuid


def test_cart_requires_authentication(login):
    res = login(None).get("/api/cart")
    assert res.status_code == 401
    assert res.json()["error"]["error_code"] == "UNAUTHORIZED"


def test_empty_cart(login, customer):
    res = login(customer).get("/api/cart")
    assert res.status_code == 200
    assert res.json()["data"] == {"items": [], "total_quantity": 0, "total_price": 0.0}


def test_adding_same_product_twice_increments_quantity(login, customer, make_product):
    product = make_product("Macaron", 12000)
    client = login(customer)

    client.post("/api/cart", json={"product_id": str(product.id), "quantity": 2})
    res = client.post("/api/cart", json={"product_id": str(product.id), "quantity": 3})

    assert res.status_code == 200
    cart = res.json()["data"]
    assert len(cart["items"]) == 1
    line = cart["items"][0]
    assert line["quantity"] == 5
    assert line["product_name"] == "Macaron"
    assert line["line_total"] == 60000
    assert cart["total_quantity"] == 5
    assert cart["total_price"] == 60000


def test_default_quantity_is_one(login, customer, make_product):
    product = make_product("Scone", 18000)
    res = login(customer).post("/api/cart", json={"product_id": str(product.id)})
    assert res.json()["data"]["items"][0]["quantity"] == 1


def test_cart_totals_use_current_price(login, customer, make_product, session):
    tart = make_product("Egg Tart", 10000)
    bun = make_product("Milk Bun", 8000)
    client = login(customer)
    client.post("/api/cart", json={"product_id": str(tart.id), "quantity": 2})
    client.post("/api/cart", json={"product_id": str(bun.id), "quantity": 1})

    tart.price = 15000
    session.add(tart)
    session.commit()

    cart = client.get("/api/cart").json()["data"]
    assert cart["total_quantity"] == 3
    assert cart["total_price"] == 2 * 15000 + 8000


def test_add_unknown_product_is_404(login, customer):
    res = login(customer).post("/api/cart", json={"product_id": str(uuid.uuid4())})
    assert res.status_code == 404


def test_add_rejects_non_positive_quantity(login, customer, make_product):
    product = make_product("Pretzel", 9000)
    res = login(customer).post(
        "/api/cart", json={"product_id": str(product.id), "quantity": 0}
    )
    assert res.status_code == 422
    assert "quantity" in res.json()["error"]["validation_errors"]


def test_update_quantity(login, customer, make_product):
    product = make_product("Bagel", 11000)
    client = login(customer)
    client.post("/api/cart", json={"product_id": str(product.id), "quantity": 4})

    res = client.put(f"/api/cart/{product.id}", json={"quantity": 1})
    assert res.status_code == 200
    assert res.json()["data"]["items"][0]["quantity"] == 1


def test_update_item_not_in_cart_is_404(login, customer, make_product):
    product = make_product("Bagel", 11000)
    res = login(customer).put(f"/api/cart/{product.id}", json={"quantity": 2})
    assert res.status_code == 404
    assert res.json()["message"] == "Item not found in cart"


def test_remove_and_clear(login, customer, make_product):
    a = make_product("Churro", 7000)
    b = make_product("Waffle", 14000)
    client = login(customer)
    client.post("/api/cart", json={"product_id": str(a.id)})
    client.post("/api/cart", json={"product_id": str(b.id)})

    res = client.delete(f"/api/cart/{a.id}")
    assert [i["product_name"] for i in res.json()["data"]["items"]] == ["Waffle"]

    res = client.delete("/api/cart")
    assert res.json()["data"]["items"] == []
    assert client.get("/api/cart").json()["data"]["total_quantity"] == 0


def test_carts_are_per_user(login, customer, other_customer, make_product):
    product = make_product("Muffin", 16000)
    login(customer).post("/api/cart", json={"product_id": str(product.id)})

    res = login(other_customer).get("/api/cart")
    assert res.json()["data"]["items"] == []


def test_lines_for_missing_products_are_skipped(login, customer, make_product, session):
    kept = make_product("Cookie", 5000)
    gone = make_product("Flan", 20000)
    client = login(customer)
    client.post("/api/cart", json={"product_id": str(kept.id), "quantity": 2})
    client.post("/api/cart", json={"product_id": str(gone.id), "quantity": 1})

    # Remove the product row only, leaving its cart line behind
    session.delete(gone)
    session.commit()

    cart = client.get("/api/cart").json()["data"]
    assert [i["product_name"] for i in cart["items"]] == ["Cookie"]
    assert cart["total_quantity"] == 2
    assert cart["total_price"] == 10000
