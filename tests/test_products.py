import uuid

from fastapi.testclient import TestClient
from sqlmodel import select

from storefront.main import app
from storefront.models.cart import CartItem
from storefront.models.product import Product
from storefront.routers import products as products_router

from conftest import STORAGE_PREFIX

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def test_list_products_is_paged_and_sorted_by_name(login, make_product):
    for name, price in [("Croissant", 30000), ("Baguette", 25000), ("Eclair", 45000)]:
        make_product(name, price)
    client = login(None)

    res = client.get("/api/products", params={"page": 1, "page_size": 2})
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    page = body["data"]
    assert [p["name"] for p in page["items"]] == ["Baguette", "Croissant"]
    assert page["total_items"] == 3
    assert page["total_pages"] == 2
    assert page["has_next_page"] is True
    assert page["has_previous_page"] is False

    res = client.get("/api/products", params={"page": 2, "page_size": 2})
    page = res.json()["data"]
    assert [p["name"] for p in page["items"]] == ["Eclair"]
    assert page["has_next_page"] is False


def test_search_matches_name_or_description(login, make_product):
    make_product("Matcha Cake", 120000, "Green tea sponge with cream")
    make_product("Cheesecake", 90000, "Baked cheese with matcha glaze")
    make_product("Tiramisu", 80000, "Coffee soaked ladyfingers")
    client = login(None)

    res = client.get("/api/products/search", params={"search_term": "MATCHA"})
    page = res.json()["data"]
    assert page["total_items"] == 2
    assert [p["name"] for p in page["items"]] == ["Cheesecake", "Matcha Cake"]


def test_search_with_price_range_sorts_by_price(login, make_product):
    make_product("Alpha", 50000)
    make_product("Bravo", 20000)
    make_product("Charlie", 35000)
    make_product("Delta", 90000)
    client = login(None)

    res = client.get(
        "/api/products/search",
        params={"min_price": 20000, "max_price": 50000, "sort_order": "desc"},
    )
    page = res.json()["data"]
    assert [p["price"] for p in page["items"]] == [50000, 35000, 20000]


def test_search_treats_wildcards_literally(login, make_product):
    make_product("Sale 50% off", 10000)
    make_product("Sale 50 items", 10000)
    client = login(None)

    res = client.get("/api/products/search", params={"search_term": "50%"})
    assert [p["name"] for p in res.json()["data"]["items"]] == ["Sale 50% off"]


def test_search_rejects_inverted_price_range(login):
    client = login(None)
    res = client.get(
        "/api/products/search", params={"min_price": 100, "max_price": 10}
    )
    assert res.status_code == 422
    assert res.json()["success"] is False


def test_get_missing_product_is_404(login):
    res = login(None).get(f"/api/products/{uuid.uuid4()}")
    assert res.status_code == 404
    assert res.json()["message"] == "Product not found"


def test_customer_cannot_create_product(login, customer):
    client = login(customer)
    res = client.post(
        "/api/products",
        data={"name": "Madeleine", "description": "Shell shaped cake", "price": "15000"},
    )
    assert res.status_code == 403


def test_guest_cannot_create_product(login):
    client = login(None)
    res = client.post(
        "/api/products",
        data={"name": "Madeleine", "description": "Shell shaped cake", "price": "15000"},
    )
    assert res.status_code == 401


def test_admin_creates_product_with_image(login, admin, storage, session):
    client = login(admin)
    res = client.post(
        "/api/products",
        data={"name": "Madeleine", "description": "Shell shaped cake", "price": "15000"},
        files={"image_file": ("madeleine.png", PNG_BYTES, "image/png")},
    )
    assert res.status_code == 201
    body = res.json()
    assert body["status_code"] == 201
    product = body["data"]
    assert product["image_url"].startswith(STORAGE_PREFIX + "products/")
    assert product["image_url"].endswith(".png")

    path, content_type, size = storage["uploaded"][0]
    assert content_type == "image/png"
    assert size == len(PNG_BYTES)
    assert session.get(Product, uuid.UUID(product["id"])) is not None


def test_admin_create_rejects_unsupported_image(login, admin, storage, session):
    client = login(admin)
    res = client.post(
        "/api/products",
        data={"name": "Madeleine", "description": "Shell shaped cake", "price": "15000"},
        files={"image_file": ("notes.txt", b"hello", "text/plain")},
    )
    assert res.status_code == 400
    assert storage["uploaded"] == []
    assert len(session.exec(select(Product)).all()) == 0


def test_admin_create_validates_form(login, admin, storage):
    client = login(admin)
    res = client.post(
        "/api/products",
        data={"name": "M", "description": "short", "price": "0"},
    )
    assert res.status_code == 422
    errors = res.json()["error"]["validation_errors"]
    assert set(errors) == {"name", "description", "price"}


def test_update_replaces_image_and_deletes_old_one(
    login, admin, storage, make_product, session
):
    product = make_product("Donut", 20000)
    product.image_url = STORAGE_PREFIX + "products/old.png"
    session.add(product)
    session.commit()

    client = login(admin)
    res = client.put(
        f"/api/products/{product.id}",
        data={"name": "Glazed Donut", "description": "Ring donut, sugar glaze", "price": "22000"},
        files={"image_file": ("donut.png", PNG_BYTES, "image/png")},
    )
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["name"] == "Glazed Donut"
    assert data["price"] == 22000
    assert data["image_url"] != STORAGE_PREFIX + "products/old.png"
    assert storage["deleted"] == [STORAGE_PREFIX + "products/old.png"]


def test_delete_product_removes_cart_lines_and_image(
    login, admin, customer, storage, make_product, session
):
    product = make_product("Brownie", 25000)
    product.image_url = STORAGE_PREFIX + "products/brownie.png"
    session.add(product)
    session.add(CartItem(user_id=customer.id, product_id=product.id, quantity=2))
    session.commit()
    product_id = product.id

    res = login(admin).delete(f"/api/products/{product_id}")
    assert res.status_code == 200
    assert res.json()["data"] is None

    assert session.get(Product, product_id) is None
    assert len(session.exec(select(CartItem)).all()) == 0
    assert storage["deleted"] == [STORAGE_PREFIX + "products/brownie.png"]


def test_admin_create_rejects_infinite_price(login, admin, storage, session):
    client = login(admin)
    res = client.post(
        "/api/products",
        data={"name": "Madeleine", "description": "Shell shaped cake", "price": "inf"},
    )
    assert res.status_code == 422
    assert "price" in res.json()["error"]["validation_errors"]
    assert len(session.exec(select(Product)).all()) == 0


def test_admin_create_strips_before_length_checks(login, admin, storage, session):
    client = login(admin)
    res = client.post(
        "/api/products",
        data={"name": " A ", "description": "  too short  ", "price": "15000"},
    )
    assert res.status_code == 422
    errors = res.json()["error"]["validation_errors"]
    assert set(errors) == {"name", "description"}
    assert len(session.exec(select(Product)).all()) == 0


def test_admin_create_stores_trimmed_fields(login, admin, storage):
    res = login(admin).post(
        "/api/products",
        data={"name": "  Madeleine ", "description": " Shell shaped cake ", "price": "15000"},
    )
    assert res.status_code == 201
    data = res.json()["data"]
    assert data["name"] == "Madeleine"
    assert data["description"] == "Shell shaped cake"


def test_failed_update_deletes_new_image(
    login, admin, storage, make_product, session, monkeypatch
):
    product = make_product("Donut", 20000)
    product.image_url = STORAGE_PREFIX + "products/old.png"
    session.add(product)
    session.commit()

    def broken_update(session, product):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(products_router.repo, "update", broken_update)
    login(admin)
    client = TestClient(app, raise_server_exceptions=False)

    res = client.put(
        f"/api/products/{product.id}",
        data={"name": "Glazed Donut", "description": "Ring donut, sugar glaze", "price": "22000"},
        files={"image_file": ("donut.png", PNG_BYTES, "image/png")},
    )
    assert res.status_code == 500

    new_path = storage["uploaded"][0][0]
    assert storage["deleted"] == [STORAGE_PREFIX + new_path]

    session.refresh(product)
    assert product.name == "Donut"
    assert product.image_url == STORAGE_PREFIX + "products/old.png"
