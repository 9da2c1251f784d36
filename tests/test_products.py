from http import HTTPStatus
from unittest.mock import MagicMock

from catalog_api import crud


def test_create_widget_then_fetch_defaults(client):
    response = client.post("/products", json={"name": "Widget", "price": 9.99})
    assert response.status_code == HTTPStatus.CREATED

    body = response.json()
    assert body["success"] is True
    product_id = body["data"]["product_id"]

    get_response = client.get(f"/products/{product_id}")
    assert get_response.status_code == HTTPStatus.OK
    product = get_response.json()["data"]
    assert product["product_id"] == product_id
    assert product["name"] == "Widget"
    assert product["price"] == 9.99
    assert product["description"] is None
    assert product["stock_quantity"] == 0
    assert product["is_active"] is True


def test_create_product_with_all_fields(client):
    payload = {
        "name": "Lamp",
        "price": 24.5,
        "description": "Desk lamp",
        "stock_quantity": 12,
    }
    product_id = client.post("/products", json=payload).json()["data"]["product_id"]

    product = client.get(f"/products/{product_id}").json()["data"]
    assert product["description"] == "Desk lamp"
    assert product["stock_quantity"] == 12


def test_negative_price_rejected_before_storage(client, monkeypatch):
    mock = MagicMock()
    monkeypatch.setattr(crud, "create_product", mock)

    response = client.post("/products", json={"name": "Widget", "price": -1})
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json()["success"] is False
    assert response.json()["error"] == "price must be a non-negative number"
    assert not mock.called


def test_price_must_be_a_number(client):
    response = client.post("/products", json={"name": "Widget", "price": "9.99"})
    assert response.status_code == HTTPStatus.BAD_REQUEST


def test_create_product_requires_name_and_price(client):
    response = client.post("/products", json={"description": "no name"})
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json()["error"] == "name and price are required"


def test_create_product_rejects_non_object_body(client):
    response = client.post("/products", json=["Widget", 9.99])
    assert response.status_code == HTTPStatus.BAD_REQUEST


def test_list_products_and_active_filter(client, product_factory):
    product_factory(name="Widget", price=9.99)
    product_factory(name="Retired", price=1.0, is_active=False)

    everything = client.get("/products").json()["data"]
    assert [p["name"] for p in everything] == ["Widget", "Retired"]

    active = client.get("/products", params={"active_only": "true"}).json()["data"]
    assert [p["name"] for p in active] == ["Widget"]


def test_get_product_invalid_and_missing_ids(client):
    bad = client.get("/products/abc")
    assert bad.status_code == HTTPStatus.BAD_REQUEST
    assert bad.json()["error"] == "Invalid product ID"

    missing = client.get("/products/42")
    assert missing.status_code == HTTPStatus.NOT_FOUND
    assert missing.json()["error"] == "Product not found"


def test_update_product_fields(client, product_factory):
    product_id = product_factory(name="Widget", price=9.99)

    response = client.put(
        f"/products/{product_id}",
        json={"price": 12.5, "stock_quantity": 3, "is_active": False, "unknown": 1},
    )
    assert response.status_code == HTTPStatus.OK
    assert response.json()["message"] == "Product updated successfully"

    product = client.get(f"/products/{product_id}").json()["data"]
    assert product["name"] == "Widget"
    assert product["price"] == 12.5
    assert product["stock_quantity"] == 3
    assert product["is_active"] is False


def test_update_product_without_changes_is_not_found(client, product_factory):
    product_id = product_factory(name="Widget", price=9.99)

    for body in ({}, {"unknown": "field"}):
        response = client.put(f"/products/{product_id}", json=body)
        assert response.status_code == HTTPStatus.NOT_FOUND
        assert response.json()["error"] == "Product not found or no changes made"


def test_update_product_without_body_is_not_found(client, product_factory):
    product_id = product_factory(name="Widget", price=9.99)

    response = client.put(f"/products/{product_id}")
    assert response.status_code == HTTPStatus.NOT_FOUND


def test_update_product_rejects_negative_price(client, product_factory):
    product_id = product_factory(name="Widget", price=9.99)

    response = client.put(f"/products/{product_id}", json={"price": -0.01})
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert client.get(f"/products/{product_id}").json()["data"]["price"] == 9.99


def test_update_missing_product_returns_404(client):
    response = client.put("/products/77", json={"name": "Ghost"})
    assert response.status_code == HTTPStatus.NOT_FOUND


def test_delete_product_twice(client, product_factory):
    product_id = product_factory(name="Widget", price=9.99)

    first = client.delete(f"/products/{product_id}")
    assert first.status_code == HTTPStatus.OK
    assert first.json()["message"] == "Product deleted successfully"

    second = client.delete(f"/products/{product_id}")
    assert second.status_code == HTTPStatus.NOT_FOUND
    assert second.json()["error"] == "Product not found"


def test_delete_product_invalid_id(client):
    response = client.delete("/products/zero")
    assert response.status_code == HTTPStatus.BAD_REQUEST


def test_infinite_price_rejected_on_create(client, monkeypatch):
    mock = MagicMock()
    monkeypatch.setattr(crud, "create_product", mock)

    response = client.post(
        "/products",
        content='{"name": "Widget", "price": 1e400}',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.json()["error"] == "price must be a non-negative number"
    assert not mock.called


def test_infinite_price_rejected_on_update(client, product_factory):
    product_id = product_factory(name="Widget", price=9.99)

    response = client.put(
        f"/products/{product_id}",
        content='{"price": 1e400}',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert client.get(f"/products/{product_id}").json()["data"]["price"] == 9.99
