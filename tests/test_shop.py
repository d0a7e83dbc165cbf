import uuid

import pytest

from shop_service.db.functions import payments as payment_functions

from conftest import API


@pytest.fixture
def cart(client, create_user):
    user = create_user()
    response = client.post(f"{API}/carts", json={"user_id": user["id"], "created_by": "tester"})
    assert response.status_code == 201
    return response.json()["responseData"]


def test_envelope_on_success(client):
    body = client.get(f"{API}/products").json()
    assert body["success"] is True
    assert body["responseMessage"] == "Successful"
    assert body["responseCode"] == "00"
    assert body["responseData"] == []
    assert body["total"] == 0


def test_unknown_path(client):
    response = client.get(f"{API}/no-such-route")
    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "error": "Invalid Path",
        "responseMessage": "Failed",
        "responseCode": "99",
    }


def test_docs_are_served(client):
    assert client.get("/api-docs").status_code == 200
    schema = client.get("/swagger/v1/swagger.json").json()
    assert f"{API}/orders/total-sales" in schema["paths"]


def test_users_listing(client, create_user):
    create_user()
    create_user()

    body = client.get(f"{API}/users").json()
    assert body["total"] == 2
    assert all("password_hash" not in u for u in body["responseData"])
    assert client.get(f"{API}/users/get-count").json()["responseData"] == 2


def test_update_user(client, create_user):
    user = create_user(username="ivan")
    other = create_user(username="petr")

    response = client.put(f"{API}/users/{user['id']}", json={"first_name": "Ivan II", "role": "seller"})
    assert response.status_code == 200
    assert response.json()["responseData"]["first_name"] == "Ivan II"
    assert response.json()["responseData"]["role"] == "seller"

    taken = client.put(f"{API}/users/{user['id']}", json={"username": other["username"]})
    assert taken.status_code == 400


def test_delete_user(client, create_user, create_order_item, create_order):
    user = create_user()
    assert client.delete(f"{API}/users/{user['id']}").status_code == 200
    assert client.get(f"{API}/users/{user['id']}").status_code == 404

    buyer = create_user()
    create_order([create_order_item()["id"]], user_id=buyer["id"])
    assert client.delete(f"{API}/users/{buyer['id']}").status_code == 400


def test_cart_lifecycle(client, cart, create_product):
    product = create_product()

    response = client.post(f"{API}/cart-items", json={
        "cart_id": cart["id"], "product_id": product["id"], "quantity": 2, "created_by": "tester",
    })
    assert response.status_code == 201
    item = response.json()["responseData"]

    updated = client.put(f"{API}/cart-items/{item['id']}", json={"quantity": 5})
    assert updated.status_code == 200
    assert updated.json()["responseData"]["quantity"] == 5

    stored = client.get(f"{API}/carts/{cart['id']}").json()["responseData"]
    assert [i["id"] for i in stored["items"]] == [item["id"]]

    assert client.delete(f"{API}/carts/{cart['id']}").status_code == 200
    assert client.get(f"{API}/carts/{cart['id']}").status_code == 404
    assert client.get(f"{API}/cart-items").json()["total"] == 0


def test_cart_item_references(client, cart):
    response = client.post(f"{API}/cart-items", json={
        "cart_id": cart["id"], "product_id": str(uuid.uuid4()), "quantity": 1, "created_by": "tester",
    })
    assert response.status_code == 404

    response = client.put(f"{API}/cart-items/{uuid.uuid4()}", json={"quantity": 1})
    assert response.status_code == 404


def test_remove_cart_item(client, cart, create_product):
    product = create_product()
    item = client.post(f"{API}/cart-items", json={
        "cart_id": cart["id"], "product_id": product["id"], "created_by": "tester",
    }).json()["responseData"]
    assert item["quantity"] == 1

    assert client.delete(f"{API}/cart-items/{item['id']}").status_code == 200
    assert client.get(f"{API}/carts/{cart['id']}").json()["responseData"]["items"] == []


def test_payments(client, create_order_item, create_order):
    order = create_order([create_order_item()["id"]])
    payload = {"order_id": order["id"], "payment_method": "card", "transaction_id": "tx-1",
               "amount": "19.99", "payment_status": "Paid"}

    response = client.post(f"{API}/payments", json=payload)
    assert response.status_code == 201
    payment = response.json()["responseData"]
    assert payment["amount"] == 19.99

    assert client.get(f"{API}/payments/{payment['id']}").json()["responseData"]["transaction_id"] == "tx-1"
    assert client.post(f"{API}/payments", json=payload).status_code == 400
    assert client.get(f"{API}/payments").json()["total"] == 1


def test_payment_for_missing_order(client):
    response = client.post(f"{API}/payments", json={"order_id": str(uuid.uuid4()), "transaction_id": "tx-2"})
    assert response.status_code == 404


def test_reviews(client, create_user, create_product):
    user = create_user()
    product = create_product()
    payload = {"user_id": user["id"], "product_id": product["id"], "rating": 5, "review_text": "Great tea"}

    response = client.post(f"{API}/reviews", json=payload)
    assert response.status_code == 201
    review = response.json()["responseData"]

    listing = client.get(f"{API}/reviews/product/{product['id']}").json()
    assert listing["total"] == 1
    assert listing["responseData"][0]["review_text"] == "Great tea"

    assert client.post(f"{API}/reviews", json={**payload, "rating": 6}).status_code == 400

    assert client.delete(f"{API}/reviews/{review['id']}").status_code == 200
    assert client.get(f"{API}/reviews").json()["total"] == 0


def test_reviews_for_missing_product(client):
    assert client.get(f"{API}/reviews/product/{uuid.uuid4()}").status_code == 404


async def _skip_transaction_check(*args, **kwargs):
    return None


def test_duplicate_transaction_caught_by_database_constraint(client, monkeypatch, create_order_item, create_order):
    order = create_order([create_order_item()["id"]])
    payload = {"order_id": order["id"], "transaction_id": "tx-race", "amount": "19.99"}
    assert client.post(f"{API}/payments", json=payload).status_code == 201

    monkeypatch.setattr(payment_functions, "_ensure_transaction_free", _skip_transaction_check)
    response = client.post(f"{API}/payments", json=payload)
    assert response.status_code == 400
    assert response.json()["error"] == "Transaction tx-race already recorded"
    assert client.get(f"{API}/payments").json()["total"] == 1
