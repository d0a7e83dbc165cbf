from datetime import timedelta

import pytest

from shop_service.auth_utils import hash_password, verify_password, create_access_token, decode_access_token
from shop_service.config import settings
from shop_service.db.functions import users as user_functions
from shop_service.security import Policy, policy_for

from conftest import API


def test_register_returns_user_without_password(client, create_user):
    user = create_user(username="ivan", email="ivan@mail.com")

    assert user["username"] == "ivan"
    assert user["role"] == "user"
    assert user["is_verified"] is False
    assert user["address"] is None
    assert "password" not in user
    assert "password_hash" not in user


@pytest.mark.parametrize("missing", ["username", "email", "password", "first_name", "last_name", "sex", "phone_number"])
def test_register_requires_every_field(client, missing):
    payload = {
        "username": "ivan", "email": "ivan@mail.com", "password": "secret123",
        "first_name": "Ivan", "last_name": "Petrov", "sex": "male", "phone_number": "+79990000000",
    }
    payload.pop(missing)
    response = client.post(f"{API}/auth/register", json=payload)
    assert response.status_code == 400
    assert response.json()["responseCode"] == "99"


def test_register_rejects_empty_values(client):
    response = client.post(f"{API}/auth/register", json={
        "username": "", "email": "ivan@mail.com", "password": "secret123",
        "first_name": "Ivan", "last_name": "Petrov", "sex": "male", "phone_number": "+79990000000",
    })
    assert response.status_code == 400


@pytest.mark.parametrize("duplicate", [
    {"email": "taken@mail.com"},
    {"username": "taken"},
])
def test_duplicate_registration_creates_nothing(client, create_user, duplicate):
    create_user(username="taken", email="taken@mail.com")

    payload = {
        "username": "other", "email": "other@mail.com", "password": "secret123",
        "first_name": "Petr", "last_name": "Ivanov", "sex": "male", "phone_number": "+79991111111",
    }
    payload.update(duplicate)
    response = client.post(f"{API}/auth/register", json=payload)

    assert response.status_code == 400
    assert response.json()["error"] == "Username or email already exists"
    assert client.get(f"{API}/users/get-count").json()["responseData"] == 1


def test_login_with_wrong_password(client, create_user):
    create_user(email="ivan@mail.com", password="right-password")

    response = client.post(f"{API}/auth/login", json={"email": "ivan@mail.com", "password": "wrong-password"})
    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert "token" not in str(body.get("responseData"))


def test_login_with_unknown_email(client):
    response = client.post(f"{API}/auth/login", json={"email": "nobody@mail.com", "password": "secret123"})
    assert response.status_code == 401


def test_login_returns_token_with_user_claims(client, create_user):
    user = create_user(email="ivan@mail.com", password="right-password")

    response = client.post(f"{API}/auth/login", json={"email": "ivan@mail.com", "password": "right-password"})
    assert response.status_code == 200
    data = response.json()["responseData"]
    assert data["token_type"] == "bearer"
    assert data["user"]["id"] == user["id"]
    assert "password_hash" not in data["user"]

    claims = decode_access_token(data["token"])
    assert claims["userId"] == user["id"]
    assert claims["role"] == "user"
    assert claims["isVerified"] is False
    assert "exp" in claims


def test_password_hash_is_salted():
    first = hash_password("secret123")
    second = hash_password("secret123")

    assert first != second
    assert "secret123" not in first
    assert verify_password("secret123", first)
    assert verify_password("secret123", second)
    assert not verify_password("secret124", first)
    assert not verify_password("secret123", "plain-text")


@pytest.mark.parametrize("method,path,policy", [
    ("POST", "/api/v1/auth/login", Policy.PUBLIC),
    ("POST", "/api/v1/auth/register", Policy.PUBLIC),
    ("GET", "/api/v1/products", Policy.PUBLIC),
    ("GET", "/api/v1/products/featured-products/3", Policy.PUBLIC),
    ("POST", "/api/v1/products", Policy.AUTHENTICATED),
    ("GET", "/api/v1/users", Policy.AUTHENTICATED),
    ("GET", "/api/v1/orders/total-sales", Policy.AUTHENTICATED),
])
def test_route_policy_table(method, path, policy):
    assert policy_for(method, path) is policy


@pytest.fixture
def enforced(monkeypatch):
    monkeypatch.setattr(settings, "auth_enforced", True)


def test_public_routes_need_no_token(client, enforced):
    assert client.get(f"{API}/products").status_code == 200
    assert client.get(f"{API}/products/get-count").status_code == 200


def test_protected_routes_require_token(client, enforced):
    response = client.get(f"{API}/users")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert response.json()["success"] is False

    response = client.post(f"{API}/categories", json={"name": "Tea", "created_by": "admin"})
    assert response.status_code == 401


def test_token_opens_protected_routes(client, enforced):
    client.post(f"{API}/auth/register", json={
        "username": "ivan", "email": "ivan@mail.com", "password": "secret123",
        "first_name": "Ivan", "last_name": "Petrov", "sex": "male", "phone_number": "+79990000000",
    })
    login = client.post(f"{API}/auth/login", json={"email": "ivan@mail.com", "password": "secret123"})
    token = login.json()["responseData"]["token"]

    response = client.get(f"{API}/users", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
    assert response.json()["total"] == 1


def test_bad_tokens_are_rejected(client, enforced):
    expired = create_access_token({"userId": "x", "role": "user"}, expires_delta=timedelta(minutes=-5))
    no_role = create_access_token({"userId": "x"})

    for token in (expired, no_role, "garbage"):
        response = client.get(f"{API}/users", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


async def _skip_uniqueness_check(*args, **kwargs):
    return None


def test_duplicate_caught_by_database_constraint(client, monkeypatch, create_user):
    create_user(username="taken", email="taken@mail.com")
    monkeypatch.setattr(user_functions, "_ensure_unique", _skip_uniqueness_check)

    response = client.post(f"{API}/auth/register", json={
        "username": "other", "email": "taken@mail.com", "password": "secret123",
        "first_name": "Petr", "last_name": "Ivanov", "sex": "male", "phone_number": "+79991111111",
    })
    assert response.status_code == 400
    assert response.json()["error"] == "Username or email already exists"
    assert client.get(f"{API}/users/get-count").json()["responseData"] == 1


def test_update_to_taken_username_caught_by_database_constraint(client, monkeypatch, create_user):
    create_user(username="taken")
    user = create_user(username="free")
    monkeypatch.setattr(user_functions, "_ensure_unique", _skip_uniqueness_check)

    response = client.put(f"{API}/users/{user['id']}", json={"username": "taken"})
    assert response.status_code == 400
    assert client.get(f"{API}/users/{user['id']}").json()["responseData"]["username"] == "free"
