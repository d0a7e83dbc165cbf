import itertools
import os
import tempfile

import pytest

_tmpdir = tempfile.mkdtemp(prefix="shop-tests-")
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_tmpdir, 'shop_test.db')}"
os.environ["AUTH_ENFORCED"] = "false"
os.environ["ORDER_STATUS_POLICY"] = "strict"
os.environ["API_URL"] = "/api/v1"

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import event  # noqa: E402

from shop_service.db.database import engine, Base  # noqa: E402
from shop_service.main import app  # noqa: E402

API = "/api/v1"


# SQLite проверяет внешние ключи только по явному PRAGMA, как Postgres по умолчанию
@event.listens_for(engine.sync_engine, "connect")
def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async def _drop_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
        # каждый тест начинает с пустой базы
        c.portal.call(_drop_tables)


def _created(response):
    assert response.status_code == 201, response.text
    return response.json()["responseData"]


@pytest.fixture
def create_user(client):
    counter = itertools.count(1)

    def _create(**overrides):
        n = next(counter)
        payload = {
            "username": f"user{n}",
            "email": f"user{n}@mail.com",
            "password": "secret123",
            "first_name": "Ivan",
            "last_name": "Petrov",
            "sex": "male",
            "phone_number": "+79990000000",
        }
        payload.update(overrides)
        return _created(client.post(f"{API}/auth/register", json=payload))

    return _create


@pytest.fixture
def create_category(client):
    counter = itertools.count(1)

    def _create(**overrides):
        payload = {"name": f"Category {next(counter)}", "description": "Test category", "created_by": "admin"}
        payload.update(overrides)
        return _created(client.post(f"{API}/categories", json=payload))

    return _create


@pytest.fixture
def create_product(client, create_category):
    def _create(category_id=None, **overrides):
        if category_id is None:
            category_id = create_category()["id"]
        payload = {
            "name": "Tea",
            "description": "Green tea",
            "price": "19.99",
            "stock_quantity": 10,
            "brand": "Lakomka",
            "category_id": category_id,
            "created_by": "admin",
        }
        payload.update(overrides)
        return _created(client.post(f"{API}/products", json=payload))

    return _create


@pytest.fixture
def create_order_item(client, create_product):
    def _create(product_id=None, quantity=1, **overrides):
        if product_id is None:
            product_id = create_product()["id"]
        payload = {"product_id": product_id, "quantity": quantity, "created_by": "tester"}
        payload.update(overrides)
        return _created(client.post(f"{API}/order-items", json=payload))

    return _create


@pytest.fixture
def create_order(client, create_user):
    def _create(item_ids, user_id=None, **overrides):
        if user_id is None:
            user_id = create_user()["id"]
        payload = {"user_id": user_id, "order_item": item_ids, "created_by": "tester"}
        payload.update(overrides)
        return _created(client.post(f"{API}/orders", json=payload))

    return _create
