import uuid

import pytest

from conftest import API

HOME = {"street_address": "Lenina 1", "city": "Moscow", "state": "Moscow", "postal_code": "101000", "country": "RU"}
WORK = {"street_address": "Nevsky 10", "city": "Saint Petersburg", "state": None, "postal_code": "190000",
        "country": "RU"}
MIRRORED = ("street_address", "city", "state", "postal_code", "country")


@pytest.fixture
def user(create_user):
    return create_user()


def _billing(client, user_id, **overrides):
    payload = {"user_id": user_id, "street_address": "Old street 5", "city": "Kazan", "postal_code": "420000",
               "country": "RU"}
    payload.update(overrides)
    response = client.post(f"{API}/billing-address", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["responseData"]


def _add_address(client, user_id, address, is_default):
    response = client.post(f"{API}/address/{user_id}", json={**address, "is_default": is_default})
    assert response.status_code == 201, response.text
    return response.json()["responseData"]


def _stored_billing(client, user_id):
    response = client.get(f"{API}/billing-address/{user_id}")
    assert response.status_code == 200
    return response.json()["responseData"]


def test_default_address_is_mirrored_into_billing(client, user):
    billing = _billing(client, user["id"])

    _add_address(client, user["id"], HOME, is_default=True)

    stored = _stored_billing(client, user["id"])
    assert stored["id"] == billing["id"]
    assert {f: stored[f] for f in MIRRORED} == HOME


def test_mirror_never_creates_billing(client, user):
    _add_address(client, user["id"], HOME, is_default=True)

    assert client.get(f"{API}/billing-address").json()["total"] == 0
    assert client.get(f"{API}/billing-address/{user['id']}").status_code == 404


def test_non_default_address_leaves_billing_alone(client, user):
    billing = _billing(client, user["id"])

    _add_address(client, user["id"], WORK, is_default=False)

    stored = _stored_billing(client, user["id"])
    assert stored["street_address"] == billing["street_address"]
    assert stored["city"] == "Kazan"


def test_marking_address_default_mirrors_and_clears_others(client, user):
    _billing(client, user["id"])
    home = _add_address(client, user["id"], HOME, is_default=True)
    work = _add_address(client, user["id"], WORK, is_default=False)

    response = client.put(f"{API}/address/{user['id']}/{work['id']}", json={"is_default": True})
    assert response.status_code == 200
    assert response.json()["responseData"]["is_default"] is True

    stored = _stored_billing(client, user["id"])
    assert {f: stored[f] for f in MIRRORED} == WORK

    addresses = {a["id"]: a for a in client.get(f"{API}/address/{user['id']}").json()["responseData"]}
    assert addresses[home["id"]]["is_default"] is False
    assert addresses[work["id"]]["is_default"] is True

    profile = client.get(f"{API}/users/{user['id']}").json()["responseData"]
    assert profile["address"]["id"] == work["id"]


def test_editing_default_address_without_flag_does_not_mirror(client, user):
    _billing(client, user["id"])
    home = _add_address(client, user["id"], HOME, is_default=True)

    response = client.put(f"{API}/address/{user['id']}/{home['id']}", json={"city": "Tver"})
    assert response.status_code == 200
    assert response.json()["responseData"]["city"] == "Tver"

    assert _stored_billing(client, user["id"])["city"] == "Moscow"


def test_resending_default_flag_does_not_mirror(client, user):
    home = _add_address(client, user["id"], HOME, is_default=True)
    _billing(client, user["id"])

    response = client.put(f"{API}/address/{user['id']}/{home['id']}", json={"is_default": True, "city": "Tver"})
    assert response.status_code == 200
    assert response.json()["responseData"]["city"] == "Tver"

    stored = _stored_billing(client, user["id"])
    assert stored["city"] == "Kazan"
    assert stored["street_address"] == "Old street 5"


def test_empty_address_update_returns_no_content(client, user):
    home = _add_address(client, user["id"], HOME, is_default=False)

    response = client.put(f"{API}/address/{user['id']}/{home['id']}", json={})
    assert response.status_code == 204
    assert response.content == b""


def test_new_address_becomes_current_address(client, user):
    _add_address(client, user["id"], HOME, is_default=False)
    work = _add_address(client, user["id"], WORK, is_default=False)

    profile = client.get(f"{API}/users/{user['id']}").json()["responseData"]
    assert profile["address"]["id"] == work["id"]


def test_delete_address(client, user):
    home = _add_address(client, user["id"], HOME, is_default=False)

    assert client.delete(f"{API}/address/{user['id']}/{home['id']}").status_code == 200
    assert client.get(f"{API}/address/{user['id']}").json()["total"] == 0
    assert client.get(f"{API}/users/{user['id']}").json()["responseData"]["address"] is None


def test_address_of_another_user_is_not_found(client, create_user):
    owner = create_user()
    stranger = create_user()
    home = _add_address(client, owner["id"], HOME, is_default=False)

    response = client.put(f"{API}/address/{stranger['id']}/{home['id']}", json={"city": "Tver"})
    assert response.status_code == 404


def test_address_for_missing_user(client):
    response = client.post(f"{API}/address/{uuid.uuid4()}", json=HOME)
    assert response.status_code == 404


def test_address_requires_fields(client, user):
    response = client.post(f"{API}/address/{user['id']}", json={"city": "Moscow"})
    assert response.status_code == 400


def test_one_billing_per_user(client, user):
    _billing(client, user["id"])
    response = client.post(f"{API}/billing-address", json={
        "user_id": user["id"], "street_address": "x", "city": "y", "postal_code": "1", "country": "RU",
    })
    assert response.status_code == 400


def test_sync_copies_default_address(client, user):
    _add_address(client, user["id"], HOME, is_default=True)
    _billing(client, user["id"])

    response = client.put(f"{API}/billing-address/{user['id']}/sync")
    assert response.status_code == 200
    synced = response.json()["responseData"]
    assert {f: synced[f] for f in MIRRORED} == HOME

    # повторный вызов ничего не меняет
    again = client.put(f"{API}/billing-address/{user['id']}/sync").json()["responseData"]
    assert {f: again[f] for f in MIRRORED} == HOME


def test_sync_without_billing_is_a_noop(client, user):
    _add_address(client, user["id"], HOME, is_default=True)

    response = client.put(f"{API}/billing-address/{user['id']}/sync")
    assert response.status_code == 200
    assert response.json()["responseData"] is None
    assert client.get(f"{API}/billing-address").json()["total"] == 0
