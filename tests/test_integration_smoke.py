"""
Public JSON endpoints over HTTP: catalog, detail, compare, favorites and forms.
"""

from datetime import timedelta

import pytest

from conftest import add_vehicle
from dealership.utils.constants import Table
from dealership.utils.filters import local_today


@pytest.fixture
def inventory(store):
    for i in range(12):
        add_vehicle(store, brand="Toyota" if i % 3 == 0 else "Kia", model=f"M{i}",
                    year=2012 + i, price=5_000_000 + i * 1_000_000, type="SUV" if i % 2 else "Sedán")
    return store


def test_vehicle_list(client, inventory):
    r = client.get("/api/vehicles?brand=Toyota&type=Todos")
    assert r.status_code == 200
    years = [v["year"] for v in r.get_json()["vehicles"]]
    assert years == sorted(years, reverse=True) and len(years) == 4


def test_catalog_pagination(client, inventory):
    first = client.get("/api/vehicles/catalog").get_json()
    assert first["total"] == 12 and first["page_count"] == 2
    assert len(first["vehicles"]) == 9

    last = client.get("/api/vehicles/catalog?page=99").get_json()
    assert last["page"] == 2 and len(last["vehicles"]) == 3

    kia = client.get("/api/vehicles/catalog?brand=Kia&minPrice=10000000").get_json()
    assert all(v["brand"] == "Kia" and v["price"] >= 10_000_000 for v in kia["vehicles"])
    assert kia["options"]["brands"] == ["Kia", "Toyota"]


def test_vehicle_detail_and_not_found(client, inventory):
    assert client.get("/api/vehicles/1").get_json()["vehicle"]["model"] == "M0"
    r = client.get("/api/vehicles/999")
    assert r.status_code == 404
    assert "error" in r.get_json()


def test_compare_requires_ids(client, inventory):
    assert client.get("/api/vehicles/compare").status_code == 400
    rows = client.get("/api/vehicles/compare?ids=2,1").get_json()["vehicles"]
    assert [v["id"] for v in rows] == [2, 1]


def test_featured(client, inventory):
    assert len(client.get("/api/vehicles/featured").get_json()["vehicles"]) == 3


def test_favorites_anonymous(client, inventory):
    assert client.get("/api/favorites").get_json() == {"favorites": []}
    assert client.post("/api/favorites", json={"vehicleId": 1}).status_code == 401


def test_favorites_toggle(user_client, inventory):
    r = user_client.post("/api/favorites", json={"vehicleId": 1})
    assert r.status_code == 200
    assert r.get_json()["favorites"] == [1]
    assert user_client.get("/api/favorites").get_json()["favorites"] == [1]

    r = user_client.post("/api/favorites", json={"vehicleId": 1})
    assert r.get_json()["favorites"] == []


@pytest.mark.parametrize("payload", [{}, {"vehicleId": "1"}, {"vehicleId": True}])
def test_favorites_bad_vehicle_id(user_client, inventory, payload):
    assert user_client.post("/api/favorites", json=payload).status_code == 400


def test_test_drive_booking(client, inventory, store):
    form = {
        "vehicle_id": 1,
        "date": (local_today() + timedelta(days=2)).isoformat(),
        "time": "11:00",
        "name": "Ana",
        "email": "ana@mail.cl",
    }
    r = client.post("/api/test-drive", json=form)
    assert r.status_code == 201
    assert r.get_json()["success"] is True

    r = client.post("/api/test-drive", json={**form, "email": ""})
    assert r.status_code == 400
    assert len(store.tables[Table.TEST_DRIVES]) == 1


def test_contact_and_newsletter(client, store):
    r = client.post("/api/contact", json={"name": "Ana", "email": "ana@mail.cl", "message": "Hola"})
    assert r.status_code == 200 and r.get_json()["success"]
    assert client.post("/api/contact", data="not json").status_code == 400

    assert client.post("/api/newsletter", json={"email": "ana@mail.cl"}).status_code == 200
    assert client.post("/api/newsletter", json={"email": "ana@mail.cl"}).status_code == 400


def test_financing_endpoints(client, store):
    r = client.post("/api/financing/quote", json={"price": 10_000_000, "down_payment": 2_000_000})
    quote = r.get_json()["quote"]
    assert quote["months"] == 48 and quote["loan_amount"] == 8_000_000

    r = client.post("/api/financing/apply", json={
        "rut": "12345678-5", "email": "ana@mail.cl", "phone": "912345678",
        "net_income": 900_000, "employment_status": "independiente",
    })
    assert r.status_code == 201
    assert r.get_json()["data"]["quote"] is None


def test_unknown_route_is_json_404(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert "error" in r.get_json()


@pytest.mark.parametrize("payload", [
    {"price": "nan"},
    {"price": 10_000_000, "annual_rate": "inf"},
])
def test_financing_quote_non_finite_is_400(client, payload):
    r = client.post("/api/financing/quote", json=payload)
    assert r.status_code == 400
    assert r.get_json()["fields"]


def test_newsletter_numeric_interests_is_400(client):
    r = client.post("/api/newsletter", json={"email": "x@y.cl", "interests": 5})
    assert r.status_code == 400
    assert "interests" in r.get_json()["fields"]


def test_unpublished_vehicle_hidden_from_public(client, store):
    add_vehicle(store, brand="Kia", model="Borrador", year=2024, price=9_990_000, published=False)
    assert client.get("/api/vehicles/1").status_code == 404
    assert client.get("/api/vehicles/compare?ids=1").get_json()["vehicles"] == []


def test_unpublished_vehicle_visible_to_admin(admin_client, store):
    add_vehicle(store, brand="Kia", model="Borrador", year=2024, price=9_990_000, published=False)
    assert admin_client.get("/api/vehicles/1").get_json()["vehicle"]["model"] == "Borrador"
    assert len(admin_client.get("/api/vehicles/compare?ids=1").get_json()["vehicles"]) == 1
