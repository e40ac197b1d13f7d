"""
Unit tests for the Query value object and the file-backed Store.
"""

import pickle

import pytest

from dealership.models.query import Query
from dealership.models.store import Store
from dealership.utils.constants import Table


ROWS = [
    {"id": 1, "brand": "Toyota", "model": "Corolla", "year": 2019, "price": 12_990_000, "published": True},
    {"id": 2, "brand": "Honda", "model": "Civic", "year": None, "price": 14_990_000, "published": True},
    {"id": 3, "brand": "Subaru", "model": "WRX", "year": 2017, "price": "17990000", "published": False},
]


def test_query_run_filters_orders_and_limits():
    q = Query(Table.VEHICLES).where(published=True).order("year", descending=True)
    assert [r["id"] for r in q.run(ROWS)] == [1, 2]  # null year sorts last

    q = Query(Table.VEHICLES).between("price", 13_000_000, None)
    assert [r["id"] for r in q.run(ROWS)] == [2, 3]  # numeric strings compare as numbers

    q = Query(Table.VEHICLES).between("year", 2000).take(5)
    assert [r["id"] for r in q.run(ROWS)] == [1, 3]

    q = Query(Table.VEHICLES).ilike_any("CIV", "brand", "model").take(0)
    assert q.run(ROWS) == []


def test_query_run_returns_copies():
    out = Query(Table.VEHICLES).run(ROWS)
    out[0]["brand"] = "changed"
    assert ROWS[0]["brand"] == "Toyota"


def test_query_to_params():
    q = (Query(Table.VEHICLES)
         .where(published=True, brand="Toyota")
         .between("price", 0, 20_000_000)
         .ilike_any("rav", "brand", "model")
         .order("year", descending=True)
         .take(9))
    assert q.to_params() == [
        ("select", "*"),
        ("published", "eq.true"),
        ("brand", "eq.Toyota"),
        ("price", "gte.0"),
        ("price", "lte.20000000"),
        ("or", '(brand.ilike."*rav*",model.ilike."*rav*")'),
        ("order", "year.desc.nullslast"),
        ("limit", 9),
    ]


def test_store_crud_and_persistence(tmp_path):
    path = tmp_path / "data.pkl"
    st = Store(path, upload_dir=tmp_path / "uploads")

    a = st.insert(Table.SERVICES, {"name": "Mantención"})
    b = st.insert(Table.SERVICES, {"name": "Detailing"})
    assert (a["id"], b["id"]) == (1, 2)

    assert st.update(Table.SERVICES, 1, {"name": "Mantención general", "id": 77})["id"] == 1
    assert st.update(Table.SERVICES, 99, {"name": "x"}) is None
    assert st.delete(Table.SERVICES, 2) is True
    assert st.delete(Table.SERVICES, 2) is False

    user = st.insert(Table.USERS, {"email": "a@b.cl"})
    assert isinstance(user["id"], str)

    reloaded = Store(path, upload_dir=tmp_path / "uploads")
    assert reloaded.get(Table.SERVICES, 1)["name"] == "Mantención general"
    assert reloaded.get(Table.SERVICES, 2) is None
    # the counter survives a reload, so ids are never reused
    assert reloaded.insert(Table.SERVICES, {"name": "Nuevo"})["id"] == 3


def test_store_delete_where(store):
    store.insert(Table.FAVORITES, {"user_id": "u1", "vehicle_id": 1})
    store.insert(Table.FAVORITES, {"user_id": "u1", "vehicle_id": 2})
    store.insert(Table.FAVORITES, {"user_id": "u2", "vehicle_id": 1})
    assert store.delete_where(Table.FAVORITES, vehicle_id=1) == 2
    assert [r["vehicle_id"] for r in store.select(Query(Table.FAVORITES))] == [2]


def test_store_backs_up_incompatible_file(tmp_path):
    path = tmp_path / "data.pkl"
    with open(path, "wb") as f:
        pickle.dump(["not", "a", "store"], f)
    st = Store(path, upload_dir=tmp_path / "uploads")
    assert st.select(Query(Table.VEHICLES)) == []
    assert (tmp_path / "data.pkl.bak").exists()


def test_store_upload_rejects_traversal(store):
    with pytest.raises(ValueError):
        store.upload("vehicle-images", "../../evil.txt", b"x")
