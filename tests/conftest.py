import sys, pathlib

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import pytest

from dealership.models.store import Store
from dealership.models.vehicle import Vehicle
from dealership.utils.constants import Table, Role


@pytest.fixture
def store(tmp_path, monkeypatch):
    """
    A fresh file-backed Store under tmp_path, installed as the active data
    service so services called without ``store=`` use it too.
    """
    from dealership.services import common as common_mod

    st = Store(tmp_path / "data.pkl", upload_dir=tmp_path / "uploads")
    monkeypatch.setattr(common_mod, "_data_service", st)
    return st


@pytest.fixture
def app(store, tmp_path):
    from dealership import create_app
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test",
        "UPLOAD_DIR": str(tmp_path / "uploads"),
        "ADMIN_EMAIL": "owner@dealer.cl",
    }, data_service=store)
    return app


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c


def add_vehicle(store, **fields):
    """Insert a canonical vehicle row directly and return it."""
    return store.insert(Table.VEHICLES, Vehicle(**fields).to_dict())


def make_user(store, email="ana@mail.cl", password="Secret123", role=Role.USER):
    from dealership.services.user_service import UserService
    return UserService.create_user(email, password, name="Ana", role=role, store=store)


def login(client, email, password="Secret123"):
    return client.post("/api/auth/login", json={"email": email, "password": password})


@pytest.fixture
def admin_client(client, store):
    make_user(store, "owner@dealer.cl", role=Role.USER)  # admin via ADMIN_EMAIL
    r = login(client, "owner@dealer.cl")
    assert r.status_code == 200
    return client


@pytest.fixture
def user_client(client, store):
    make_user(store, "ana@mail.cl")
    r = login(client, "ana@mail.cl")
    assert r.status_code == 200
    return client
