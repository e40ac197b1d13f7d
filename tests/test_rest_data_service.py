"""
RestDataService against a recorded fake session: checks the URLs, query
parameters and headers it sends, and how failures surface.
"""

import pytest
import requests

from dealership.exceptions import DataServiceError
from dealership.models.query import Query
from dealership.models.rest import RestDataService


class FakeResponse:
    def __init__(self, status=200, payload=None):
        self.status_code = status
        self._payload = payload
        self.ok = status < 400
        self.content = b"" if payload is None else b"x"
        self.text = str(payload)

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, *responses):
        self.headers = {}
        self.calls = []
        self.responses = list(responses)

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


def _service(*responses):
    sess = FakeSession(*responses)
    return RestDataService("https://baas.example.com/", "anon-key", session=sess), sess


def test_requires_configuration():
    with pytest.raises(DataServiceError):
        RestDataService("", "")


def test_auth_headers_set_on_session():
    _, sess = _service()
    assert sess.headers["apikey"] == "anon-key"
    assert sess.headers["Authorization"] == "Bearer anon-key"


def test_select_sends_postgrest_params():
    svc, sess = _service(FakeResponse(payload=[{"id": 1, "brand": "Toyota"}]))
    rows = svc.select(Query("vehicles").where(published=True).order("year", descending=True))
    assert rows == [{"id": 1, "brand": "Toyota"}]
    method, url, kwargs = sess.calls[0]
    assert method == "GET"
    assert url == "https://baas.example.com/rest/v1/vehicles"
    assert ("published", "eq.true") in kwargs["params"]
    assert ("order", "year.desc.nullslast") in kwargs["params"]


def test_get_returns_none_when_empty():
    svc, _ = _service(FakeResponse(payload=[]))
    assert svc.get("vehicles", 5) is None


def test_insert_asks_for_representation():
    svc, sess = _service(FakeResponse(201, [{"id": 7, "name": "Detailing"}]))
    row = svc.insert("services", {"name": "Detailing"})
    assert row["id"] == 7
    method, _, kwargs = sess.calls[0]
    assert method == "POST"
    assert kwargs["json"] == [{"name": "Detailing"}]
    assert kwargs["headers"]["Prefer"] == "return=representation"


def test_delete_where_counts_returned_rows():
    svc, sess = _service(FakeResponse(payload=[{"id": 1}, {"id": 2}]))
    assert svc.delete_where("user_favorites", vehicle_id=3) == 2
    method, _, kwargs = sess.calls[0]
    assert method == "DELETE"
    assert kwargs["params"] == [("vehicle_id", "eq.3")]


def test_error_message_is_passed_through():
    svc, _ = _service(FakeResponse(409, {"message": "duplicate key value"}))
    with pytest.raises(DataServiceError) as exc:
        svc.insert("newsletter_subscriptions", {"email": "a@b.cl"})
    assert "duplicate key value" in exc.value.message


def test_network_failure_becomes_data_service_error():
    svc, _ = _service(requests.ConnectionError("boom"))
    with pytest.raises(DataServiceError):
        svc.select(Query("vehicles"))


def test_upload_returns_public_url():
    svc, sess = _service(FakeResponse(payload={"Key": "vehicle-images/a.jpg"}))
    url = svc.upload("vehicle-images", "a.jpg", b"data", "image/jpeg")
    assert url == "https://baas.example.com/storage/v1/object/public/vehicle-images/a.jpg"
    _, called_url, kwargs = sess.calls[0]
    assert called_url == "https://baas.example.com/storage/v1/object/vehicle-images/a.jpg"
    assert kwargs["headers"]["Content-Type"] == "image/jpeg"


def test_search_term_with_reserved_characters_is_quoted():
    """Commas, parentheses and quotes in a search stay inside one ilike value."""
    svc, sess = _service(FakeResponse(payload=[]))
    svc.select(Query("vehicles").ilike_any('a,b) "x\\', "brand", "model"))
    params = dict(sess.calls[0][2]["params"])
    assert params["or"] == '(brand.ilike."*a,b) \\"x\\\\*",model.ilike."*a,b) \\"x\\\\*")'
