"""
Data service backed by a hosted BaaS speaking PostgREST (rows) and a
storage API (blobs). Exposes the same methods as ``Store``.
"""
from __future__ import annotations

import logging
from typing import Optional

import requests

from dealership.exceptions import DataServiceError
from dealership.models.query import Query

logger = logging.getLogger(__name__)


class RestDataService:
    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        if not base_url or not api_key:
            raise DataServiceError("Error: BAAS_URL and BAAS_KEY must be configured")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
        })

    # ---------- plumbing ----------
    def _rows_url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _request(self, method: str, url: str, **kwargs):
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("Data service %s %s failed: %s", method, url, e)
            raise DataServiceError(f"Error: data service unreachable ({e})") from e
        if not resp.ok:
            try:
                detail = resp.json().get("message") or resp.text
            except ValueError:
                detail = resp.text
            logger.error("Data service %s %s -> %s: %s", method, url, resp.status_code, detail)
            raise DataServiceError(f"Error: {detail}")
        if not resp.content:
            return None
        return resp.json()

    # ---------- Rows ----------
    def select(self, query: Query) -> list[dict]:
        return self._request("GET", self._rows_url(query.table), params=query.to_params()) or []

    def get(self, table: str, row_id) -> dict | None:
        rows = self.select(Query(table).where(id=row_id).take(1))
        return rows[0] if rows else None

    def insert(self, table: str, record: dict) -> dict:
        rows = self._request(
            "POST", self._rows_url(table), json=[record],
            headers={"Prefer": "return=representation"},
        )
        if not rows:
            raise DataServiceError(f"Error: insert into '{table}' returned no row")
        return rows[0]

    def update(self, table: str, row_id, changes: dict) -> dict | None:
        rows = self._request(
            "PATCH", self._rows_url(table), params=[("id", f"eq.{row_id}")], json=changes,
            headers={"Prefer": "return=representation"},
        )
        return rows[0] if rows else None

    def delete(self, table: str, row_id) -> bool:
        return self.delete_where(table, id=row_id) > 0

    def delete_where(self, table: str, **conditions) -> int:
        params = Query(table).where(**conditions).to_params()[1:]  # no "select"
        rows = self._request(
            "DELETE", self._rows_url(table), params=params,
            headers={"Prefer": "return=representation"},
        )
        return len(rows or [])

    # ---------- Blobs ----------
    def upload(self, bucket: str, path: str, data: bytes, content_type: str | None = None) -> str:
        headers = {"x-upsert": "true", "cache-control": "3600"}
        if content_type:
            headers["Content-Type"] = content_type
        self._request("POST", f"{self.base_url}/storage/v1/object/{bucket}/{path}",
                      data=data, headers=headers)
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{path}"
