from __future__ import annotations

import logging
from typing import Optional

from dealership.exceptions import ServiceNotFoundError, ServiceLimitError, ValidationError
from dealership.models.query import Query
from dealership.models.service import Service, clean_service_payload
from dealership.services.common import _store, parse_id
from dealership.utils.constants import Table, Bucket, MAX_SERVICES
from dealership.utils.filters import utc_now_iso
from dealership.utils.optimistic import optimistic

logger = logging.getLogger(__name__)


class ServiceService:
    """Workshop services listing and admin CRUD."""

    @staticmethod
    def get_all_services(*, store=None) -> list[dict]:
        st = store or _store()
        rows = st.select(Query(Table.SERVICES).order("id"))
        return [Service.from_record(r).to_dict() for r in rows]

    @staticmethod
    def get_service(sid, *, store=None) -> dict:
        st = store or _store()
        row_id = parse_id(sid)
        row = st.get(Table.SERVICES, row_id) if row_id is not None else None
        if row is None:
            raise ServiceNotFoundError(f"Error: service with ID '{sid}' not found")
        return Service.from_record(row).to_dict()

    @staticmethod
    def add_service(payload: dict, *, store=None) -> dict:
        st = store or _store()
        record = Service(**clean_service_payload(payload)).to_dict()
        record["created_at"] = utc_now_iso()
        row = st.insert(Table.SERVICES, record)
        logger.info("Service %s created: %s", row["id"], row.get("name"))
        return Service.from_record(row).to_dict()

    @staticmethod
    def admin_add_service(payload: dict, *, store=None) -> dict:
        """The admin 'add service' path keeps the public listing at MAX_SERVICES entries."""
        st = store or _store()
        if len(st.select(Query(Table.SERVICES))) >= MAX_SERVICES:
            raise ServiceLimitError(f"Error: no more than {MAX_SERVICES} services can be added")
        return ServiceService.add_service(payload, store=st)

    @staticmethod
    def update_service(sid, payload: dict, *, store=None) -> dict:
        st = store or _store()
        row_id = parse_id(sid)
        if row_id is None or st.get(Table.SERVICES, row_id) is None:
            raise ServiceNotFoundError(f"Error: service with ID '{sid}' not found")
        changes = clean_service_payload(payload, partial=True)
        if not changes:
            raise ValidationError("Error: nothing to update")
        row = st.update(Table.SERVICES, row_id, changes)
        if row is None:
            raise ServiceNotFoundError(f"Error: service with ID '{sid}' not found")
        return Service.from_record(row).to_dict()

    @staticmethod
    def delete_service(sid, *, store=None) -> None:
        st = store or _store()
        row_id = parse_id(sid)
        if row_id is None or not st.delete(Table.SERVICES, row_id):
            raise ServiceNotFoundError(f"Error: service with ID '{sid}' not found")
        logger.info("Service %s deleted", row_id)

    @staticmethod
    def upload_image(filename: str, data: bytes, content_type: Optional[str] = None, *, store=None) -> str:
        st = store or _store()
        return st.upload(Bucket.SERVICE_IMAGES, filename, data, content_type)


class ServiceListState:
    """Admin services list with optimistic delete."""

    def __init__(self, services: list[dict], store=None):
        self.services = list(services)
        self.store = store

    def delete(self, sid) -> None:
        """Drop the row locally first; put it back where it was if the delete fails."""
        before = list(self.services)

        def apply():
            self.services = [s for s in self.services if s.get("id") != sid]

        def compensate():
            self.services = before

        optimistic(apply, lambda: ServiceService.delete_service(sid, store=self.store), compensate)
