from __future__ import annotations

import logging
import math
from typing import Optional

from dealership.exceptions import VehicleNotFoundError, ValidationError
from dealership.models.query import Query
from dealership.models.vehicle import Vehicle, clean_vehicle_payload
from dealership.services.catalog import CatalogState, FilterCriteria
from dealership.services.common import _store, parse_id, to_float_safe, to_int_safe
from dealership.utils.constants import Table, Bucket, WILDCARD, FEATURED_COUNT
from dealership.utils.filters import utc_now_iso

logger = logging.getLogger(__name__)


def _canonical(row: dict) -> dict:
    return Vehicle.from_record(row).to_dict()


class VehicleService:
    """Vehicle catalogue: query, create, update, delete, images."""

    @staticmethod
    def get_all_vehicles(*, include_unpublished: bool = False, store=None) -> list[dict]:
        """Whole inventory, newest first."""
        st = store or _store()
        q = Query(Table.VEHICLES).order("created_at", descending=True)
        if not include_unpublished:
            q.where(published=True)
        return [_canonical(r) for r in st.select(q)]

    @staticmethod
    def get_vehicle(vid, *, include_unpublished: bool = False, store=None) -> dict:
        """Return a vehicle dict by ID or raise VehicleNotFoundError (drafts count as missing)."""
        st = store or _store()
        row_id = parse_id(vid)
        row = st.get(Table.VEHICLES, row_id) if row_id is not None else None
        if row is None or not (include_unpublished or row.get("published")):
            raise VehicleNotFoundError(f"Error: vehicle with ID '{vid}' not found")
        return _canonical(row)

    @staticmethod
    def search_vehicles(args, *, store=None) -> list[dict]:
        """
        Build one data-service query from API query args:
        brand/type/transmission/fuel equality (wildcard ignored), open or
        closed price/year ranges, brand/model text search, featured flag and
        limit. Ordered by year, newest first.
        """
        st = store or _store()
        q = Query(Table.VEHICLES).where(published=True)

        for name in ("brand", "type", "transmission", "fuel"):
            value = (args.get(name) or "").strip()
            if value and value != WILDCARD:
                q.where(**{name: value})

        q.between("price", to_float_safe(args.get("minPrice")), to_float_safe(args.get("maxPrice")))
        q.between("year", to_int_safe(args.get("minYear")), to_int_safe(args.get("maxYear")))

        search = (args.get("search") or "").strip()
        if search:
            q.ilike_any(search, "brand", "model")

        if str(args.get("featured") or "").lower() == "true":
            q.where(featured=True)

        limit = to_int_safe(args.get("limit"))
        if limit is not None and limit > 0:
            q.take(limit)

        q.order("year", descending=True)
        return [_canonical(r) for r in st.select(q)]

    @staticmethod
    def filter_vehicles(criteria: FilterCriteria, *, store=None) -> list[dict]:
        """Push the composer's criteria down to the data service as one query."""
        st = store or _store()
        q = Query(Table.VEHICLES).where(published=True)
        for name in ("brand", "type", "transmission", "fuel"):
            value = getattr(criteria, name)
            if value and value != WILDCARD:
                q.where(**{name: value})
        for column, (low, high) in (("price", criteria.price_range), ("year", criteria.year_range)):
            # the lower bound is always sent so rows without a value are excluded
            q.between(column, low, None if math.isinf(high) else high)
        if criteria.search:
            q.ilike_any(criteria.search, "brand", "model")
        return [_canonical(r) for r in st.select(q)]

    @staticmethod
    def browse(args, *, store=None) -> dict:
        """Catalog page: load published inventory, then filter, page and derive options."""
        state = CatalogState(VehicleService.get_all_vehicles(store=store),
                             criteria=FilterCriteria.from_args(args))
        state.set_page(to_int_safe(args.get("page")) or 1)
        return state.snapshot()

    @staticmethod
    def get_featured_vehicles(count: int = FEATURED_COUNT, *, store=None) -> list[dict]:
        st = store or _store()
        q = Query(Table.VEHICLES).where(published=True, featured=True).take(count)
        rows = st.select(q)
        if not rows:
            # no vehicle flagged yet: fall back to any published ones
            rows = st.select(Query(Table.VEHICLES).where(published=True).take(count))
        return [_canonical(r) for r in rows]

    @staticmethod
    def compare_vehicles(ids, *, include_unpublished: bool = False, store=None) -> list[dict]:
        """Vehicles for the comparison table, in the requested order; unknown IDs and drafts skipped."""
        st = store or _store()
        out = []
        for raw in ids:
            row_id = parse_id(raw)
            row = st.get(Table.VEHICLES, row_id) if row_id is not None else None
            if row is not None and (include_unpublished or row.get("published")):
                out.append(_canonical(row))
        return out

    @staticmethod
    def admin_create_vehicle(payload: dict, *, store=None) -> dict:
        st = store or _store()
        data = clean_vehicle_payload(payload)
        record = Vehicle(**data).to_dict()
        record["created_at"] = utc_now_iso()
        row = st.insert(Table.VEHICLES, record)
        logger.info("Vehicle %s created: %s %s", row["id"], row.get("brand"), row.get("model"))
        return _canonical(row)

    @staticmethod
    def update_vehicle(vid, payload: dict, *, store=None) -> dict:
        st = store or _store()
        row_id = parse_id(vid)
        if row_id is None or st.get(Table.VEHICLES, row_id) is None:
            raise VehicleNotFoundError(f"Error: vehicle with ID '{vid}' not found")
        changes = clean_vehicle_payload(payload, partial=True)
        if not changes:
            raise ValidationError("Error: nothing to update")
        row = st.update(Table.VEHICLES, row_id, changes)
        if row is None:
            raise VehicleNotFoundError(f"Error: vehicle with ID '{vid}' not found")
        return _canonical(row)

    @staticmethod
    def delete_vehicle(vid, *, store=None) -> None:
        """Delete a vehicle and the favorites pointing at it."""
        st = store or _store()
        row_id = parse_id(vid)
        if row_id is None or not st.delete(Table.VEHICLES, row_id):
            raise VehicleNotFoundError(f"Error: vehicle with ID '{vid}' not found")
        st.delete_where(Table.FAVORITES, vehicle_id=row_id)
        logger.info("Vehicle %s deleted", row_id)

    @staticmethod
    def upload_image(filename: str, data: bytes, content_type: Optional[str] = None, *, store=None) -> str:
        """Store a vehicle picture and return its public URL."""
        st = store or _store()
        return st.upload(Bucket.VEHICLE_IMAGES, filename, data, content_type)
