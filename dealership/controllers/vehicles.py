from flask import Blueprint, request, jsonify

from ..exceptions import ValidationError
from ..services.vehicle_service import VehicleService
from ..utils.decorators import admin_required, current_context
from ..utils.security import is_admin

bp = Blueprint("vehicles", __name__, url_prefix="/api/vehicles")


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Error: request body must be a JSON object")
    return data


@bp.get("")
def list_vehicles():
    """Filtered inventory: brand/type/transmission/fuel, price and year ranges, search, limit, featured."""
    q = {k: (v or "").strip() for k, v in request.args.items()}
    return jsonify({"vehicles": VehicleService.search_vehicles(q)})


@bp.get("/catalog")
def catalog():
    """One page of the catalog plus the filter options present in the inventory."""
    return jsonify(VehicleService.browse(request.args))


@bp.get("/featured")
def featured():
    limit = request.args.get("limit", type=int) or 3
    return jsonify({"vehicles": VehicleService.get_featured_vehicles(limit)})


@bp.get("/compare")
def compare():
    ids = [s for s in (request.args.get("ids") or "").split(",") if s.strip()]
    if not ids:
        raise ValidationError("Error: ids is required, e.g. ?ids=1,2")
    rows = VehicleService.compare_vehicles(ids, include_unpublished=is_admin(current_context()))
    return jsonify({"vehicles": rows})


@bp.get("/<vid>")
def vehicle_detail(vid):
    vehicle = VehicleService.get_vehicle(vid, include_unpublished=is_admin(current_context()))
    return jsonify({"vehicle": vehicle})


@bp.put("/<vid>")
@admin_required
def update_vehicle(vid):
    return jsonify({"vehicle": VehicleService.update_vehicle(vid, json_body())})
