import uuid

from flask import Blueprint, request, jsonify, current_app
from werkzeug.utils import secure_filename

from ..exceptions import ValidationError
from ..services.contact_service import ContactService
from ..services.service_service import ServiceService
from ..services.test_drive_service import TestDriveService
from ..services.vehicle_service import VehicleService
from ..utils.decorators import admin_required
from ..utils.filters import fmt_iso_local
from .vehicles import json_body

bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@bp.before_request
@admin_required
def guard():
    """Every admin route needs the admin role."""


def _uploaded_file():
    f = request.files.get("file")
    if f is None or not f.filename:
        raise ValidationError("Error: a 'file' upload is required")
    name = secure_filename(f.filename) or "upload"
    return f"{uuid.uuid4().hex[:8]}-{name}", f.read(), f.mimetype


# ---------- vehicles ----------
@bp.get("/vehicles")
def admin_vehicles():
    return jsonify({"vehicles": VehicleService.get_all_vehicles(include_unpublished=True)})


@bp.post("/vehicles")
def admin_add_vehicle():
    return jsonify({"vehicle": VehicleService.admin_create_vehicle(json_body())}), 201


@bp.put("/vehicles/<vid>")
def admin_edit_vehicle(vid):
    return jsonify({"vehicle": VehicleService.update_vehicle(vid, json_body())})


@bp.delete("/vehicles/<vid>")
def admin_delete_vehicle(vid):
    VehicleService.delete_vehicle(vid)
    return jsonify({"success": True, "message": "Vehicle deleted"})


@bp.post("/vehicles/images")
def admin_upload_vehicle_image():
    name, data, mimetype = _uploaded_file()
    return jsonify({"url": VehicleService.upload_image(name, data, mimetype)}), 201


# ---------- services ----------
@bp.post("/services")
def admin_add_service():
    return jsonify({"service": ServiceService.admin_add_service(json_body())}), 201


@bp.put("/services/<sid>")
def admin_edit_service(sid):
    return jsonify({"service": ServiceService.update_service(sid, json_body())})


@bp.delete("/services/<sid>")
def admin_delete_service(sid):
    ServiceService.delete_service(sid)
    return jsonify({"success": True, "message": "Service deleted"})


@bp.post("/services/images")
def admin_upload_service_image():
    name, data, mimetype = _uploaded_file()
    return jsonify({"url": ServiceService.upload_image(name, data, mimetype)}), 201


# ---------- inbound requests ----------
@bp.get("/contact-submissions")
def admin_contact_submissions():
    tz = current_app.config["TIMEZONE"]
    rows = ContactService.list_submissions()
    for r in rows:
        r["submitted_at_local"] = fmt_iso_local(r.get("submitted_at"), tz)
    return jsonify({"submissions": rows})


@bp.get("/test-drives")
def admin_test_drives():
    tz = current_app.config["TIMEZONE"]
    rows = TestDriveService.list_bookings()
    for r in rows:
        r["created_at_local"] = fmt_iso_local(r.get("created_at"), tz)
    return jsonify({"test_drives": rows})
