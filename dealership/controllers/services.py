from flask import Blueprint, jsonify

from ..services.service_service import ServiceService

bp = Blueprint("services", __name__, url_prefix="/api/services")


@bp.get("")
def list_services():
    return jsonify({"services": ServiceService.get_all_services()})


@bp.get("/<sid>")
def service_detail(sid):
    return jsonify({"service": ServiceService.get_service(sid)})
