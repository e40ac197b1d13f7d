"""Public form endpoints: test drive, contact, newsletter, financing."""
from flask import Blueprint, jsonify, current_app

from ..services.contact_service import ContactService
from ..services.financing_service import FinancingService
from ..services.test_drive_service import TestDriveService
from ..utils.decorators import current_context
from .vehicles import json_body

bp = Blueprint("forms", __name__, url_prefix="/api")


@bp.post("/test-drive")
def test_drive():
    booking = TestDriveService.schedule_test_drive(
        json_body(), current_context(), tz_name=current_app.config["TIMEZONE"],
    )
    return jsonify({
        "success": True,
        "message": "Test drive booked! We will contact you soon to confirm.",
        "data": booking,
    }), 201


@bp.post("/contact")
def contact():
    ContactService.submit_contact_form(json_body())
    return jsonify({
        "success": True,
        "message": "Thanks for reaching out! We received your message and will reply soon.",
    })


@bp.post("/newsletter")
def newsletter():
    ContactService.subscribe_to_newsletter(json_body())
    return jsonify({"success": True, "message": "Thanks for subscribing!"})


@bp.post("/financing/quote")
def financing_quote():
    data = json_body()
    quote = FinancingService.quote(
        data.get("price"),
        data.get("down_payment", 0),
        data.get("months"),
        data.get("annual_rate"),
    )
    return jsonify({"quote": quote.to_dict()})


@bp.post("/financing/apply")
def financing_apply():
    row = FinancingService.submit_application(json_body())
    return jsonify({
        "success": True,
        "message": "Application sent. An advisor will contact you shortly.",
        "data": {"id": row["id"], "quote": row.get("quote")},
    }), 201
