from flask import Blueprint, jsonify

from ..exceptions import ValidationError
from ..services.user_service import UserService
from ..utils.decorators import current_context, login_required
from .vehicles import json_body

bp = Blueprint("favorites", __name__, url_prefix="/api/favorites")


@bp.get("")
def list_favorites():
    """Anonymous visitors simply have no favorites."""
    return jsonify({"favorites": UserService.get_favorite_vehicle_ids(current_context())})


@bp.post("")
@login_required
def toggle_favorite():
    vehicle_id = json_body().get("vehicleId")
    if not isinstance(vehicle_id, int) or isinstance(vehicle_id, bool):
        raise ValidationError("Error: vehicleId is required and must be a number",
                              fields={"vehicleId": "must be a number"})
    favorites = UserService.toggle_favorite(current_context(), vehicle_id)
    return jsonify({
        "success": True,
        "message": "Favorites updated.",
        "favorites": favorites,
    })
