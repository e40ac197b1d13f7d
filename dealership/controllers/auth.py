from flask import Blueprint, jsonify, current_app

from ..services.user_service import UserService
from ..utils.decorators import current_context, remember, forget, login_required
from ..utils.security import is_admin
from .vehicles import json_body

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@bp.post("/login")
def login():
    data = json_body()
    ctx = UserService.sign_in(
        data.get("email", ""), data.get("password", ""),
        admin_email=current_app.config.get("ADMIN_EMAIL"),
    )
    remember(ctx)
    return jsonify({"user": UserService.get_current_user(ctx), "is_admin": is_admin(ctx)})


@bp.post("/logout")
def logout():
    forget()
    return jsonify({"success": True})


@bp.get("/session")
def current_session():
    ctx = current_context()
    return jsonify({"user": UserService.get_current_user(ctx), "is_admin": is_admin(ctx)})


@bp.get("/profile")
@login_required
def profile():
    return jsonify({"user": UserService.get_current_user(current_context())})


@bp.put("/profile")
@login_required
def update_profile():
    data = json_body()
    user = UserService.update_profile(current_context(), name=data.get("name"), phone=data.get("phone"))
    return jsonify({"user": user})


@bp.post("/password")
@login_required
def change_password():
    data = json_body()
    UserService.change_password(current_context(), data.get("current_password", ""),
                                data.get("new_password", ""))
    return jsonify({"success": True, "message": "Password updated."})
