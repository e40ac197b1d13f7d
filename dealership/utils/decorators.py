from functools import wraps

from flask import session, g

from dealership.exceptions import AuthenticationError, AuthorizationError
from dealership.models.user import SessionContext, ANONYMOUS
from dealership.utils.security import is_admin


def current_context() -> SessionContext:
    """Session identity for this request, built once and cached on ``g``."""
    ctx = g.get("session_ctx")
    if ctx is None:
        uid = session.get("uid")
        ctx = SessionContext(
            user_id=uid,
            email=session.get("email"),
            role=session.get("role") or "user",
            name=session.get("name"),
        ) if uid else ANONYMOUS
        g.session_ctx = ctx
    return ctx


def remember(ctx: SessionContext) -> None:
    session.clear()
    session["uid"] = ctx.user_id
    session["email"] = ctx.email
    session["role"] = ctx.role
    session["name"] = ctx.name
    g.session_ctx = ctx


def forget() -> None:
    session.clear()
    g.session_ctx = ANONYMOUS


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_context().is_authenticated:
            raise AuthenticationError("Error: please sign in first")
        return fn(*args, **kwargs)

    return wrapper


def admin_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        ctx = current_context()
        if not ctx.is_authenticated:
            raise AuthenticationError("Error: please sign in first")
        if not is_admin(ctx):
            raise AuthorizationError()
        return fn(*args, **kwargs)

    return wrapper
