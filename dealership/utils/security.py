from werkzeug.security import generate_password_hash, check_password_hash

from dealership.models.user import SessionContext
from dealership.utils.constants import Role


def generate_hash(password: str) -> str:
    return generate_password_hash(password)


def check_hash(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return check_password_hash(hashed, password)
    except ValueError:
        # unknown hash method in a stored record
        return False


def is_admin(ctx: SessionContext) -> bool:
    """Single authorization predicate used by every admin-gated path."""
    return ctx.is_authenticated and ctx.role == Role.ADMIN
