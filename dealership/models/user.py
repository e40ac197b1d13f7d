from dataclasses import dataclass
from typing import Optional

from dealership.utils.constants import Role


@dataclass(frozen=True)
class SessionContext:
    """
    Explicit identity handed to every service call that depends on who is
    asking. Built once per request from the Flask session; never re-derived
    inside services.
    """
    user_id: Optional[str] = None
    email: Optional[str] = None
    role: str = Role.USER
    name: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)


ANONYMOUS = SessionContext()


def resolve_role(record: dict, admin_email: str | None = None) -> str:
    """The configured owner email is admin regardless of the stored role."""
    email = (record.get("email") or "").strip().lower()
    if admin_email and email == admin_email.strip().lower():
        return Role.ADMIN
    return Role.ADMIN if (record.get("role") or "").lower() == Role.ADMIN else Role.USER


def public_user(record: dict, role: str | None = None) -> dict:
    """User record safe to send to the browser (no password hash)."""
    return {
        "id": record.get("id"),
        "email": record.get("email"),
        "name": record.get("name"),
        "phone": record.get("phone"),
        "role": role or record.get("role") or Role.USER,
    }
