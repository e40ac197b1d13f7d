from __future__ import annotations

import logging

from dealership.exceptions import AuthenticationError, ValidationError, VehicleNotFoundError
from dealership.models.query import Query
from dealership.models.user import SessionContext, resolve_role, public_user
from dealership.services.common import _store, parse_id
from dealership.utils.constants import Table, Role
from dealership.utils.filters import utc_now_iso
from dealership.utils.optimistic import optimistic
from dealership.utils.security import generate_hash, check_hash
from dealership.utils.validators import valid_email, valid_phone, clean

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _require_user(ctx: SessionContext) -> None:
    if not ctx.is_authenticated:
        raise AuthenticationError()


class UserService:
    """Accounts, profile and per-user favorites."""

    # ---------- accounts ----------
    @staticmethod
    def find_user(email: str, *, store=None) -> dict | None:
        st = store or _store()
        rows = st.select(Query(Table.USERS).where(email=clean(email).lower()).take(1))
        return rows[0] if rows else None

    @staticmethod
    def create_user(email: str, password: str, name: str | None = None,
                    role: str = Role.USER, *, store=None) -> dict:
        st = store or _store()
        email = clean(email).lower()
        if not valid_email(email):
            raise ValidationError("Error: invalid email", fields={"email": "invalid email"})
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError("Error: password too short",
                                  fields={"password": f"at least {MIN_PASSWORD_LENGTH} characters"})
        if UserService.find_user(email, store=st):
            raise ValidationError("Error: email already registered", fields={"email": "already exists"})
        row = st.insert(Table.USERS, {
            "email": email,
            "name": name,
            "phone": None,
            "role": role,
            "password_hash": generate_hash(password),
            "created_at": utc_now_iso(),
        })
        return public_user(row)

    @staticmethod
    def sign_in(email: str, password: str, admin_email: str | None = None, *, store=None) -> SessionContext:
        user = UserService.find_user(email, store=store)
        if not user or not check_hash(password or "", user.get("password_hash")):
            raise AuthenticationError("Error: invalid credentials")
        role = resolve_role(user, admin_email)
        logger.info("User %s signed in (role=%s)", user["id"], role)
        return SessionContext(user_id=user["id"], email=user["email"], role=role, name=user.get("name"))

    @staticmethod
    def get_current_user(ctx: SessionContext, *, store=None) -> dict | None:
        if not ctx.is_authenticated:
            return None
        st = store or _store()
        row = st.get(Table.USERS, ctx.user_id)
        return public_user(row, role=ctx.role) if row else None

    @staticmethod
    def update_profile(ctx: SessionContext, name=None, phone=None, *, store=None) -> dict:
        _require_user(ctx)
        changes = {}
        if name is not None:
            changes["name"] = clean(name) or None
        if phone is not None:
            phone = clean(phone)
            if phone and not valid_phone(phone):
                raise ValidationError("Error: invalid phone", fields={"phone": "8 or 9 digits"})
            changes["phone"] = phone or None
        st = store or _store()
        row = st.update(Table.USERS, ctx.user_id, changes) if changes else st.get(Table.USERS, ctx.user_id)
        if row is None:
            raise AuthenticationError("Error: account no longer exists")
        return public_user(row, role=ctx.role)

    @staticmethod
    def change_password(ctx: SessionContext, current: str, new: str, *, store=None) -> None:
        _require_user(ctx)
        st = store or _store()
        row = st.get(Table.USERS, ctx.user_id)
        if row is None or not check_hash(current or "", row.get("password_hash")):
            raise AuthenticationError("Error: current password is incorrect")
        if len(new or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError("Error: password too short",
                                  fields={"password": f"at least {MIN_PASSWORD_LENGTH} characters"})
        st.update(Table.USERS, ctx.user_id, {"password_hash": generate_hash(new)})

    # ---------- favorites ----------
    @staticmethod
    def get_favorite_vehicle_ids(ctx: SessionContext, *, store=None) -> list[int]:
        if not ctx.is_authenticated:
            return []
        st = store or _store()
        rows = st.select(Query(Table.FAVORITES).where(user_id=ctx.user_id).order("id"))
        return [r["vehicle_id"] for r in rows]

    @staticmethod
    def is_favorite(ctx: SessionContext, vehicle_id, *, store=None) -> bool:
        if not ctx.is_authenticated:
            return False
        st = store or _store()
        q = Query(Table.FAVORITES).where(user_id=ctx.user_id, vehicle_id=vehicle_id).take(1)
        return bool(st.select(q))

    @staticmethod
    def toggle_favorite(ctx: SessionContext, vehicle_id, *, store=None) -> list[int]:
        """
        Flip the (user, vehicle) favorite and return the caller's full favorite list.
        Concurrent toggles from several sessions are last-write-wins at the data service.
        """
        _require_user(ctx)
        st = store or _store()
        vid = parse_id(vehicle_id)
        if vid is None:
            raise ValidationError("Error: vehicleId must be a number", fields={"vehicleId": "must be a number"})
        if st.get(Table.VEHICLES, vid) is None:
            raise VehicleNotFoundError(f"Error: vehicle with ID '{vid}' not found")

        existed = UserService.is_favorite(ctx, vid, store=st)
        if existed:
            st.delete_where(Table.FAVORITES, user_id=ctx.user_id, vehicle_id=vid)
        else:
            st.insert(Table.FAVORITES, {"user_id": ctx.user_id, "vehicle_id": vid})

        if UserService.is_favorite(ctx, vid, store=st) == existed:
            logger.warning("Favorite toggle for user %s / vehicle %s did not take effect", ctx.user_id, vid)
        return UserService.get_favorite_vehicle_ids(ctx, store=st)


class FavoritesState:
    """A page's local favorite set, updated optimistically around toggle_favorite."""

    def __init__(self, ctx: SessionContext, favorites=(), store=None):
        self.ctx = ctx
        self.favorites = list(favorites)
        self.store = store

    def toggle(self, vehicle_id) -> bool:
        """
        True when the data service confirmed the flip. A failed call or a
        result that disagrees with the expected membership restores the
        previous set (a failed call also re-raises).
        """
        before = list(self.favorites)
        expect_member = vehicle_id not in before

        def apply():
            if expect_member:
                self.favorites = before + [vehicle_id]
            else:
                self.favorites = [v for v in before if v != vehicle_id]

        def compensate():
            self.favorites = before

        returned = optimistic(
            apply,
            lambda: UserService.toggle_favorite(self.ctx, vehicle_id, store=self.store),
            compensate,
        )
        if (vehicle_id in returned) != expect_member:
            logger.warning("Favorite %s: server state disagrees, reverting", vehicle_id)
            compensate()
            return False
        self.favorites = list(returned)
        return True
