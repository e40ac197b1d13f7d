from __future__ import annotations

import logging
from datetime import timedelta

from dealership.exceptions import ValidationError
from dealership.models.query import Query
from dealership.models.user import SessionContext, ANONYMOUS
from dealership.services.common import _store, parse_id
from dealership.utils.constants import Table, TestDriveStatus, TEST_DRIVE_SLOTS, TEST_DRIVE_WINDOW_DAYS
from dealership.utils.filters import local_today, utc_now_iso, DEFAULT_TZ
from dealership.utils.validators import clean, require, valid_email, valid_phone, parse_date, parse_time

logger = logging.getLogger(__name__)

REQUIRED = ("vehicle_id", "date", "time", "name", "email")


class TestDriveService:
    __test__ = False

    @staticmethod
    def validate(form: dict, *, tz_name: str = DEFAULT_TZ) -> dict:
        """
        Check a booking request and return the normalized fields.
        Nothing is written here; every problem is reported at once.
        """
        errors: dict[str, str] = {}
        require(form, REQUIRED, errors)

        out = {
            "name": clean(form.get("name")),
            "email": clean(form.get("email")),
            "phone": clean(form.get("phone")) or None,
            "notes": clean(form.get("notes")) or None,
        }

        if "vehicle_id" not in errors:
            out["vehicle_id"] = parse_id(form.get("vehicle_id"))
            if out["vehicle_id"] is None:
                errors["vehicle_id"] = "vehicle_id must be a number"

        if "email" not in errors and not valid_email(out["email"]):
            errors["email"] = "invalid email"
        if out["phone"] and not valid_phone(out["phone"]):
            errors["phone"] = "phone must have 8 or 9 digits"

        if "date" not in errors:
            try:
                day = parse_date(form.get("date"))
            except ValueError:
                errors["date"] = "date must be YYYY-MM-DD"
            else:
                today = local_today(tz_name)
                last = today + timedelta(days=TEST_DRIVE_WINDOW_DAYS)
                if not (today <= day <= last):
                    errors["date"] = f"date must be between {today} and {last}"
                out["date"] = day.isoformat()

        if "time" not in errors:
            try:
                out["time"] = parse_time(form.get("time"))
            except ValueError:
                errors["time"] = "time must be HH:MM"
            else:
                if out["time"] not in TEST_DRIVE_SLOTS:
                    errors["time"] = f"time must be one of {', '.join(TEST_DRIVE_SLOTS)}"

        if errors:
            raise ValidationError(
                "Error: vehicle_id, date, time, name and email are required and must be valid",
                fields=errors,
            )
        return out

    @staticmethod
    def schedule_test_drive(form: dict, ctx: SessionContext = ANONYMOUS, *,
                            tz_name: str = DEFAULT_TZ, store=None) -> dict:
        """Validate, then append one pending booking."""
        data = TestDriveService.validate(form, tz_name=tz_name)
        st = store or _store()
        if st.get(Table.VEHICLES, data["vehicle_id"]) is None:
            raise ValidationError("Error: the selected vehicle does not exist",
                                  fields={"vehicle_id": "unknown vehicle"})
        row = st.insert(Table.TEST_DRIVES, {
            **data,
            "user_id": ctx.user_id,
            "status": TestDriveStatus.PENDING,
            "created_at": utc_now_iso(),
        })
        logger.info("Test drive %s booked for vehicle %s on %s %s",
                    row["id"], row["vehicle_id"], row["date"], row["time"])
        return row

    @staticmethod
    def list_bookings(*, store=None) -> list[dict]:
        st = store or _store()
        return st.select(Query(Table.TEST_DRIVES).order("id", descending=True))
