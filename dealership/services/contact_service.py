"""Contact form and newsletter sign-up."""
from __future__ import annotations

import logging

from dealership.exceptions import ValidationError
from dealership.models.query import Query
from dealership.services.common import _store, parse_id
from dealership.utils.constants import Table
from dealership.utils.filters import utc_now_iso
from dealership.utils.validators import clean, require, valid_email, valid_phone

logger = logging.getLogger(__name__)


class ContactService:

    @staticmethod
    def submit_contact_form(form: dict, *, store=None) -> dict:
        """Validate and store one contact submission; returns the stored row."""
        errors: dict[str, str] = {}
        require(form, ("name", "email", "message"), errors)
        if "email" not in errors and not valid_email(form.get("email")):
            errors["email"] = "invalid email"
        phone = clean(form.get("phone"))
        if phone and not valid_phone(phone):
            errors["phone"] = "phone must have 8 or 9 digits"
        vehicle_id = form.get("vehicle_id")
        if vehicle_id not in (None, "") and parse_id(vehicle_id) is None:
            errors["vehicle_id"] = "vehicle_id must be a number"
        if errors:
            raise ValidationError("Error: name, email and message are required and must be valid",
                                  fields=errors)

        st = store or _store()
        row = st.insert(Table.CONTACT, {
            "name": clean(form.get("name")),
            "email": clean(form.get("email")),
            "phone": phone or None,
            "message": clean(form.get("message")),
            "vehicle_id": parse_id(vehicle_id) if vehicle_id not in (None, "") else None,
            "submitted_at": utc_now_iso(),
        })
        logger.info("Contact submission %s stored", row["id"])
        return row

    @staticmethod
    def subscribe_to_newsletter(form: dict, *, store=None) -> dict:
        email = clean(form.get("email")).lower()
        if not email:
            raise ValidationError("Error: email is required", fields={"email": "email is required"})
        if not valid_email(email):
            raise ValidationError("Error: invalid email", fields={"email": "invalid email"})
        interests = form.get("interests") or []
        if isinstance(interests, str):
            interests = [i.strip() for i in interests.split(",") if i.strip()]
        elif not isinstance(interests, list) or not all(isinstance(i, str) for i in interests):
            raise ValidationError("Error: interests must be a list of topics",
                                  fields={"interests": "must be a list of strings"})

        st = store or _store()
        if st.select(Query(Table.NEWSLETTER).where(email=email).take(1)):
            raise ValidationError("Error: this email is already subscribed",
                                  fields={"email": "already subscribed"})
        return st.insert(Table.NEWSLETTER, {
            "email": email,
            "interests": list(interests),
            "subscribed_at": utc_now_iso(),
        })

    @staticmethod
    def list_submissions(*, store=None) -> list[dict]:
        st = store or _store()
        return st.select(Query(Table.CONTACT).order("id", descending=True))
