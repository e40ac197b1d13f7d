from __future__ import annotations

from dataclasses import dataclass, fields, asdict
from typing import Optional

from dealership.exceptions import SchemaError, ValidationError
from dealership.utils.validators import valid_image_path


@dataclass
class Service:
    """A workshop/after-sales service shown on the services page."""
    id: Optional[int] = None
    name: str = ""
    description: str = ""
    price: Optional[float] = None
    image_url: Optional[str] = None
    duration: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_record(cls, d: dict) -> "Service":
        """
        Wrap a stored row. Only the canonical ``name`` column is accepted;
        rows carrying ``Name``/``service_name`` style aliases are rejected.
        """
        unknown = set(d) - set(SERVICE_FIELDS)
        if unknown:
            raise SchemaError(f"Error: unexpected service fields {sorted(unknown)}")
        if "name" not in d:
            raise SchemaError("Error: service record has no 'name' field")
        return cls(**d)

    def to_dict(self) -> dict:
        return asdict(self)


SERVICE_FIELDS = tuple(f.name for f in fields(Service))


def clean_service_payload(payload: dict, partial: bool = False) -> dict:
    unknown = set(payload) - set(SERVICE_FIELDS)
    if unknown:
        raise SchemaError(f"Error: unexpected service fields {sorted(unknown)}")

    errors: dict[str, str] = {}
    out: dict = {}
    for key in ("name", "description", "image_url", "duration"):
        if key in payload:
            value = payload[key]
            out[key] = str(value).strip() if value is not None else None

    if out.get("image_url") and not valid_image_path(out["image_url"]):
        errors["image_url"] = "image_url must be an /uploads/... path or an http(s) URL"

    if "price" in payload:
        raw = payload["price"]
        if raw in (None, ""):
            out["price"] = None
        else:
            try:
                price = float(raw)
            except (TypeError, ValueError):
                errors["price"] = "price must be a number"
            else:
                if price < 0:
                    errors["price"] = "price cannot be negative"
                out["price"] = int(price) if price.is_integer() else price

    if not partial or "name" in out:
        if not out.get("name"):
            errors["name"] = "name is required"
    if not partial or "description" in out:
        if not out.get("description"):
            errors["description"] = "description is required"

    if errors:
        raise ValidationError("Error: invalid service data", fields=errors)
    return out
