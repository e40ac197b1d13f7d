from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, asdict
from typing import Optional

from dealership.exceptions import SchemaError, ValidationError
from dealership.utils.constants import MAX_VEHICLE_IMAGES
from dealership.utils.validators import valid_image_path


@dataclass
class Vehicle:
    """
    Canonical vehicle record. ``type`` is the body type (sedan, SUV, ...);
    ``image`` is the main picture and ``images`` the ordered gallery.
    """
    id: Optional[int] = None
    brand: str = ""
    model: str = ""
    year: Optional[int] = None
    price: Optional[float] = None
    type: str = ""
    transmission: str = ""
    fuel: str = ""
    mileage: Optional[int] = None
    engine: str = ""
    power: str = ""
    color: str = ""
    image: str = ""
    images: list = field(default_factory=list)
    features: list = field(default_factory=list)
    description: str = ""
    published: bool = True
    featured: bool = False
    acceleration: Optional[str] = None
    top_speed: Optional[str] = None
    seats: Optional[int] = None
    created_at: Optional[str] = None

    @classmethod
    def from_record(cls, d: dict) -> "Vehicle":
        """Wrap a stored row; unknown keys mean the schema drifted, so fail loudly."""
        unknown = set(d) - set(VEHICLE_FIELDS)
        if unknown:
            raise SchemaError(f"Error: unexpected vehicle fields {sorted(unknown)}")
        return cls(**d)

    def to_dict(self) -> dict:
        return asdict(self)

    @property
    def label(self) -> str:
        return f"{self.brand} {self.model} {self.year or ''}".strip()


VEHICLE_FIELDS = tuple(f.name for f in fields(Vehicle))
REQUIRED_ON_CREATE = ("brand", "model", "year", "price")
INT_FIELDS = ("year", "mileage", "seats")
TEXT_FIELDS = ("brand", "model", "type", "transmission", "fuel", "engine", "power",
               "color", "description", "acceleration", "top_speed")


def _number(name: str, value, errors: dict, integer: bool = False):
    if value is None or value == "":
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        num = math.nan
    if isinstance(value, bool) or not math.isfinite(num):
        errors[name] = f"{name} must be a number"
        return None
    if integer and not num.is_integer():
        errors[name] = f"{name} must be a whole number"
        return None
    if num < 0:
        errors[name] = f"{name} cannot be negative"
        return None
    return int(num) if num.is_integer() else num


def _flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def split_features(value) -> list[str]:
    """Admin forms send features as 'a, b, c'; stored rows keep a list."""
    if value is None:
        return []
    if isinstance(value, str):
        return [f.strip() for f in value.split(",") if f.strip()]
    return [str(f).strip() for f in value if str(f).strip()]


def clean_vehicle_payload(payload: dict, partial: bool = False) -> dict:
    """
    Normalize an admin add/edit payload into canonical vehicle fields.
    ``partial`` (edit) only touches the keys present in ``payload``.
    Raises SchemaError for unknown keys and ValidationError for bad values.
    """
    unknown = set(payload) - set(VEHICLE_FIELDS)
    if unknown:
        raise SchemaError(f"Error: unexpected vehicle fields {sorted(unknown)}")

    errors: dict[str, str] = {}
    out: dict = {}
    for key, value in payload.items():
        if key in ("id", "created_at"):
            continue
        if key in INT_FIELDS or key == "price":
            num = _number(key, value, errors, integer=key in INT_FIELDS)
            out[key] = int(num) if (num is not None and key in INT_FIELDS) else num
        elif key in ("published", "featured"):
            out[key] = _flag(value)
        elif key == "features":
            out[key] = split_features(value)
        elif key == "images":
            imgs = [str(i).strip() for i in (value or []) if str(i).strip()]
            if len(imgs) > MAX_VEHICLE_IMAGES:
                errors[key] = f"at most {MAX_VEHICLE_IMAGES} images are allowed"
            elif not all(valid_image_path(i) for i in imgs):
                errors[key] = "images must be /uploads/... paths or http(s) URLs"
            out[key] = imgs[:MAX_VEHICLE_IMAGES]
        elif key == "image":
            out[key] = str(value).strip() if value is not None else ""
            if out[key] and not valid_image_path(out[key]):
                errors[key] = "image must be an /uploads/... path or an http(s) URL"
        elif key in TEXT_FIELDS:
            out[key] = (str(value).strip() if value is not None else None)

    if not partial:
        for key in REQUIRED_ON_CREATE:
            if out.get(key) in (None, ""):
                errors.setdefault(key, f"{key} is required")
        out.setdefault("features", [])
        out.setdefault("images", [])

    # The main image defaults to the first gallery picture.
    if out.get("images") and not (out.get("image") or "").strip():
        out["image"] = out["images"][0]

    if errors:
        raise ValidationError("Error: invalid vehicle data", fields=errors)
    return out
