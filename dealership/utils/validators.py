"""Field-level checks shared by the public forms."""
import re
from datetime import datetime
from urllib.parse import urlparse

from dealership.utils.constants import DATE_FMT, TIME_FMT

# Compile once at module import
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_PATTERN = re.compile(r"^\d{8,9}$")
RUT_PATTERN = re.compile(r"^(\d{1,2}\.\d{3}\.\d{3}|\d{7,8})-([\dkK])$")


def clean(value) -> str:
    return str(value).strip() if value is not None else ""


def valid_email(value) -> bool:
    return bool(EMAIL_PATTERN.match(clean(value)))


def valid_phone(value) -> bool:
    """Chilean numbers without the +56 prefix: 8 or 9 digits, spaces ignored."""
    digits = clean(value).replace(" ", "")
    return bool(PHONE_PATTERN.match(digits))


def rut_check_digit(body: str) -> str:
    """Modulus-11 check digit for the numeric part of a RUT."""
    total = 0
    factor = 2
    for ch in reversed(body):
        total += int(ch) * factor
        factor = 2 if factor == 7 else factor + 1
    rest = 11 - (total % 11)
    if rest == 11:
        return "0"
    if rest == 10:
        return "K"
    return str(rest)


def valid_rut(value) -> bool:
    """Accepts 12345678-5 and 12.345.678-5; the check digit must match."""
    m = RUT_PATTERN.match(clean(value))
    if not m:
        return False
    body = m.group(1).replace(".", "")
    return rut_check_digit(body) == m.group(2).upper()


def valid_image_path(value) -> bool:
    """Accept /static/..., /uploads/... or an absolute http(s) URL."""
    s = clean(value)
    if not s:
        return False
    if s.startswith(("/static/", "/uploads/")):
        return True
    u = urlparse(s)
    return u.scheme in ("http", "https") and bool(u.netloc)


def parse_date(value):
    """Parse YYYY-MM-DD; raise ValueError on bad input."""
    return datetime.strptime(clean(value), DATE_FMT).date()


def parse_time(value) -> str:
    """Validate HH:MM and return it normalized; raise ValueError on bad input."""
    return datetime.strptime(clean(value), TIME_FMT).strftime(TIME_FMT)


def require(data: dict, names, errors: dict) -> None:
    """Record a 'required' error for every blank field in ``names``."""
    for name in names:
        if not clean(data.get(name)):
            errors.setdefault(name, f"{name} is required")
