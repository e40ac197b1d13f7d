"""Date and money formatting helpers."""
from datetime import datetime, date, timezone

import pytz

DEFAULT_TZ = "America/Santiago"


def local_today(tz_name: str = DEFAULT_TZ) -> date:
    """Today's date at the dealership, not on the server."""
    return datetime.now(pytz.timezone(tz_name)).date()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def fmt_iso_local(value, tz_name: str = DEFAULT_TZ) -> str:
    """
    Format an ISO date/datetime string in the dealership's local time.
    Supports:
      - 'YYYY-MM-DD'
      - 'YYYY-MM-DDTHH:MM:SS' with or without 'Z' / '+00:00'
    On parse error, returns the original value (so the UI never goes blank).
    """
    if value is None:
        return ""

    s = str(value).strip()
    if not s:
        return ""

    s_norm = s.replace("T", " ")
    if s_norm.endswith("Z"):
        s_norm = s_norm[:-1] + "+00:00"

    if ":" not in s_norm:
        try:
            return datetime.strptime(s_norm, "%Y-%m-%d").strftime("%d/%m/%Y")
        except ValueError:
            return s

    try:
        dt = datetime.fromisoformat(s_norm)
    except ValueError:
        return s

    # If naive datetime, assume UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(pytz.timezone(tz_name)).strftime("%d/%m/%Y %H:%M")


def fmt_clp(amount) -> str:
    """Chilean pesos, no decimals, dot thousands separator: $12.990.000."""
    if amount is None or amount == "":
        return ""
    try:
        n = round(float(amount))
    except (TypeError, ValueError):
        return str(amount)
    sign = "-" if n < 0 else ""
    return f"{sign}${abs(n):,}".replace(",", ".")
