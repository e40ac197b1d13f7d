"""Shared service helpers and the data-service accessor."""
from __future__ import annotations

import math
from typing import Any, Optional

from dealership.models.store import Store

# Set by create_app(); tests swap in an isolated Store with set_data_service().
_data_service: Any = None


def set_data_service(service) -> None:
    global _data_service
    _data_service = service


def _store():
    """The configured data service (Store or RestDataService)."""
    if _data_service is not None:
        return _data_service
    return Store.instance()


# -------- converters --------
def to_float_safe(value) -> Optional[float]:
    """Safely convert to a finite float; return None if invalid, NaN or infinite."""
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None


def to_int_safe(value) -> Optional[int]:
    """Safely convert to int (accepts '2020' and 2020.0); None if invalid."""
    f = to_float_safe(value)
    if f is None or not f.is_integer():
        return None
    return int(f)


def _lc(s):
    """Safe lowercase for case-insensitive compare."""
    return (s or "").lower()


def parse_id(value) -> Optional[int]:
    """Row ids are integers; bools and fractional numbers are rejected."""
    if isinstance(value, bool):
        return None
    return to_int_safe(value)
