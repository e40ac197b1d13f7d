"""
Catalog filter/search composer.

``apply_filters`` is the pure predicate pass over a vehicle list;
``filter_options`` derives the dropdown values from the data itself;
``paginate`` slices the result into fixed-size pages. ``CatalogState`` ties
them together for one browsing session: it recomputes the matching list on
every change, resets to page 1 when the search or a filter changes, and
drops responses that arrive for a superseded request.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Iterable, NamedTuple, Optional

from dealership.services.common import to_float_safe, _lc
from dealership.utils.constants import WILDCARD, PAGE_SIZE

FULL_RANGE = (0, math.inf)
DISCRETE_FILTERS = ("brand", "type", "transmission", "fuel")


def _is_wildcard(value) -> bool:
    return value is None or value == "" or value == WILDCARD


def _in_range(value, bounds) -> bool:
    """Inclusive range check; a missing value never passes."""
    num = to_float_safe(value)
    if num is None:
        return False
    low, high = bounds
    return low <= num <= high


def _bounds(low, high, default):
    lo = to_float_safe(low)
    hi = to_float_safe(high)
    lo = default[0] if lo is None else lo
    hi = default[1] if hi is None else hi
    if lo > hi:
        lo, hi = hi, lo
    return lo, hi


@dataclass(frozen=True)
class FilterCriteria:
    search: str = ""
    brand: str = WILDCARD
    type: str = WILDCARD
    transmission: str = WILDCARD
    fuel: str = WILDCARD
    price_range: tuple = FULL_RANGE
    year_range: tuple = FULL_RANGE

    @classmethod
    def from_args(cls, args) -> "FilterCriteria":
        """
        Build criteria from query-string style args. Invalid min/max values
        are ignored and reversed bounds are swapped.
        """
        return cls(
            search=(args.get("search") or "").strip(),
            brand=args.get("brand") or WILDCARD,
            type=args.get("type") or WILDCARD,
            transmission=args.get("transmission") or WILDCARD,
            fuel=args.get("fuel") or WILDCARD,
            price_range=_bounds(args.get("minPrice"), args.get("maxPrice"), FULL_RANGE),
            year_range=_bounds(args.get("minYear"), args.get("maxYear"), FULL_RANGE),
        )


def matches(vehicle: dict, criteria: FilterCriteria) -> bool:
    """True iff ``vehicle`` satisfies every active criterion."""
    term = _lc(criteria.search).strip()
    if term:
        haystacks = (
            _lc(vehicle.get("brand")),
            _lc(vehicle.get("model")),
            str(vehicle.get("year") if vehicle.get("year") is not None else ""),
        )
        if not any(term in h for h in haystacks):
            return False

    for name in DISCRETE_FILTERS:
        wanted = getattr(criteria, name)
        if not _is_wildcard(wanted) and vehicle.get(name) != wanted:
            return False

    return (_in_range(vehicle.get("price"), criteria.price_range)
            and _in_range(vehicle.get("year"), criteria.year_range))


def apply_filters(vehicles: Iterable[dict], criteria: FilterCriteria) -> list[dict]:
    """Subset of ``vehicles`` matching ``criteria``, in input order. Input is not modified."""
    return [v for v in vehicles if matches(v, criteria)]


def _distinct(vehicles, name) -> list:
    return sorted({v.get(name) for v in vehicles if v.get(name) not in (None, "")})


def filter_options(vehicles: Iterable[dict]) -> dict:
    """
    Dropdown values actually present in the inventory: text fields sorted
    alphabetically, years newest first, plus the observed price/year bounds
    for the range sliders (None when no vehicle has the field).
    """
    vehicles = list(vehicles)
    prices = [p for p in (to_float_safe(v.get("price")) for v in vehicles) if p is not None]
    years = {int(y) for y in (to_float_safe(v.get("year")) for v in vehicles) if y is not None}
    return {
        "brands": _distinct(vehicles, "brand"),
        "models": _distinct(vehicles, "model"),
        "types": _distinct(vehicles, "type"),
        "transmissions": _distinct(vehicles, "transmission"),
        "fuels": _distinct(vehicles, "fuel"),
        "years": sorted(years, reverse=True),
        "price_bounds": [min(prices), max(prices)] if prices else None,
        "year_bounds": [min(years), max(years)] if years else None,
    }


class Page(NamedTuple):
    items: list
    page: int
    page_count: int
    total: int


def paginate(items: list, page: int = 1, page_size: int = PAGE_SIZE) -> Page:
    """Slice one page; out-of-range page numbers clamp to the first/last page."""
    total = len(items)
    page_count = math.ceil(total / page_size)
    page = max(1, min(int(page), page_count or 1))
    start = (page - 1) * page_size
    return Page(items[start:start + page_size], page, page_count, total)


@dataclass
class CatalogState:
    """Per-session browsing state over a candidate vehicle list."""
    vehicles: list = field(default_factory=list)
    criteria: FilterCriteria = field(default_factory=FilterCriteria)
    page: int = 1
    page_size: int = PAGE_SIZE

    def __post_init__(self):
        self._latest_token = 0
        self.vehicles = list(self.vehicles)
        self.options = filter_options(self.vehicles)
        self.matching = apply_filters(self.vehicles, self.criteria)

    # ---------- inputs ----------
    def set_vehicles(self, vehicles: Iterable[dict]) -> None:
        """New candidate list: refresh options and matches, keep the page (clamped on read)."""
        self.vehicles = list(vehicles)
        self.options = filter_options(self.vehicles)
        self._recompute()

    def set_search(self, term: str) -> None:
        self._set_criteria(search=term or "")

    def set_filter(self, name: str, value: Optional[str]) -> None:
        if name not in DISCRETE_FILTERS:
            raise KeyError(f"Unknown filter '{name}'")
        self._set_criteria(**{name: value or WILDCARD})

    def set_price_range(self, low, high) -> None:
        self._set_criteria(price_range=_bounds(low, high, FULL_RANGE))

    def set_year_range(self, low, high) -> None:
        self._set_criteria(year_range=_bounds(low, high, FULL_RANGE))

    def reset_filters(self) -> None:
        self.criteria = FilterCriteria()
        self.page = 1
        self._recompute()

    def set_page(self, page: int) -> None:
        """Only moves the window; the matching list is untouched."""
        self.page = paginate(self.matching, page, self.page_size).page

    def _set_criteria(self, **changes) -> None:
        self.criteria = replace(self.criteria, **changes)
        self.page = 1
        self._recompute()

    def _recompute(self) -> None:
        self.matching = apply_filters(self.vehicles, self.criteria)

    # ---------- request sequencing ----------
    def begin_request(self) -> int:
        """Issue a token for a fetch about to start; later tokens supersede it."""
        self._latest_token += 1
        return self._latest_token

    def receive(self, token: int, vehicles: Iterable[dict]) -> bool:
        """Apply a fetch result only if it answers the latest request."""
        if token != self._latest_token:
            return False
        self.set_vehicles(vehicles)
        return True

    # ---------- outputs ----------
    @property
    def current(self) -> Page:
        return paginate(self.matching, self.page, self.page_size)

    @property
    def page_count(self) -> int:
        return self.current.page_count

    def snapshot(self) -> dict:
        page = self.current
        return {
            "vehicles": page.items,
            "page": page.page,
            "page_count": page.page_count,
            "total": page.total,
            "options": self.options,
        }
